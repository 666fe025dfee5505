"""Server settings and the YAML loader consumed by ``mcpserve serve``."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from mcpserve import __version__

DEFAULT_PROTOCOL_VERSION = "2025-06-18"
MCP_APP_MIME_TYPE = "text/html;profile=mcp-app"

LogLevel = Literal["debug", "info", "notice", "warning", "error", "critical", "alert", "emergency"]


class ConfigError(Exception):
    """Raised when a settings file fails parsing or validation."""


class CacheSettings(BaseModel):
    """Response cache tuning."""

    default_ttl: float = Field(default=300.0, gt=0, description="Seconds an entry stays valid.")
    sweep_interval: float = Field(
        default=60.0,
        ge=0,
        description="Seconds between proactive sweeps; 0 disables the sweeper.",
    )


class RetrySettings(BaseModel):
    """Defaults for the outbound call client."""

    max_retries: int = Field(default=3, ge=0)
    initial_delay_ms: int = Field(default=500, ge=0)
    timeout: float = Field(default=30.0, gt=0)


class HttpSettings(BaseModel):
    """Bind address for the HTTP transport."""

    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=0, le=65535)
    path: str = "/mcp"


class UIResourceSettings(BaseModel):
    """A ``ui://`` resource served from a local file."""

    name: str
    path: Path
    mime_type: str = MCP_APP_MIME_TYPE
    description: str | None = None


class ServerSettings(BaseModel):
    """Top-level server configuration, usually parsed from YAML."""

    name: str = "mcpserve"
    version: str = __version__
    protocol_version: str = DEFAULT_PROTOCOL_VERSION
    instructions: str | None = None
    log_level: LogLevel = "info"
    max_batch_size: int = Field(default=100, ge=1)
    builtin_tools: bool = True
    cache: CacheSettings = Field(default_factory=CacheSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    ui_resources: dict[str, UIResourceSettings] = Field(default_factory=dict)


class SettingsLoader:
    """Load and validate a settings YAML file into :class:`ServerSettings`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> ServerSettings:
        """Read YAML, interpolate env vars, and validate.

        Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
        using :func:`os.path.expandvars` before YAML parsing. Relative
        ``ui_resources`` paths are resolved against the file's directory.

        Raises:
            ConfigError: On read errors, YAML parse errors, or schema validation failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Settings YAML must be a mapping")

        try:
            settings = ServerSettings.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc

        base_dir = self._path.parent
        for resource in settings.ui_resources.values():
            if not resource.path.is_absolute():
                resource.path = base_dir / resource.path
        return settings


def load_settings(path: Path | None) -> ServerSettings:
    """Load *path* when given, otherwise return the defaults."""
    if path is None:
        return ServerSettings()
    return SettingsLoader(path).load()
