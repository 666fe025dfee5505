"""Shared CLI output formatters."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from mcpserve.config import ConfigError, ServerSettings, load_settings
from mcpserve.protocol.models import ToolDescriptor  # noqa: TC001

console = Console()
# stdout belongs to the stdio transport while serving.
err_console = Console(stderr=True)


def load_settings_or_exit(config_path: str | None) -> ServerSettings:
    """Load settings, printing the error and exiting with status 1 on failure."""
    try:
        return load_settings(Path(config_path) if config_path else None)
    except ConfigError as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)


def print_tools_table(descriptors: list[ToolDescriptor]) -> None:
    """Pretty-print the tool catalog as a table."""
    table = Table(title="Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Hints")

    for descriptor in descriptors:
        table.add_row(
            descriptor.name,
            _truncate(descriptor.description),
            _hints(descriptor),
        )

    console.print(table)


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data, default=str))


def _hints(descriptor: ToolDescriptor) -> str:
    annotations = descriptor.annotations
    hints = []
    if annotations.read_only_hint:
        hints.append("read-only")
    if annotations.idempotent_hint:
        hints.append("idempotent")
    if annotations.open_world_hint:
        hints.append("open-world")
    if annotations.destructive_hint:
        hints.append("destructive")
    return ", ".join(hints) or "-"


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
