"""ServerContext: explicit owner of all mutable per-server state.

One context is built at startup and injected into the dispatcher. It holds
the response cache, the cancellation table, the tool catalog, and the
current log level, so several servers (or tests) can run side by side in one
process without sharing globals.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from mcpserve.config import ServerSettings
from mcpserve.logging_levels import PACKAGE_LOGGER, is_valid_level, level_index, to_stdlib_level
from mcpserve.runtime.cache import ResponseCache
from mcpserve.runtime.cancellation import CancellationTracker
from mcpserve.runtime.http_client import ExternalCallClient
from mcpserve.server.resources import FileUIResourceResolver, UIResourceResolver
from mcpserve.tools.executor import ToolExecutor
from mcpserve.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ServerContext:
    """Holds the services shared by every request handled by one server."""

    def __init__(
        self,
        settings: ServerSettings | None = None,
        *,
        registry: ToolRegistry | None = None,
        cache: ResponseCache | None = None,
        tracker: CancellationTracker | None = None,
        http: ExternalCallClient | None = None,
        resolver: UIResourceResolver | None = None,
    ) -> None:
        self.settings = settings if settings is not None else ServerSettings()
        self.registry = registry if registry is not None else ToolRegistry()
        self.cache = cache if cache is not None else ResponseCache(default_ttl=self.settings.cache.default_ttl)
        self.tracker = tracker if tracker is not None else CancellationTracker()
        self.http = http if http is not None else ExternalCallClient(
            timeout=self.settings.retry.timeout,
            max_retries=self.settings.retry.max_retries,
            initial_delay_ms=self.settings.retry.initial_delay_ms,
        )
        self.resolver = (
            resolver if resolver is not None else FileUIResourceResolver(self.settings.ui_resources)
        )
        self.executor = ToolExecutor(
            self.registry,
            tracker=self.tracker,
            cache=self.cache,
            http=self.http,
        )
        self.client_info: dict[str, Any] = {}
        self._log_level: str = self.settings.log_level
        self._level_lock = threading.Lock()

    # -- log level ----------------------------------------------------------

    @property
    def log_level(self) -> str:
        return self._log_level

    def set_log_level(self, level: str) -> None:
        """Set the minimum MCP severity and re-level the package logger.

        Raises:
            ValueError: If *level* is not an MCP severity.
        """
        if not is_valid_level(level):
            raise ValueError(f"Unknown log level: {level!r}")
        with self._level_lock:
            self._log_level = level
        logging.getLogger(PACKAGE_LOGGER).setLevel(to_stdlib_level(level))
        logger.info("Log level set to %s", level)

    def should_log(self, level: str) -> bool:
        """Whether a message at *level* passes the current threshold."""
        return level_index(level) >= level_index(self._log_level)

    # -- lifecycle ----------------------------------------------------------

    async def start(self) -> None:
        """Start background work; call from inside the serving event loop."""
        interval = self.settings.cache.sweep_interval
        if interval > 0:
            self.cache.start_sweeper(interval)

    async def aclose(self) -> None:
        await self.cache.stop_sweeper()
        await self.http.aclose()

    def status(self) -> dict[str, Any]:
        """Snapshot of the shared state, for diagnostics."""
        return {
            "server": {"name": self.settings.name, "version": self.settings.version},
            "logLevel": self._log_level,
            "tools": len(self.registry),
            "cache": {"entries": len(self.cache), "hits": self.cache.hits, "misses": self.cache.misses},
            "inFlight": [op.request_id for op in self.tracker.pending()],
        }
