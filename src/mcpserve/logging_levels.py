"""MCP log severities and their mapping onto stdlib :mod:`logging` levels."""

from __future__ import annotations

import logging
import sys

# Ordered least to most severe; comparisons use list position.
MCP_LOG_LEVELS: tuple[str, ...] = (
    "debug",
    "info",
    "notice",
    "warning",
    "error",
    "critical",
    "alert",
    "emergency",
)

_STDLIB_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "notice": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "alert": logging.CRITICAL,
    "emergency": logging.CRITICAL,
}

LOG_FORMAT = "%(asctime)s [%(levelname)-5s] %(name)s: %(message)s"
PACKAGE_LOGGER = "mcpserve"


def is_valid_level(level: object) -> bool:
    return isinstance(level, str) and level in MCP_LOG_LEVELS


def level_index(level: str) -> int:
    """Position of *level* in the severity order.

    Raises:
        ValueError: If *level* is not an MCP severity.
    """
    return MCP_LOG_LEVELS.index(level)


def to_stdlib_level(level: str) -> int:
    return _STDLIB_LEVELS[level]


def configure_logging(level: str = "info") -> None:
    """Send package logs to stderr at the given MCP severity.

    stdout is reserved for the stdio transport, so the handler always
    writes to stderr.
    """
    root = logging.getLogger(PACKAGE_LOGGER)
    if not any(getattr(h, "_mcpserve_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._mcpserve_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(to_stdlib_level(level))
