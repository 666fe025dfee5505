"""mcpserve: JSON-RPC 2.0 / MCP request dispatch and execution engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from mcpserve.server.context import ServerContext as ServerContext
    from mcpserve.server.engine import MCPEngine as MCPEngine
    from mcpserve.tools.registry import ToolRegistry as ToolRegistry

_LAZY_EXPORTS = {
    "MCPEngine": "mcpserve.server.engine",
    "ServerContext": "mcpserve.server.context",
    "ToolRegistry": "mcpserve.tools.registry",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'mcpserve' has no attribute {name!r}")
