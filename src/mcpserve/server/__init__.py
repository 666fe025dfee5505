"""Server layer: context, engine, resource resolvers, and transports."""

from mcpserve.server.context import ServerContext
from mcpserve.server.engine import MCPEngine
from mcpserve.server.resources import (
    FileUIResourceResolver,
    StaticUIResourceResolver,
    UIResourceResolver,
)

__all__ = [
    "FileUIResourceResolver",
    "MCPEngine",
    "ServerContext",
    "StaticUIResourceResolver",
    "UIResourceResolver",
]
