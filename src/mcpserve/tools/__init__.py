"""Tool layer: static catalog, invocation, and the built-in tools."""

from mcpserve.tools.errors import (
    DuplicateToolError,
    RegistryFrozenError,
    ToolArgumentError,
    ToolError,
    ToolNotFoundError,
)
from mcpserve.tools.executor import ToolExecutor, to_call_result
from mcpserve.tools.models import ToolContext, ToolDefinition, ToolHandler
from mcpserve.tools.registry import ToolRegistry

__all__ = [
    "DuplicateToolError",
    "RegistryFrozenError",
    "ToolArgumentError",
    "ToolContext",
    "ToolDefinition",
    "ToolError",
    "ToolExecutor",
    "ToolHandler",
    "ToolNotFoundError",
    "ToolRegistry",
    "to_call_result",
]
