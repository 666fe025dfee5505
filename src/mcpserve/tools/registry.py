"""ToolRegistry: the static catalog of invocable tools.

The catalog is built once at startup and frozen before the first request;
the dispatcher only ever reads it. Names are unique case-sensitive keys, and
lookups fall back to a case-insensitive match.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from mcpserve.protocol.models import ToolAnnotations, ToolDescriptor
from mcpserve.tools.errors import DuplicateToolError, RegistryFrozenError, ToolNotFoundError
from mcpserve.tools.models import ToolDefinition, ToolHandler

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Name-to-definition table with an explicit registration step.

    Usage::

        registry = ToolRegistry()

        @registry.tool("echo", input_schema={...}, annotations=ToolAnnotations(read_only_hint=True))
        async def echo(arguments, context):
            return arguments["message"]

        registry.freeze()
        registry.get("ECHO").name  # "echo"
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        self._folded: dict[str, str] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(
        self,
        descriptor: ToolDescriptor,
        handler: ToolHandler,
        *,
        cancellable: bool = False,
    ) -> ToolDefinition:
        """Add a tool to the catalog.

        Raises:
            RegistryFrozenError: After :meth:`freeze` has been called.
            DuplicateToolError: If the name collides, ignoring case, with a registered tool.
            jsonschema.SchemaError: If the input schema itself is invalid.
        """
        name = descriptor.name
        if self._frozen:
            raise RegistryFrozenError(name)
        existing = self._folded.get(name.casefold())
        if existing is not None:
            raise DuplicateToolError(name, existing)

        definition = ToolDefinition(descriptor=descriptor, handler=handler, cancellable=cancellable)
        self._tools[name] = definition
        self._folded[name.casefold()] = name
        logger.debug("Registered tool %s", name)
        return definition

    def tool(
        self,
        name: str,
        *,
        description: str = "",
        input_schema: dict[str, Any] | None = None,
        annotations: ToolAnnotations | None = None,
        ui_resource_uri: str | None = None,
        cancellable: bool = False,
    ) -> Callable[[ToolHandler], ToolHandler]:
        """Decorator form of :meth:`register`."""

        def decorator(handler: ToolHandler) -> ToolHandler:
            descriptor = ToolDescriptor(
                name=name,
                description=description or (handler.__doc__ or "").strip(),
                input_schema=input_schema or {"type": "object", "properties": {}},
                annotations=annotations or ToolAnnotations(),
                ui_resource_uri=ui_resource_uri,
            )
            self.register(descriptor, handler, cancellable=cancellable)
            return handler

        return decorator

    def freeze(self) -> None:
        """Seal the catalog; later registrations raise."""
        self._frozen = True

    def get(self, name: str) -> ToolDefinition:
        """Look up *name* exactly, then ignoring case.

        Raises:
            ToolNotFoundError: If no tool matches.
        """
        definition = self._tools.get(name)
        if definition is not None:
            return definition
        canonical = self._folded.get(name.casefold())
        if canonical is None:
            raise ToolNotFoundError(name)
        return self._tools[canonical]

    def descriptors(self) -> list[ToolDescriptor]:
        """Return the catalog in registration order."""
        return [definition.descriptor for definition in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.casefold() in self._folded

    def __len__(self) -> int:
        return len(self._tools)
