"""Error types for the tool registry and executor."""


class ToolError(Exception):
    """Base error for all tool-layer failures."""


class ToolNotFoundError(ToolError):
    """Requested tool does not exist in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class ToolArgumentError(ToolError):
    """Arguments failed validation against the tool's input schema."""

    def __init__(self, name: str, detail: str = "") -> None:
        self.name = name
        self.detail = detail
        super().__init__(f"Invalid arguments for tool '{name}'" + (f": {detail}" if detail else ""))


class DuplicateToolError(ToolError):
    """A tool with the same (case-insensitive) name is already registered."""

    def __init__(self, name: str, existing: str) -> None:
        self.name = name
        self.existing = existing
        super().__init__(f"Tool {name!r} collides with registered tool {existing!r}")


class RegistryFrozenError(ToolError):
    """The catalog is sealed; tools can only be registered at startup."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Cannot register {name!r}: tool registry is frozen")
