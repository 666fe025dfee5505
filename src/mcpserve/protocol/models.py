"""MCP models: JSON-RPC 2.0 messages, tool descriptors, and tool results.

Implements the message format used by the Model Context Protocol for
discovery (``tools/list``, ``resources/list``) and execution
(``tools/call``) on the server side.
"""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, Field, StrictInt, StrictStr

RequestId = StrictInt | StrictStr

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request or notification.

    ``id`` keeps its wire type: a string id stays a string and an integer id
    stays an integer. A missing or null id marks a notification.
    """

    jsonrpc: Literal["2.0"] = "2.0"
    method: StrictStr = Field(min_length=1)
    id: RequestId | None = None
    params: dict[str, Any] | None = None

    @property
    def is_notification(self) -> bool:
        return self.id is None

    @property
    def arguments(self) -> dict[str, Any]:
        """``params`` with a missing value normalized to an empty object."""
        return self.params or {}


class JsonRpcErrorObject(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response carrying exactly one of ``result`` or ``error``."""

    jsonrpc: str = "2.0"
    id: RequestId | None = None
    result: Any = None
    error: JsonRpcErrorObject | None = None

    @classmethod
    def success(cls, request_id: int | str | None, result: Any) -> JsonRpcResponse:
        return cls(id=request_id, result=result if result is not None else {})

    @classmethod
    def failure(
        cls,
        request_id: int | str | None,
        code: int,
        message: str,
        data: Any = None,
    ) -> JsonRpcResponse:
        return cls(id=request_id, error=JsonRpcErrorObject(code=code, message=message, data=data))

    def to_wire(self) -> dict[str, Any]:
        """Serialize with ``id`` always present and only one of result/error."""
        payload: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            payload["error"] = self.error.model_dump(exclude_none=True)
        else:
            payload["result"] = self.result
        return payload


# ---------------------------------------------------------------------------
# MCP tool payloads
# ---------------------------------------------------------------------------


class ToolAnnotations(BaseModel):
    """Planning hints for callers; the executor never enforces them."""

    model_config = {"populate_by_name": True, "frozen": True}

    read_only_hint: bool = Field(default=False, alias="readOnlyHint")
    idempotent_hint: bool = Field(default=False, alias="idempotentHint")
    open_world_hint: bool = Field(default=False, alias="openWorldHint")
    destructive_hint: bool | None = Field(default=None, alias="destructiveHint")


class ToolDescriptor(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    model_config = {"populate_by_name": True, "frozen": True}

    name: str = Field(min_length=1)
    description: str = ""
    input_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        alias="inputSchema",
    )
    annotations: ToolAnnotations = Field(default_factory=ToolAnnotations)
    ui_resource_uri: str | None = Field(default=None, alias="uiResourceUri")

    def to_wire(self) -> dict[str, Any]:
        """Return a fresh wire dict; callers may mutate it freely."""
        payload = self.model_dump(by_alias=True, exclude_none=True)
        if self.ui_resource_uri:
            payload["_meta"] = {"ui": {"resourceUri": self.ui_resource_uri}}
        return payload


class TextContent(BaseModel):
    """Plain text content block."""

    type: Literal["text"] = "text"
    text: str


class CallToolResult(BaseModel):
    """The ``result`` member of a ``tools/call`` response."""

    model_config = {"populate_by_name": True}

    content: list[TextContent] = []
    is_error: bool = Field(default=False, alias="isError")
    structured_content: dict[str, Any] | None = Field(default=None, alias="structuredContent")

    @property
    def text(self) -> str:
        """Concatenated text of all content blocks."""
        return "\n".join(part.text for part in self.content)

    @classmethod
    def from_text(cls, text: str, *, is_error: bool = False) -> CallToolResult:
        return cls(content=[TextContent(text=text)], is_error=is_error)

    @classmethod
    def from_error(cls, message: str) -> CallToolResult:
        return cls.from_text(message, is_error=True)

    @classmethod
    def from_data(cls, data: dict[str, Any] | list[Any]) -> CallToolResult:
        """Render *data* as pretty JSON text and mirror it as structured content."""
        structured = data if isinstance(data, dict) else {"result": data}
        text = json.dumps(data, indent=2, default=str)
        return cls(content=[TextContent(text=text)], structured_content=structured)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# MCP resource payloads
# ---------------------------------------------------------------------------


class ResourceDescriptor(BaseModel):
    """A resource entry as returned by ``resources/list``."""

    model_config = {"populate_by_name": True}

    uri: str
    name: str
    mime_type: str = Field(default="text/plain", alias="mimeType")
    description: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ResourceContents(BaseModel):
    """One entry of the ``contents`` array returned by ``resources/read``."""

    model_config = {"populate_by_name": True}

    uri: str
    mime_type: str = Field(default="text/plain", alias="mimeType")
    text: str

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
