"""Tests for the JSON-RPC and MCP pydantic models."""

from __future__ import annotations

import pytest
from pydantic import BaseModel, ValidationError

from mcpserve.protocol.models import (
    CallToolResult,
    JsonRpcRequest,
    JsonRpcResponse,
    ResourceContents,
    ResourceDescriptor,
    ToolAnnotations,
    ToolDescriptor,
)


class TestJsonRpcRequest:
    def test_string_id_stays_string(self) -> None:
        req = JsonRpcRequest.model_validate({"jsonrpc": "2.0", "id": "7", "method": "ping"})
        assert req.id == "7"
        assert isinstance(req.id, str)

    def test_integer_id_stays_integer(self) -> None:
        req = JsonRpcRequest.model_validate({"jsonrpc": "2.0", "id": 7, "method": "ping"})
        assert req.id == 7
        assert isinstance(req.id, int)

    def test_missing_and_null_id_are_notifications(self) -> None:
        assert JsonRpcRequest(method="ping").is_notification
        assert JsonRpcRequest.model_validate({"method": "ping", "id": None}).is_notification

    @pytest.mark.parametrize("bad_id", [1.5, True, [1], {"a": 1}])
    def test_rejects_non_scalar_ids(self, bad_id: object) -> None:
        with pytest.raises(ValidationError):
            JsonRpcRequest.model_validate({"jsonrpc": "2.0", "id": bad_id, "method": "ping"})

    def test_rejects_wrong_version(self) -> None:
        with pytest.raises(ValidationError):
            JsonRpcRequest.model_validate({"jsonrpc": "1.0", "id": 1, "method": "ping"})

    def test_rejects_empty_or_non_string_method(self) -> None:
        with pytest.raises(ValidationError):
            JsonRpcRequest.model_validate({"id": 1, "method": ""})
        with pytest.raises(ValidationError):
            JsonRpcRequest.model_validate({"id": 1, "method": 42})

    def test_arguments_default_to_empty(self) -> None:
        assert JsonRpcRequest(method="ping").arguments == {}


class TestJsonRpcResponse:
    def test_success_wire_shape(self) -> None:
        wire = JsonRpcResponse.success(3, {"ok": True}).to_wire()
        assert wire == {"jsonrpc": "2.0", "id": 3, "result": {"ok": True}}

    def test_success_with_none_result_is_empty_object(self) -> None:
        assert JsonRpcResponse.success(1, None).to_wire()["result"] == {}

    def test_failure_wire_shape(self) -> None:
        wire = JsonRpcResponse.failure("a", -32601, "Method not found", "nope").to_wire()
        assert wire == {
            "jsonrpc": "2.0",
            "id": "a",
            "error": {"code": -32601, "message": "Method not found", "data": "nope"},
        }
        assert "result" not in wire

    def test_failure_omits_missing_data(self) -> None:
        wire = JsonRpcResponse.failure(None, -32600, "Invalid Request").to_wire()
        assert wire["id"] is None
        assert "data" not in wire["error"]


class TestToolDescriptor:
    def test_wire_uses_camel_case(self) -> None:
        descriptor = ToolDescriptor(
            name="echo",
            description="Echo",
            input_schema={"type": "object"},
            annotations=ToolAnnotations(read_only_hint=True),
        )
        wire = descriptor.to_wire()
        assert wire["inputSchema"] == {"type": "object"}
        assert wire["annotations"] == {
            "readOnlyHint": True,
            "idempotentHint": False,
            "openWorldHint": False,
        }
        assert "_meta" not in wire

    def test_ui_resource_in_meta(self) -> None:
        descriptor = ToolDescriptor(name="chart", ui_resource_uri="ui://chart")
        wire = descriptor.to_wire()
        assert wire["_meta"] == {"ui": {"resourceUri": "ui://chart"}}

    def test_default_schema_is_object(self) -> None:
        assert ToolDescriptor(name="x").input_schema == {"type": "object", "properties": {}}

    def test_accepts_aliases(self) -> None:
        descriptor = ToolDescriptor.model_validate(
            {"name": "x", "inputSchema": {"type": "object"}, "annotations": {"destructiveHint": True}}
        )
        assert descriptor.annotations.destructive_hint is True


class TestCallToolResult:
    def test_from_text(self) -> None:
        result = CallToolResult.from_text("hi")
        assert result.to_wire() == {"content": [{"type": "text", "text": "hi"}], "isError": False}

    def test_from_error(self) -> None:
        result = CallToolResult.from_error("boom")
        assert result.is_error
        assert result.text == "boom"

    def test_from_data_dict(self) -> None:
        result = CallToolResult.from_data({"a": 1})
        assert result.structured_content == {"a": 1}
        assert '"a": 1' in result.text

    def test_from_data_list_is_wrapped(self) -> None:
        result = CallToolResult.from_data([1, 2])
        assert result.to_wire()["structuredContent"] == {"result": [1, 2]}


class TestResources:
    def test_descriptor_wire(self) -> None:
        wire = ResourceDescriptor(uri="ui://a", name="A", mime_type="text/html").to_wire()
        assert wire == {"uri": "ui://a", "name": "A", "mimeType": "text/html"}

    def test_contents_wire(self) -> None:
        wire = ResourceContents(uri="ui://a", text="<p/>").to_wire()
        assert wire == {"uri": "ui://a", "mimeType": "text/plain", "text": "<p/>"}


def test_models_are_pydantic() -> None:
    assert issubclass(JsonRpcRequest, BaseModel)
