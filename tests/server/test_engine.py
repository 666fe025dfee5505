"""Tests for MCPEngine body handling."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest

from mcpserve.config import ServerSettings
from mcpserve.server.engine import MCPEngine, encode


class TestHandle:
    async def test_single_request_bytes(self, engine: MCPEngine) -> None:
        reply = await engine.handle(b'{"jsonrpc":"2.0","id":1,"method":"ping"}')
        assert reply == b'{"jsonrpc":"2.0","id":1,"result":{}}'

    async def test_scenario_echo(self, engine: MCPEngine) -> None:
        body = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "tools/call",
            "params": {"name": "echo", "arguments": {"message": "hi"}},
        }
        reply = await engine.handle(json.dumps(body))
        assert reply is not None
        result = json.loads(reply)["result"]
        assert result["isError"] is False
        assert "hi" in result["content"][0]["text"]

    async def test_scenario_unknown_tool(self, engine: MCPEngine) -> None:
        body = {"jsonrpc": "2.0", "id": 2, "method": "tools/call", "params": {"name": "nope", "arguments": {}}}
        reply = await engine.handle(json.dumps(body))
        assert reply is not None
        result = json.loads(reply)["result"]
        assert result["isError"] is True
        assert "Unknown tool" in result["content"][0]["text"]

    async def test_scenario_bad_log_level(self, engine: MCPEngine) -> None:
        body = {"jsonrpc": "2.0", "id": 3, "method": "logging/setLevel", "params": {"level": "bogus"}}
        reply = await engine.handle(json.dumps(body))
        assert reply is not None
        assert json.loads(reply)["error"]["code"] == -32602

    @pytest.mark.parametrize("raw", [b"", "", "  \n", b"\t"])
    async def test_blank_body_is_acknowledged(self, engine: MCPEngine, raw: str | bytes) -> None:
        assert await engine.handle(raw) is None

    async def test_invalid_json(self, engine: MCPEngine) -> None:
        reply = await engine.handle("{oops")
        assert reply is not None
        payload = json.loads(reply)
        assert payload["id"] is None
        assert payload["error"]["code"] == -32700

    async def test_scalar_body(self, engine: MCPEngine) -> None:
        payload = await engine.handle_payload("42")
        assert isinstance(payload, dict)
        assert payload["error"]["code"] == -32600

    async def test_notification(self, engine: MCPEngine) -> None:
        assert await engine.handle('{"jsonrpc":"2.0","method":"notifications/initialized"}') is None


class TestBatch:
    async def test_batch(self, engine: MCPEngine) -> None:
        raw = json.dumps(
            [
                {"jsonrpc": "2.0", "id": None, "method": "ping"},
                {"jsonrpc": "2.0", "id": 5, "method": "ping"},
            ]
        )
        reply = await engine.handle(raw)
        assert reply is not None
        assert json.loads(reply) == [{"jsonrpc": "2.0", "id": 5, "result": {}}]

    async def test_all_notification_batch(self, engine: MCPEngine) -> None:
        raw = json.dumps([{"jsonrpc": "2.0", "method": "ping"}])
        assert await engine.handle(raw) is None

    async def test_empty_batch(self, engine: MCPEngine) -> None:
        payload = await engine.handle_payload("[]")
        assert isinstance(payload, dict)
        assert payload["error"]["code"] == -32600

    async def test_batch_limit_from_settings(self) -> None:
        engine = MCPEngine.from_settings(ServerSettings(max_batch_size=1))
        payload = await engine.handle_payload(
            json.dumps([{"jsonrpc": "2.0", "id": i, "method": "ping"} for i in range(2)])
        )
        assert isinstance(payload, dict)
        assert payload["error"]["code"] == -32600


class TestConstruction:
    def test_from_settings_registers_builtins(self) -> None:
        engine = MCPEngine.from_settings()
        assert "echo" in engine.context.registry
        assert engine.context.registry.frozen

    def test_builtins_can_be_disabled(self) -> None:
        engine = MCPEngine.from_settings(ServerSettings(builtin_tools=False))
        assert len(engine.context.registry) == 0

    def test_engines_do_not_share_state(self) -> None:
        first = MCPEngine.from_settings()
        second = MCPEngine.from_settings()
        first.context.cache.set("k", "v", 30)
        assert "k" not in second.context.cache
        assert first.context.tracker is not second.context.tracker


class TestGuard:
    async def test_unexpected_error_is_internal_error(self, engine: MCPEngine) -> None:
        with patch.object(engine.batch, "process", AsyncMock(side_effect=RuntimeError("explode"))):
            payload = await engine.handle_payload('[{"jsonrpc":"2.0","id":1,"method":"ping"}]')
        assert isinstance(payload, dict)
        assert payload["error"]["code"] == -32603
        assert payload["error"]["data"] == "RuntimeError: explode"


def test_encode_is_compact_utf8() -> None:
    assert encode({"a": "é", "b": [1]}) == '{"a":"é","b":[1]}'.encode()
