"""Tests for the built-in demonstration tools."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from mcpserve.runtime.cache import ResponseCache
from mcpserve.runtime.cancellation import CancellationTracker
from mcpserve.runtime.http_client import ExternalCallClient, inbound_authorization
from mcpserve.tools.builtin import fetch_cache_key, fetch_json, register_builtin_tools
from mcpserve.tools.executor import ToolExecutor
from mcpserve.tools.models import ToolContext
from mcpserve.tools.registry import ToolRegistry


def _executor(http: ExternalCallClient | None = None) -> tuple[ToolExecutor, CancellationTracker]:
    registry = ToolRegistry()
    register_builtin_tools(registry)
    tracker = CancellationTracker()
    return ToolExecutor(registry, tracker=tracker, cache=ResponseCache(), http=http), tracker


class TestRegistration:
    def test_status_tool_is_optional(self) -> None:
        registry = ToolRegistry()
        register_builtin_tools(registry)
        assert [d.name for d in registry.descriptors()] == ["echo", "countdown", "fetch_json"]

        with_status = ToolRegistry()
        register_builtin_tools(with_status, status=lambda: {"ok": True})
        assert "server_status" in with_status

    def test_countdown_is_cancellable(self) -> None:
        registry = ToolRegistry()
        register_builtin_tools(registry)
        assert registry.get("countdown").cancellable
        assert not registry.get("echo").cancellable


class TestEcho:
    async def test_echo(self) -> None:
        executor, _ = _executor()
        result = await executor.execute("echo", {"message": "hi"})
        assert result.text == "hi"

    async def test_rejects_extra_arguments(self) -> None:
        executor, _ = _executor()
        result = await executor.execute("echo", {"message": "hi", "loud": True})
        assert result.is_error


class TestCountdown:
    async def test_completes(self) -> None:
        executor, _ = _executor()
        result = await executor.execute("countdown", {"steps": 3, "interval_ms": 0}, 1)
        assert result.structured_content == {"status": "completed", "progress": 3, "steps": 3}

    async def test_cancelled_midway(self) -> None:
        executor, tracker = _executor()
        task = asyncio.create_task(executor.execute("countdown", {"steps": 1000, "interval_ms": 5}, 9))
        while not tracker.is_pending(9):
            await asyncio.sleep(0)
        tracker.cancel(9)
        result = await asyncio.wait_for(task, timeout=5)
        assert result.structured_content is not None
        assert result.structured_content["status"] == "cancelled"
        assert result.structured_content["progress"] < 1000
        assert not tracker.is_pending(9)


class TestFetchJson:
    @staticmethod
    def _http(counter: list[httpx.Request]) -> ExternalCallClient:
        def handler(request: httpx.Request) -> httpx.Response:
            counter.append(request)
            return httpx.Response(200, json={"hits": len(counter)})

        return ExternalCallClient(transport=httpx.MockTransport(handler))

    async def test_cached_between_calls(self) -> None:
        requests: list[httpx.Request] = []
        executor, _ = _executor(self._http(requests))
        args = {"url": "https://example.com/data", "ttl_seconds": 60}
        first = await executor.execute("fetch_json", args)
        second = await executor.execute("fetch_json", args)
        assert first.structured_content == {"hits": 1}
        assert second.structured_content == {"hits": 1}
        assert len(requests) == 1

    async def test_zero_ttl_bypasses_cache(self) -> None:
        requests: list[httpx.Request] = []
        executor, _ = _executor(self._http(requests))
        args = {"url": "https://example.com/data", "ttl_seconds": 0}
        await executor.execute("fetch_json", args)
        await executor.execute("fetch_json", args)
        assert len(requests) == 2

    async def test_rejects_non_http_url(self) -> None:
        executor, _ = _executor()
        result = await executor.execute("fetch_json", {"url": "file:///etc/passwd"})
        assert result.is_error

    async def test_requires_http_client(self) -> None:
        with pytest.raises(RuntimeError, match="No outbound HTTP client"):
            await fetch_json({"url": "https://example.com"}, ToolContext())

    async def test_upstream_failure_is_tool_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="gone")

        executor, _ = _executor(ExternalCallClient(transport=httpx.MockTransport(handler)))
        result = await executor.execute("fetch_json", {"url": "https://example.com/x"})
        assert result.is_error
        assert "404" in result.text

    async def test_cache_is_partitioned_by_bearer_token(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"owner": request.headers.get("authorization")})

        executor, _ = _executor(ExternalCallClient(transport=httpx.MockTransport(handler)))
        args = {"url": "https://example.com/me", "ttl_seconds": 60}

        owners: list[str | None] = []
        for bearer in ("Bearer alice", "Bearer bob", "Bearer alice"):
            token = inbound_authorization.set(bearer)
            try:
                result = await executor.execute("fetch_json", args)
            finally:
                inbound_authorization.reset(token)
            assert result.structured_content is not None
            owners.append(result.structured_content["owner"])

        assert owners == ["Bearer alice", "Bearer bob", "Bearer alice"]

    def test_cache_key_hides_token(self) -> None:
        assert fetch_cache_key("https://example.com/x", None) == "GET https://example.com/x"
        key = fetch_cache_key("https://example.com/x", "Bearer secret")
        assert key.startswith("GET https://example.com/x auth:")
        assert "secret" not in key
        assert key != fetch_cache_key("https://example.com/x", "Bearer other")
