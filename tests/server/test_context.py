"""Tests for ServerContext."""

from __future__ import annotations

import logging

import pytest

from mcpserve.config import CacheSettings, ServerSettings
from mcpserve.server.context import ServerContext
from mcpserve.server.resources import FileUIResourceResolver, StaticUIResourceResolver


class TestLogLevel:
    def test_initial_level_from_settings(self) -> None:
        assert ServerContext(ServerSettings(log_level="error")).log_level == "error"

    def test_set_level_relevels_package_logger(self) -> None:
        context = ServerContext()
        try:
            context.set_log_level("debug")
            assert context.log_level == "debug"
            assert logging.getLogger("mcpserve").level == logging.DEBUG
        finally:
            context.set_log_level("info")

    def test_invalid_level(self) -> None:
        with pytest.raises(ValueError, match="bogus"):
            ServerContext().set_log_level("bogus")

    def test_should_log(self) -> None:
        context = ServerContext(ServerSettings(log_level="warning"))
        assert context.should_log("error")
        assert context.should_log("warning")
        assert not context.should_log("info")


class TestServices:
    def test_defaults(self) -> None:
        context = ServerContext(ServerSettings(cache=CacheSettings(default_ttl=12)))
        assert context.cache.default_ttl == 12
        assert isinstance(context.resolver, FileUIResourceResolver)
        assert context.http.max_retries == 3

    def test_injected_services(self) -> None:
        resolver = StaticUIResourceResolver()
        context = ServerContext(resolver=resolver)
        assert context.resolver is resolver

    def test_status(self) -> None:
        context = ServerContext()
        context.tracker.register("op")
        status = context.status()
        assert status["logLevel"] == "info"
        assert status["inFlight"] == ["op"]
        assert status["cache"]["entries"] == 0


class TestLifecycle:
    async def test_start_and_close(self) -> None:
        context = ServerContext(ServerSettings(cache=CacheSettings(sweep_interval=0.01)))
        await context.start()
        await context.aclose()

    async def test_start_without_sweeper(self) -> None:
        context = ServerContext(ServerSettings(cache=CacheSettings(sweep_interval=0)))
        await context.start()
        await context.aclose()
