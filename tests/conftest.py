"""Shared fixtures: an isolated server context and engine per test."""

from __future__ import annotations

import pytest

from mcpserve.config import CacheSettings, ServerSettings
from mcpserve.protocol.dispatcher import RequestDispatcher
from mcpserve.server.context import ServerContext
from mcpserve.server.engine import MCPEngine
from mcpserve.tools.builtin import register_builtin_tools


@pytest.fixture
def settings() -> ServerSettings:
    # No background sweeper: tests drive expiry explicitly.
    return ServerSettings(cache=CacheSettings(sweep_interval=0))


@pytest.fixture
def context(settings: ServerSettings) -> ServerContext:
    ctx = ServerContext(settings)
    register_builtin_tools(ctx.registry, status=ctx.status)
    return ctx


@pytest.fixture
def engine(context: ServerContext) -> MCPEngine:
    return MCPEngine(context)


@pytest.fixture
def dispatcher(engine: MCPEngine) -> RequestDispatcher:
    return engine.dispatcher
