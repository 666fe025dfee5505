"""HTTP transport: JSON-RPC over ``POST`` with FastAPI.

Protocol outcomes live in the body: every processed request answers HTTP 200
(or 202 with no body when there is nothing to send back), including
JSON-RPC errors.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response

from mcpserve.protocol.dispatcher import error_envelope
from mcpserve.protocol.errors import InvalidRequestError
from mcpserve.runtime.http_client import inbound_authorization
from mcpserve.server.engine import MCPEngine, encode

logger = logging.getLogger(__name__)

MAX_BODY_BYTES = 2 * 1024 * 1024
JSON_MEDIA_TYPE = "application/json"


def create_app(engine: MCPEngine, *, path: str = "/mcp") -> FastAPI:
    """Build the ASGI app serving *engine* at *path*."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await engine.start()
        try:
            yield
        finally:
            await engine.aclose()

    settings = engine.context.settings
    app = FastAPI(title=settings.name, version=settings.version, lifespan=lifespan)

    @app.post(path)
    async def rpc(request: Request) -> Response:
        body = await request.body()
        if len(body) > MAX_BODY_BYTES:
            logger.warning("Rejected %d byte request body", len(body))
            envelope = error_envelope(None, InvalidRequestError(data="Request too large"))
            return Response(content=encode(envelope), media_type=JSON_MEDIA_TYPE)

        token = inbound_authorization.set(request.headers.get("authorization"))
        try:
            reply = await engine.handle(body)
        finally:
            inbound_authorization.reset(token)

        if reply is None:
            return Response(status_code=202)
        return Response(content=reply, media_type=JSON_MEDIA_TYPE)

    @app.get("/health")
    async def health() -> dict[str, object]:
        return {"ok": True, "name": settings.name, "version": settings.version}

    return app


def run_http(engine: MCPEngine, *, host: str, port: int, path: str = "/mcp") -> None:
    """Serve *engine* with uvicorn until interrupted."""
    logger.info("Serving MCP over HTTP on http://%s:%d%s", host, port, path)
    uvicorn.run(create_app(engine, path=path), host=host, port=port, log_level="warning")
