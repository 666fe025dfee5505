"""MCPEngine: the transport-agnostic entry point: raw bytes in, raw bytes out."""

from __future__ import annotations

import json
import logging
from typing import Any

from mcpserve.config import ServerSettings
from mcpserve.protocol.batch import BatchProcessor
from mcpserve.protocol.dispatcher import (
    RequestDispatcher,
    error_envelope,
    internal_error_envelope,
    parse_json,
)
from mcpserve.protocol.errors import ParseError
from mcpserve.server.context import ServerContext
from mcpserve.tools.builtin import register_builtin_tools

logger = logging.getLogger(__name__)


class MCPEngine:
    """Chooses between the batch and single-request paths for each body.

    Constructing the engine freezes the tool catalog: from here on the
    dispatcher only reads it.

    Usage::

        engine = MCPEngine(ServerContext(settings))
        reply = await engine.handle(b'{"jsonrpc":"2.0","id":1,"method":"ping"}')
        # b'{"jsonrpc":"2.0","id":1,"result":{}}'
    """

    def __init__(self, context: ServerContext) -> None:
        self.context = context
        context.registry.freeze()
        self.dispatcher = RequestDispatcher(context)
        self.batch = BatchProcessor(self.dispatcher, max_batch_size=context.settings.max_batch_size)

    @classmethod
    def from_settings(cls, settings: ServerSettings | None = None) -> MCPEngine:
        """Build a context from *settings*, add the built-in tools, and wrap it."""
        context = ServerContext(settings)
        if context.settings.builtin_tools:
            register_builtin_tools(context.registry, status=context.status)
        return cls(context)

    async def handle(self, raw: str | bytes) -> bytes | None:
        """Process one request body.

        Returns:
            The serialized response, or ``None`` when nothing should be sent
            back: a notification, an all-notification batch, or a blank body
            (taken as the client's ``initialized`` acknowledgment).
        """
        payload = await self.handle_payload(raw)
        if payload is None:
            return None
        return encode(payload)

    async def handle_payload(self, raw: str | bytes) -> dict[str, Any] | list[dict[str, Any]] | None:
        """Like :meth:`handle` but returns the decoded response structure."""
        if _is_blank(raw):
            logger.debug("Blank body treated as initialized acknowledgment")
            return None
        try:
            message = parse_json(raw)
        except ParseError as exc:
            logger.info("Rejected unparsable request body: %s", exc.data)
            return error_envelope(None, exc)

        try:
            if isinstance(message, list):
                responses = await self.batch.process(message)
                if isinstance(responses, list) and not responses:
                    return None
                return responses
            return await self.dispatcher.dispatch(message)
        except Exception as exc:
            logger.exception("Unhandled error while processing request body")
            return internal_error_envelope(None, exc)

    async def start(self) -> None:
        await self.context.start()

    async def aclose(self) -> None:
        await self.context.aclose()


def encode(payload: Any) -> bytes:
    """Serialize a response structure compactly as UTF-8 JSON."""
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str).encode("utf-8")


def _is_blank(raw: str | bytes) -> bool:
    return not raw.strip()
