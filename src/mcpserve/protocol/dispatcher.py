"""RequestDispatcher: routes one JSON-RPC object to its method handler.

The method table is an explicit dict built once in ``__init__``; the batch
path goes through the very same table. Protocol faults become JSON-RPC
``error`` envelopes, tool faults stay inside successful ``tools/call``
results, and nothing raised by a handler ever escapes :meth:`dispatch`.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from mcpserve.logging_levels import MCP_LOG_LEVELS, is_valid_level
from mcpserve.protocol.errors import (
    INTERNAL_ERROR,
    InvalidParamsError,
    InvalidRequestError,
    JsonRpcError,
    MethodNotFoundError,
    ParseError,
)
from mcpserve.protocol.models import JsonRpcRequest, JsonRpcResponse, ResourceContents
from mcpserve.utils.telemetry import ATTR_ERROR_CODE, SPAN_REQUEST, get_tracer, request_attributes

if TYPE_CHECKING:
    from mcpserve.server.context import ServerContext

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

Handler = Callable[[JsonRpcRequest], Awaitable[Any]]

MAX_DIAGNOSTIC_LENGTH = 200


class RequestDispatcher:
    """Turns one parsed JSON value into one response envelope (or none).

    Usage::

        dispatcher = RequestDispatcher(context)
        response = await dispatcher.dispatch({"jsonrpc": "2.0", "id": 1, "method": "ping"})
        # {"jsonrpc": "2.0", "id": 1, "result": {}}
    """

    def __init__(self, context: ServerContext) -> None:
        self._context = context
        self._handlers: dict[str, Handler] = {
            "initialize": self._initialize,
            "initialized": self._acknowledge,
            "notifications/initialized": self._acknowledge,
            "notifications/cancelled": self._cancelled,
            "ping": self._acknowledge,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
            "resources/list": self._list_resources,
            "resources/templates/list": self._list_resource_templates,
            "resources/read": self._read_resource,
            "prompts/list": self._list_prompts,
            "prompts/get": self._get_prompt,
            "completion/complete": self._complete,
            "logging/setLevel": self._set_level,
        }

    @property
    def methods(self) -> list[str]:
        return list(self._handlers)

    async def dispatch_text(self, raw: str | bytes) -> dict[str, Any] | None:
        """Parse *raw* and dispatch it. Empty or invalid JSON yields ``-32700``."""
        try:
            message = parse_json(raw)
        except ParseError as exc:
            return error_envelope(None, exc)
        return await self.dispatch(message)

    async def dispatch(self, message: Any) -> dict[str, Any] | None:
        """Dispatch one JSON value.

        Returns:
            The response envelope, or ``None`` for a valid notification.
        """
        try:
            return await self._dispatch(message)
        except Exception as exc:
            logger.exception("Unhandled error while dispatching request")
            return internal_error_envelope(request_id_of(message), exc)

    async def _dispatch(self, message: Any) -> dict[str, Any] | None:
        if not isinstance(message, dict):
            return error_envelope(None, InvalidRequestError())
        try:
            request = JsonRpcRequest.model_validate(message)
        except ValidationError as exc:
            return error_envelope(request_id_of(message), InvalidRequestError(data=_summarize(exc)))

        attributes = request_attributes(request.method, request.id)
        with _tracer.start_as_current_span(SPAN_REQUEST, attributes=attributes) as span:
            try:
                result = await self._invoke(request)
            except JsonRpcError as exc:
                span.set_attribute(ATTR_ERROR_CODE, exc.code)
                if request.is_notification:
                    logger.info("Notification %s failed: %s", request.method, exc.message)
                    return None
                return error_envelope(request.id, exc)
            except Exception as exc:
                span.set_attribute(ATTR_ERROR_CODE, INTERNAL_ERROR)
                logger.exception("Handler for %s raised", request.method)
                if request.is_notification:
                    return None
                return internal_error_envelope(request.id, exc)

        if request.is_notification:
            return None
        return JsonRpcResponse.success(request.id, result).to_wire()

    async def _invoke(self, request: JsonRpcRequest) -> Any:
        handler = self._handlers.get(request.method)
        if handler is None:
            raise MethodNotFoundError(request.method)
        logger.debug("Dispatching %s (id=%r)", request.method, request.id)
        return await handler(request)

    # -- lifecycle ----------------------------------------------------------

    async def _initialize(self, request: JsonRpcRequest) -> dict[str, Any]:
        params = request.arguments
        settings = self._context.settings

        requested = params.get("protocolVersion")
        version = requested if isinstance(requested, str) and requested else settings.protocol_version

        client_info = params.get("clientInfo")
        if isinstance(client_info, dict):
            self._context.client_info = dict(client_info)
            logger.info("Client connected: %s %s", client_info.get("name"), client_info.get("version"))

        result: dict[str, Any] = {
            "protocolVersion": version,
            "capabilities": {
                "tools": {"listChanged": False},
                "resources": {"subscribe": False, "listChanged": False},
                "prompts": {"listChanged": False},
                "logging": {},
                "completions": {},
            },
            "serverInfo": {"name": settings.name, "version": settings.version},
        }
        if settings.instructions:
            result["instructions"] = settings.instructions
        return result

    async def _acknowledge(self, request: JsonRpcRequest) -> dict[str, Any]:
        return {}

    async def _cancelled(self, request: JsonRpcRequest) -> dict[str, Any]:
        target = request.arguments.get("requestId")
        if isinstance(target, (int, str)) and not isinstance(target, bool):
            found = self._context.tracker.cancel(target)
            reason = request.arguments.get("reason")
            logger.info("Cancel %r (found=%s, reason=%s)", target, found, reason)
        return {}

    # -- tools --------------------------------------------------------------

    async def _list_tools(self, request: JsonRpcRequest) -> dict[str, Any]:
        # ``cursor`` is accepted and ignored: the catalog is small and static.
        return {"tools": [descriptor.to_wire() for descriptor in self._context.registry.descriptors()]}

    async def _call_tool(self, request: JsonRpcRequest) -> dict[str, Any]:
        params = request.arguments
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidParamsError("tools/call requires a string 'name'")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        elif not isinstance(arguments, dict):
            raise InvalidParamsError("tools/call 'arguments' must be an object")

        result = await self._context.executor.execute(name, arguments, request.id)
        return result.to_wire()

    # -- resources ----------------------------------------------------------

    async def _list_resources(self, request: JsonRpcRequest) -> dict[str, Any]:
        resources = self._context.resolver.list_resources()
        return {"resources": [resource.to_wire() for resource in resources]}

    async def _list_resource_templates(self, request: JsonRpcRequest) -> dict[str, Any]:
        return {"resourceTemplates": []}

    async def _read_resource(self, request: JsonRpcRequest) -> dict[str, Any]:
        uri = request.arguments.get("uri")
        if not isinstance(uri, str) or not uri:
            raise InvalidParamsError("resources/read requires a string 'uri'")
        loop = asyncio.get_running_loop()
        contents = await loop.run_in_executor(None, self._context.resolver.read, uri)
        if contents is None:
            contents = ResourceContents(uri=uri, mime_type="text/plain", text=f"Unknown resource: {uri}")
        return {"contents": [contents.to_wire()]}

    # -- prompts & completion -----------------------------------------------

    async def _list_prompts(self, request: JsonRpcRequest) -> dict[str, Any]:
        return {"prompts": []}

    async def _get_prompt(self, request: JsonRpcRequest) -> dict[str, Any]:
        raise InvalidParamsError(f"Unknown prompt: {request.arguments.get('name')}")

    async def _complete(self, request: JsonRpcRequest) -> dict[str, Any]:
        return {"completion": {"values": [], "total": 0, "hasMore": False}}

    # -- logging ------------------------------------------------------------

    async def _set_level(self, request: JsonRpcRequest) -> dict[str, Any]:
        level = request.arguments.get("level")
        if not is_valid_level(level):
            raise InvalidParamsError(
                f"Invalid log level: {level!r}",
                data={"validLevels": list(MCP_LOG_LEVELS)},
            )
        self._context.set_log_level(level)
        return {}


# ---------------------------------------------------------------------------
# Envelope helpers
# ---------------------------------------------------------------------------


def parse_json(raw: str | bytes) -> Any:
    """Decode a request body.

    Raises:
        ParseError: If *raw* is blank or not valid JSON.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(data="Request body is not valid UTF-8") from exc
    if not raw.strip():
        raise ParseError(data="Empty request body")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ParseError(data=str(exc)) from exc


def request_id_of(message: Any) -> int | str | None:
    """Best-effort id of a possibly malformed request, for error envelopes."""
    if not isinstance(message, dict):
        return None
    request_id = message.get("id")
    if isinstance(request_id, bool) or not isinstance(request_id, (int, str)):
        return None
    return request_id


def error_envelope(request_id: int | str | None, error: JsonRpcError) -> dict[str, Any]:
    return JsonRpcResponse.failure(request_id, error.code, error.message, error.data).to_wire()


def internal_error_envelope(request_id: int | str | None, exc: BaseException) -> dict[str, Any]:
    return JsonRpcResponse.failure(
        request_id,
        INTERNAL_ERROR,
        "Internal error",
        diagnostic(exc),
    ).to_wire()


def diagnostic(exc: BaseException) -> str:
    """``"<Type>: <message>"`` capped at :data:`MAX_DIAGNOSTIC_LENGTH` characters."""
    text = f"{type(exc).__name__}: {exc}"
    if len(text) <= MAX_DIAGNOSTIC_LENGTH:
        return text
    return text[: MAX_DIAGNOSTIC_LENGTH - 3] + "..."


def _summarize(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)[:MAX_DIAGNOSTIC_LENGTH]
