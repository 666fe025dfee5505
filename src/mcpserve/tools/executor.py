"""ToolExecutor: uniform invocation and error wrapping for ``tools/call``.

Every tool-level failure (unknown tool, arguments rejected by the input
schema, an exception raised by the handler) comes back as a successful
:class:`CallToolResult` with ``is_error`` set, never as a JSON-RPC error.
That keeps "the request was malformed" apart from "the operation failed".
"""

from __future__ import annotations

import inspect
import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from mcpserve.protocol.errors import InvalidRequestError
from mcpserve.protocol.models import CallToolResult
from mcpserve.runtime.errors import DuplicateOperationError
from mcpserve.tools.errors import ToolArgumentError, ToolNotFoundError
from mcpserve.tools.models import ToolContext, ToolDefinition
from mcpserve.utils.telemetry import ATTR_TOOL_IS_ERROR, ATTR_TOOL_NAME, SPAN_TOOL_CALL, get_tracer

if TYPE_CHECKING:
    from mcpserve.runtime.cache import ResponseCache
    from mcpserve.runtime.cancellation import CancellationTracker
    from mcpserve.runtime.http_client import ExternalCallClient
    from mcpserve.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class ToolExecutor:
    """Looks up, validates, and runs tools from a :class:`ToolRegistry`.

    Cancellable tools invoked with a request id are registered with the
    :class:`CancellationTracker` for the duration of the call and always
    unregistered afterwards, whatever the outcome.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        tracker: CancellationTracker | None = None,
        cache: ResponseCache | None = None,
        http: ExternalCallClient | None = None,
    ) -> None:
        self._registry = registry
        self._tracker = tracker
        self._cache = cache
        self._http = http

    async def execute(
        self,
        name: str,
        arguments: dict[str, Any],
        request_id: int | str | None = None,
    ) -> CallToolResult:
        """Run tool *name* with *arguments*.

        Raises:
            InvalidRequestError: If a cancellable call reuses a request id that
                is still in flight. That is a client bug, not a tool failure.
        """
        with _tracer.start_as_current_span(SPAN_TOOL_CALL) as span:
            span.set_attribute(ATTR_TOOL_NAME, name)
            result = await self._execute(name, arguments, request_id)
            span.set_attribute(ATTR_TOOL_IS_ERROR, result.is_error)
            return result

    async def _execute(
        self,
        name: str,
        arguments: dict[str, Any],
        request_id: int | str | None,
    ) -> CallToolResult:
        try:
            definition = self._registry.get(name)
            self._validate(definition, arguments)
        except (ToolNotFoundError, ToolArgumentError) as exc:
            logger.info("Rejected call to tool %s: %s", name, exc)
            return CallToolResult.from_error(str(exc))

        context = ToolContext(request_id=request_id, cache=self._cache, http=self._http)

        if not (definition.cancellable and request_id is not None and self._tracker is not None):
            return await self._invoke(definition, arguments, context)

        try:
            context.handle = self._tracker.register(request_id)
        except DuplicateOperationError as exc:
            raise InvalidRequestError(data=str(exc)) from exc
        try:
            return await self._invoke(definition, arguments, context)
        finally:
            self._tracker.unregister(request_id)

    async def _invoke(
        self,
        definition: ToolDefinition,
        arguments: dict[str, Any],
        context: ToolContext,
    ) -> CallToolResult:
        try:
            result = definition.handler(arguments, context)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            logger.warning("Tool %s raised %s: %s", definition.name, type(exc).__name__, exc, exc_info=True)
            return CallToolResult.from_error(f"Error: {exc}")
        return to_call_result(result)

    @staticmethod
    def _validate(definition: ToolDefinition, arguments: dict[str, Any]) -> None:
        errors = sorted(definition.validator.iter_errors(arguments), key=lambda e: list(e.path))
        if not errors:
            return
        first = errors[0]
        location = "/".join(str(part) for part in first.path)
        detail = f"{location}: {first.message}" if location else first.message
        raise ToolArgumentError(definition.name, detail)


def to_call_result(value: Any) -> CallToolResult:
    """Shape a handler's return value into a :class:`CallToolResult`.

    Non-trivial structured values are rendered as JSON text and mirrored
    untransformed in ``structured_content``.
    """
    if isinstance(value, CallToolResult):
        return value
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (dict, list)):
        if value:
            return CallToolResult.from_data(value)
        return CallToolResult.from_text(json.dumps(value))
    if value is None:
        return CallToolResult.from_text("")
    if isinstance(value, str):
        return CallToolResult.from_text(value)
    return CallToolResult.from_text(json.dumps(value, default=str))
