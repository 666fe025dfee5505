"""BatchProcessor: fans a JSON-RPC array out to the RequestDispatcher."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from mcpserve.protocol.dispatcher import error_envelope
from mcpserve.protocol.errors import InvalidRequestError
from mcpserve.utils.telemetry import ATTR_BATCH_SIZE, SPAN_BATCH, get_tracer

if TYPE_CHECKING:
    from mcpserve.protocol.dispatcher import RequestDispatcher

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class BatchProcessor:
    """Dispatches every element of a batch and reassembles the responses.

    Elements run concurrently, so no ordering is implied between their side
    effects, but response positions follow input positions. Elements
    without an id are dispatched for their side effects and produce no entry.
    """

    def __init__(self, dispatcher: RequestDispatcher, *, max_batch_size: int | None = None) -> None:
        self._dispatcher = dispatcher
        self._max_batch_size = max_batch_size

    async def process(self, items: list[Any]) -> list[dict[str, Any]] | dict[str, Any]:
        """Process a decoded JSON array.

        Returns:
            The ordered list of responses (possibly empty when every element
            is a notification), or a single ``-32600`` envelope when the batch
            itself is invalid.
        """
        if not items:
            return error_envelope(None, InvalidRequestError(data="Empty batch"))
        if self._max_batch_size is not None and len(items) > self._max_batch_size:
            return error_envelope(
                None,
                InvalidRequestError(data=f"Batch of {len(items)} exceeds limit of {self._max_batch_size}"),
            )

        with _tracer.start_as_current_span(SPAN_BATCH) as span:
            span.set_attribute(ATTR_BATCH_SIZE, len(items))
            outcomes = await asyncio.gather(*[self._process_one(item) for item in items])

        responses = [response for response in outcomes if response is not None]
        logger.debug("Batch of %d produced %d responses", len(items), len(responses))
        return responses

    async def _process_one(self, item: Any) -> dict[str, Any] | None:
        if not isinstance(item, dict):
            return error_envelope(None, InvalidRequestError())
        response = await self._dispatcher.dispatch(item)
        if item.get("id") is None:
            return None
        return response
