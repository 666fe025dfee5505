"""Tool definitions and the per-call context lent to tool handlers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from jsonschema import Draft202012Validator

from mcpserve.protocol.models import ToolDescriptor

if TYPE_CHECKING:
    from mcpserve.runtime.cache import ResponseCache
    from mcpserve.runtime.cancellation import CancellationHandle
    from mcpserve.runtime.http_client import ExternalCallClient

# handler(arguments, context) -> result; may be sync or async.
ToolHandler = Callable[[dict[str, Any], "ToolContext"], Any]


@dataclass
class ToolContext:
    """Services a tool borrows for the duration of one call.

    ``handle`` is set only for cancellable tools invoked with a request id.
    Tools poll ``handle.cancelled`` but never own the tracker entry.
    """

    request_id: int | str | None = None
    handle: CancellationHandle | None = None
    cache: ResponseCache | None = None
    http: ExternalCallClient | None = None
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("mcpserve.tools"))

    @property
    def cancelled(self) -> bool:
        return self.handle is not None and self.handle.cancelled


@dataclass(frozen=True)
class ToolDefinition:
    """A catalog entry: the public descriptor plus its handler."""

    descriptor: ToolDescriptor
    handler: ToolHandler
    cancellable: bool = False
    validator: Draft202012Validator = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        Draft202012Validator.check_schema(self.descriptor.input_schema)
        object.__setattr__(self, "validator", Draft202012Validator(self.descriptor.input_schema))

    @property
    def name(self) -> str:
        return self.descriptor.name
