"""Runtime services shared by all requests: cache, cancellation, outbound calls."""

from mcpserve.runtime.cache import CacheEntry, ResponseCache
from mcpserve.runtime.cancellation import (
    CancellationHandle,
    CancellationTracker,
    OperationState,
    PendingOperation,
)
from mcpserve.runtime.errors import (
    DuplicateOperationError,
    ExternalCallError,
    RuntimeServiceError,
)
from mcpserve.runtime.http_client import ExternalCallClient

__all__ = [
    "CacheEntry",
    "CancellationHandle",
    "CancellationTracker",
    "DuplicateOperationError",
    "ExternalCallClient",
    "ExternalCallError",
    "OperationState",
    "PendingOperation",
    "ResponseCache",
    "RuntimeServiceError",
]
