"""CancellationTracker: registry of in-flight operations, cancellable by id.

Cancellation is cooperative: a long-running tool polls
:attr:`CancellationHandle.cancelled` and returns a partial result when it
observes the flag. Nothing is interrupted preemptively.

Usage::

    tracker = CancellationTracker()
    with tracker.track(request_id) as handle:
        for step in range(steps):
            if handle.cancelled:
                return {"status": "cancelled", "progress": step}
            await do_step()
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any

from mcpserve.runtime.errors import DuplicateOperationError

logger = logging.getLogger(__name__)


class OperationState(str, Enum):
    """Lifecycle of a tracked operation. Both non-initial states are terminal."""

    REGISTERED = "registered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CancellationHandle:
    """A cancellation flag shared between the tracker and one running tool."""

    def __init__(self, request_id: Any) -> None:
        self.request_id = request_id
        self._state = OperationState.REGISTERED
        self._lock = threading.Lock()

    @property
    def state(self) -> OperationState:
        return self._state

    @property
    def cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._state is OperationState.CANCELLED

    def cancel(self) -> bool:
        """Request cancellation; returns ``False`` once already terminal."""
        return self._transition(OperationState.CANCELLED)

    def complete(self) -> bool:
        """Mark normal completion; returns ``False`` once already terminal."""
        return self._transition(OperationState.COMPLETED)

    def _transition(self, target: OperationState) -> bool:
        with self._lock:
            if self._state is not OperationState.REGISTERED:
                return False
            self._state = target
            return True

    def __repr__(self) -> str:
        return f"CancellationHandle(request_id={self.request_id!r}, state={self._state.value})"


@dataclass(frozen=True)
class PendingOperation:
    """A table entry: one request id and the handle lent to its tool."""

    request_id: Any
    handle: CancellationHandle


class CancellationTracker:
    """Process-wide table of in-flight operations.

    A single lock guards the table. That serializes all register / cancel /
    unregister calls, which is fine at low request volume; sharding by
    request id is the natural next step if it ever becomes contended.
    """

    def __init__(self) -> None:
        self._operations: dict[Any, PendingOperation] = {}
        self._lock = threading.Lock()

    def register(self, request_id: Any) -> CancellationHandle:
        """Create a handle for *request_id*.

        Raises:
            DuplicateOperationError: If the id is already in flight.
        """
        with self._lock:
            if request_id in self._operations:
                raise DuplicateOperationError(request_id)
            handle = CancellationHandle(request_id)
            self._operations[request_id] = PendingOperation(request_id, handle)
        logger.debug("Registered operation %r", request_id)
        return handle

    def cancel(self, request_id: Any) -> bool:
        """Set the cancellation flag for *request_id*; return whether it was found."""
        with self._lock:
            operation = self._operations.get(request_id)
        if operation is None:
            logger.debug("Cancellation for unknown operation %r ignored", request_id)
            return False
        operation.handle.cancel()
        logger.info("Cancellation requested for operation %r", request_id)
        return True

    def unregister(self, request_id: Any) -> None:
        """Remove *request_id* from the table. Unknown ids are ignored."""
        with self._lock:
            operation = self._operations.pop(request_id, None)
        if operation is not None:
            operation.handle.complete()
            logger.debug("Unregistered operation %r (%s)", request_id, operation.handle.state.value)

    @contextmanager
    def track(self, request_id: Any) -> Iterator[CancellationHandle]:
        """Register *request_id* for the duration of the ``with`` block."""
        handle = self.register(request_id)
        try:
            yield handle
        finally:
            self.unregister(request_id)

    def is_pending(self, request_id: Any) -> bool:
        with self._lock:
            return request_id in self._operations

    def pending(self) -> list[PendingOperation]:
        """Snapshot of the in-flight operations."""
        with self._lock:
            return list(self._operations.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._operations)
