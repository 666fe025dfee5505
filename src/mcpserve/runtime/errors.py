"""Shared error types for the runtime services layer."""

from __future__ import annotations

from typing import Any


class RuntimeServiceError(Exception):
    """Base error for cache, cancellation, and outbound-call failures."""


class DuplicateOperationError(RuntimeServiceError):
    """An operation is already registered under this request id."""

    def __init__(self, request_id: Any) -> None:
        self.request_id = request_id
        super().__init__(f"Operation already in flight: {request_id!r}")


class ExternalCallError(RuntimeServiceError):
    """An outbound HTTP call failed after all permitted attempts."""

    def __init__(self, url: str, status: int | None = None, detail: str = "") -> None:
        self.url = url
        self.status = status
        self.detail = detail
        msg = f"External call to {url} failed"
        if status is not None:
            msg += f" with HTTP {status}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
