"""JSON-RPC 2.0 error codes and the protocol-level exception hierarchy.

Raising one of these inside a method handler produces a JSON-RPC ``error``
envelope with the matching code. Tool failures never use these; they are
reported as successful ``tools/call`` results with ``isError`` set.
"""

from __future__ import annotations

from typing import Any

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class JsonRpcError(Exception):
    """Base error for all faults that surface as a JSON-RPC error object."""

    code: int = INTERNAL_ERROR
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None, data: Any = None) -> None:
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)


class ParseError(JsonRpcError):
    """The request body was empty or not valid JSON."""

    code = PARSE_ERROR
    default_message = "Parse error"


class InvalidRequestError(JsonRpcError):
    """The JSON value is not a valid JSON-RPC request object."""

    code = INVALID_REQUEST
    default_message = "Invalid Request"


class MethodNotFoundError(JsonRpcError):
    """No handler is registered for the requested method."""

    code = METHOD_NOT_FOUND
    default_message = "Method not found"

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(data=method)


class InvalidParamsError(JsonRpcError):
    """The method exists but its ``params`` are structurally invalid."""

    code = INVALID_PARAMS
    default_message = "Invalid params"


class InternalError(JsonRpcError):
    """An unexpected failure inside the server."""

    code = INTERNAL_ERROR
    default_message = "Internal error"
