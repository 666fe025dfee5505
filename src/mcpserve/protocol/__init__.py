"""Protocol layer: JSON-RPC 2.0 envelopes, dispatch, and batching."""

from mcpserve.protocol.batch import BatchProcessor
from mcpserve.protocol.dispatcher import RequestDispatcher
from mcpserve.protocol.errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    InternalError,
    InvalidParamsError,
    InvalidRequestError,
    JsonRpcError,
    MethodNotFoundError,
    ParseError,
)
from mcpserve.protocol.models import (
    CallToolResult,
    JsonRpcErrorObject,
    JsonRpcRequest,
    JsonRpcResponse,
    ResourceContents,
    ResourceDescriptor,
    TextContent,
    ToolAnnotations,
    ToolDescriptor,
)

__all__ = [
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "PARSE_ERROR",
    "BatchProcessor",
    "CallToolResult",
    "InternalError",
    "InvalidParamsError",
    "InvalidRequestError",
    "JsonRpcError",
    "JsonRpcErrorObject",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "MethodNotFoundError",
    "ParseError",
    "RequestDispatcher",
    "ResourceContents",
    "ResourceDescriptor",
    "TextContent",
    "ToolAnnotations",
    "ToolDescriptor",
]
