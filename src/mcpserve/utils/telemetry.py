"""Tracing for the JSON-RPC dispatch path.

Spans are opened through the OpenTelemetry API only. Until
:func:`configure_telemetry` installs an SDK provider every span is a no-op,
so the dispatcher, batch processor and executor trace unconditionally.

Span layout::

    mcp.batch                 one per JSON array body
      mcp.request             one per dispatched object
        mcp.tool.call         tools/call only

``mcpserve serve --telemetry`` installs the provider (requires the ``otel``
extra: ``pip install mcpserve[otel]``).
"""

from __future__ import annotations

import sys
from typing import IO, Any

from opentelemetry import trace
from opentelemetry.util.types import AttributeValue

SPAN_REQUEST = "mcp.request"
SPAN_BATCH = "mcp.batch"
SPAN_TOOL_CALL = "mcp.tool.call"

ATTR_METHOD = "mcp.method"
ATTR_REQUEST_ID = "mcp.request_id"
ATTR_NOTIFICATION = "mcp.notification"
ATTR_ERROR_CODE = "mcp.error.code"
ATTR_BATCH_SIZE = "mcp.batch.size"
ATTR_TOOL_NAME = "mcp.tool.name"
ATTR_TOOL_IS_ERROR = "mcp.tool.is_error"
ATTR_TRANSPORT = "mcp.transport"

_INSTRUMENTATION_NAME = "mcpserve"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return the tracer for *name*, defaulting to the package tracer."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def request_attributes(method: str, request_id: int | str | None) -> dict[str, AttributeValue]:
    """Span attributes for one JSON-RPC request.

    Ids are recorded as strings so integer and string ids share one attribute
    type. Notifications carry no id attribute.
    """
    attributes: dict[str, AttributeValue] = {
        ATTR_METHOD: method,
        ATTR_NOTIFICATION: request_id is None,
    }
    if request_id is not None:
        attributes[ATTR_REQUEST_ID] = str(request_id)
    return attributes


def console_stream(transport: str) -> IO[str]:
    # stdout carries protocol frames under stdio
    return sys.stderr if transport == "stdio" else sys.stdout


def configure_telemetry(
    *,
    service_name: str = "mcpserve",
    transport: str = "http",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> Any:
    """Install an SDK tracer provider and return it.

    The caller owns the returned provider and should ``shutdown()`` it when
    the server stops so batched spans are flushed.

    Parameters
    ----------
    service_name:
        The ``service.name`` resource attribute.
    transport:
        ``"stdio"`` or ``"http"``. Recorded on the resource and used to pick
        the console exporter's stream.
    export_to_console:
        If ``True``, write spans as JSON to :func:`console_stream`.
    otlp_endpoint:
        If set, also export spans via OTLP/gRPC to this endpoint.

    Raises
    ------
    ImportError
        If ``opentelemetry-sdk`` (or the OTLP exporter, when requested) is
        not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        msg = "opentelemetry-sdk is required for tracing. Install it with: pip install mcpserve[otel]"
        raise ImportError(msg) from exc

    resource = Resource.create({"service.name": service_name, ATTR_TRANSPORT: transport})
    provider = TracerProvider(resource=resource)

    if export_to_console:
        exporter = ConsoleSpanExporter(out=console_stream(transport))
        provider.add_span_processor(SimpleSpanProcessor(exporter))
    if otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(_otlp_exporter(otlp_endpoint)))

    trace.set_tracer_provider(provider)
    return provider


def _otlp_exporter(endpoint: str) -> Any:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = "opentelemetry-exporter-otlp is required for OTLP export. Install it with: pip install mcpserve[otel]"
        raise ImportError(msg) from exc
    return OTLPSpanExporter(endpoint=endpoint)
