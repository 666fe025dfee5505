"""``mcpserve serve``: run the engine over stdio or HTTP."""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING

import click

from mcpserve.cli_commands._output import err_console, load_settings_or_exit
from mcpserve.logging_levels import MCP_LOG_LEVELS

if TYPE_CHECKING:
    from mcpserve.server.engine import MCPEngine


@click.command()
@click.option(
    "--transport",
    type=click.Choice(["stdio", "http"]),
    default="stdio",
    help="Transport to serve on.",
)
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Settings YAML file.",
)
@click.option("--host", default=None, help="Bind host for the HTTP transport.")
@click.option("--port", default=None, type=int, help="Bind port for the HTTP transport.")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(list(MCP_LOG_LEVELS)),
    help="Initial log severity (overrides the settings file).",
)
@click.option("--telemetry", is_flag=True, help="Enable OpenTelemetry tracing.")
@click.option("--otlp-endpoint", default=None, help="Export spans via OTLP to this endpoint.")
def serve(
    transport: str,
    config_path: str | None,
    host: str | None,
    port: int | None,
    log_level: str | None,
    telemetry: bool,
    otlp_endpoint: str | None,
) -> None:
    """Serve MCP requests until the client disconnects."""
    from mcpserve.logging_levels import configure_logging
    from mcpserve.server.engine import MCPEngine

    settings = load_settings_or_exit(config_path)
    if log_level is not None:
        settings.log_level = log_level  # type: ignore[assignment]
    if host is not None:
        settings.http.host = host
    if port is not None:
        settings.http.port = port

    configure_logging(settings.log_level)

    provider = None
    if telemetry:
        from mcpserve.utils.telemetry import configure_telemetry

        try:
            provider = configure_telemetry(
                service_name=settings.name,
                transport=transport,
                otlp_endpoint=otlp_endpoint,
            )
        except ImportError as exc:
            err_console.print(f"[red]Telemetry error:[/red] {exc}")
            sys.exit(1)

    engine = MCPEngine.from_settings(settings)
    try:
        _run(engine, transport)
    finally:
        if provider is not None:
            provider.shutdown()


def _run(engine: MCPEngine, transport: str) -> None:
    settings = engine.context.settings
    if transport == "stdio":
        from mcpserve.server.stdio import StdioServer

        try:
            asyncio.run(StdioServer(engine).serve())
        except KeyboardInterrupt:
            pass
        return

    from mcpserve.server.http import run_http

    err_console.print(
        f"Serving [cyan]{settings.name}[/cyan] on "
        f"http://{settings.http.host}:{settings.http.port}{settings.http.path}"
    )
    run_http(engine, host=settings.http.host, port=settings.http.port, path=settings.http.path)
