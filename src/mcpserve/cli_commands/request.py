"""``mcpserve request``: run a single JSON-RPC body through the engine."""

from __future__ import annotations

import asyncio
import json
import sys

import click

from mcpserve.cli_commands._output import console, load_settings_or_exit, print_json


@click.command()
@click.argument("body")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Settings YAML file.",
)
def request(body: str, config_path: str | None) -> None:
    """Handle BODY (a JSON-RPC request, batch, or ``-`` for stdin) and print the reply."""
    from mcpserve.server.engine import MCPEngine

    if body == "-":
        body = sys.stdin.read()

    settings = load_settings_or_exit(config_path)
    engine = MCPEngine.from_settings(settings)

    async def _handle() -> bytes | None:
        try:
            return await engine.handle(body)
        finally:
            await engine.aclose()

    reply = asyncio.run(_handle())
    if reply is None:
        console.print("[dim](no response)[/dim]")
        return

    print_json(json.loads(reply))
