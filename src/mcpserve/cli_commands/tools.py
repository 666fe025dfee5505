"""``mcpserve tools``: inspect the tool catalog."""

from __future__ import annotations

import click

from mcpserve.cli_commands._output import console, load_settings_or_exit, print_json, print_tools_table


@click.group()
def tools() -> None:
    """Inspect the tools the server exposes."""


@tools.command("list")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Settings YAML file.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the tools/list result as JSON.")
def list_tools(config_path: str | None, as_json: bool) -> None:
    """List the tools a server built from the settings would advertise."""
    from mcpserve.server.engine import MCPEngine

    settings = load_settings_or_exit(config_path)
    engine = MCPEngine.from_settings(settings)
    descriptors = engine.context.registry.descriptors()

    if as_json:
        print_json({"tools": [d.to_wire() for d in descriptors]})
        return

    if not descriptors:
        console.print("[yellow]No tools registered.[/yellow]")
        return

    print_tools_table(descriptors)
