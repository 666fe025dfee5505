"""Subcommands of the ``mcpserve`` group."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Attach ``serve``, ``tools`` and ``request`` to *cli*."""
    from mcpserve.cli_commands.request import request
    from mcpserve.cli_commands.serve import serve
    from mcpserve.cli_commands.tools import tools

    for command in (serve, tools, request):
        cli.add_command(command)
