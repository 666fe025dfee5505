"""Command-line entrypoint: ``mcpserve serve | tools | request``."""

from __future__ import annotations

import click

from mcpserve import __version__


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="mcpserve")
def main() -> None:
    """Serve MCP tools over JSON-RPC 2.0.

    Run the engine with ``serve``, inspect the catalog with ``tools list``,
    or push a single raw message through it with ``request``.
    """


from mcpserve.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
