"""wmcp CLI entrypoint."""

from __future__ import annotations

import click

from wmcp import __version__


@click.group()
@click.version_option(version=__version__, prog_name="wmcp")
def main() -> None:
    """wmcp: JSON-RPC tool server for the Weaviate REST API."""


# Register subcommands
from wmcp.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
