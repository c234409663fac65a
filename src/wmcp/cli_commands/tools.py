"""``wmcp tools``: list the built-in catalog, discover and call remote tools."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any

import click

from wmcp.cli_commands._output import console, print_catalog_table, print_json, print_tools_table


@click.group()
def tools() -> None:
    """List, discover and call tools."""


@tools.command("list")
@click.option("--json", "as_json", is_flag=True, help="Print tools/list entries as JSON.")
def list_tools(as_json: bool) -> None:
    """List the built-in Weaviate tools."""
    from wmcp.protocols.models import ToolListing
    from wmcp.tools import CATALOG

    if as_json:
        print_json([
            ToolListing(name=e.name, description=e.description, input_schema=e.parameters).to_wire()
            for e in CATALOG
        ])
        return
    print_catalog_table(CATALOG)


@tools.command("discover")
@click.argument("url")
def discover(url: str) -> None:
    """Discover tools from a running server.

    URL is the server's base URL, e.g. http://localhost:4001.
    """
    from wmcp.protocols.client import MessagesClient

    async def _discover() -> list[dict[str, Any]]:
        async with MessagesClient(url) as client:
            return await client.list_tools()

    try:
        listed = asyncio.run(_discover())
    except Exception as exc:
        console.print(f"[red]Discovery error:[/red] {exc}")
        sys.exit(1)

    if not listed:
        console.print("[yellow]No tools discovered.[/yellow]")
        return

    print_tools_table(listed)


@tools.command("call")
@click.argument("url")
@click.argument("name")
@click.option("--args", "raw_args", default="{}", help="Tool arguments as a JSON object.")
def call(url: str, name: str, raw_args: str) -> None:
    """Call tool NAME on the server at URL and print its result."""
    from wmcp.protocols.client import MessagesClient
    from wmcp.protocols.errors import RemoteToolError

    try:
        arguments = json.loads(raw_args)
    except ValueError as exc:
        raise click.BadParameter(f"not valid JSON: {exc}", param_hint="--args") from exc
    if not isinstance(arguments, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--args")

    async def _call() -> Any:
        async with MessagesClient(url) as client:
            return await client.call_tool(name, arguments)

    try:
        result = asyncio.run(_call())
    except RemoteToolError as exc:
        console.print(f"[red]Tool error {exc.code}:[/red] {exc.message}")
        if exc.data is not None:
            print_json(exc.data)
        sys.exit(1)
    except Exception as exc:
        console.print(f"[red]Call error:[/red] {exc}")
        sys.exit(1)

    print_json(result)
