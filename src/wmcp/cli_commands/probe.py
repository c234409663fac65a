"""``wmcp probe``: smoke-test a running server's transports."""

from __future__ import annotations

import asyncio
import sys

import click

from wmcp.cli_commands._output import console


async def run_probe(url: str, *, timeout: float = 10.0) -> list[tuple[str, bool, str]]:
    """Check ``POST /messages`` and ``GET /sse``; returns ``(check, ok, detail)`` rows."""
    from wmcp.protocols.client import MessagesClient

    results: list[tuple[str, bool, str]] = []
    async with MessagesClient(url, timeout=timeout) as client:
        try:
            listed = await client.list_tools()
        except Exception as exc:
            results.append(("POST /messages", False, str(exc)))
        else:
            results.append(("POST /messages", True, f"tools/list returned {len(listed)} tool(s)"))

        try:
            endpoint = await client.open_session()
        except Exception as exc:
            results.append(("GET /sse", False, str(exc)))
        else:
            results.append(("GET /sse", True, f"endpoint {endpoint}"))
    return results


@click.command()
@click.argument("url", default="http://localhost:4001")
@click.option("--timeout", type=float, default=10.0, help="Per-request timeout in seconds.")
def probe(url: str, timeout: float) -> None:
    """Probe the server at URL (default http://localhost:4001)."""
    results = asyncio.run(run_probe(url, timeout=timeout))

    for check, ok, detail in results:
        mark = "[green]OK[/green]  " if ok else "[red]FAIL[/red]"
        console.print(f"{mark} {check}: {detail}")

    if not all(ok for _, ok, _ in results):
        sys.exit(1)
