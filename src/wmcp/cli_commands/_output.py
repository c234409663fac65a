"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from collections.abc import Sequence

    from wmcp.tools.models import WeaviateEndpoint

console = Console()


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data, default=str))


def print_tools_table(tools: list[dict[str, Any]], *, title: str = "Discovered Tools") -> None:
    """Pretty-print ``tools/list`` entries as a table."""
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Required")
    table.add_column("Description")

    for tool in tools:
        schema = tool.get("inputSchema") or {}
        table.add_row(
            tool.get("name", "?"),
            ", ".join(schema.get("required", [])) or "-",
            _truncate(tool.get("description", "")),
        )

    console.print(table)


def print_catalog_table(endpoints: Sequence[WeaviateEndpoint]) -> None:
    """Pretty-print the built-in catalog with each tool's REST mapping."""
    table = Table(title=f"Built-in Tools ({len(endpoints)})")
    table.add_column("Name", style="cyan")
    table.add_column("Method")
    table.add_column("Path")
    table.add_column("Description")

    for endpoint in endpoints:
        table.add_row(endpoint.name, endpoint.method, endpoint.path, _truncate(endpoint.description, 60))

    console.print(table)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
