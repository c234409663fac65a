"""``wmcp serve``: build the tool registry and run the HTTP server."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from wmcp.cli_commands._output import console

if TYPE_CHECKING:
    from fastapi import FastAPI

    from wmcp.config import AppSettings


def build_app(settings: AppSettings) -> FastAPI:
    """Compose registry, dispatcher, sessions and transports for *settings*."""
    from wmcp.protocols.dispatcher import JsonRpcDispatcher
    from wmcp.runtime.invoker import Invoker
    from wmcp.tools import build_registry
    from wmcp.transport.app import create_app
    from wmcp.transport.session import SessionManager

    registry, toolset = build_registry(settings.weaviate)
    dispatcher = JsonRpcDispatcher(registry, invoker=Invoker(settings.server.call_timeout))
    sessions = SessionManager(
        heartbeat_interval=settings.server.heartbeat_interval,
        idle_timeout=settings.server.idle_timeout,
    )
    return create_app(dispatcher, sessions=sessions, resources=[toolset])


def configure_logging(level: str) -> None:
    """Route all logging (uvicorn's included) through a rich handler."""
    from rich.logging import RichHandler

    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings file.",
)
@click.option("--host", default=None, help="Interface to bind (default 127.0.0.1).")
@click.option("--port", type=int, default=None, help="Port to listen on (default 4001).")
@click.option("--call-timeout", type=float, default=None, help="Per-call tool deadline in seconds.")
@click.option("--heartbeat-interval", type=float, default=None, help="Seconds between SSE keep-alives.")
@click.option("--idle-timeout", type=float, default=None, help="Seconds before an idle SSE session is closed.")
@click.option(
    "--log-level",
    type=click.Choice(["critical", "error", "warning", "info", "debug"], case_sensitive=False),
    default=None,
    help="Logging level.",
)
@click.option("--telemetry", is_flag=True, help="Enable OpenTelemetry tracing.")
@click.option("--otlp-endpoint", default=None, help="Export spans via OTLP/gRPC to this endpoint.")
def serve(
    config_path: Path | None,
    host: str | None,
    port: int | None,
    call_timeout: float | None,
    heartbeat_interval: float | None,
    idle_timeout: float | None,
    log_level: str | None,
    telemetry: bool,
    otlp_endpoint: str | None,
) -> None:
    """Serve the Weaviate tools over JSON-RPC (POST /messages, GET /sse)."""
    import uvicorn

    from wmcp.config import ConfigError, load_settings
    from wmcp.registry.errors import RegistryError

    try:
        settings = load_settings(config_path).with_overrides(
            server={
                "host": host,
                "port": port,
                "call_timeout": call_timeout,
                "heartbeat_interval": heartbeat_interval,
                "idle_timeout": idle_timeout,
                "log_level": log_level,
                "telemetry": {"enabled": telemetry or None, "otlp_endpoint": otlp_endpoint},
            }
        )
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    server = settings.server
    configure_logging(server.log_level)

    if server.telemetry.enabled or server.telemetry.otlp_endpoint:
        from wmcp.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(
                service_name="wmcp",
                export_to_console=server.telemetry.otlp_endpoint is None,
                otlp_endpoint=server.telemetry.otlp_endpoint,
            )
        except ImportError as exc:
            console.print(f"[red]Telemetry error:[/red] {exc}")
            sys.exit(1)

    try:
        app = build_app(settings)
    except RegistryError as exc:
        console.print(f"[red]Startup error:[/red] {exc}")
        sys.exit(1)

    console.print(
        f"Serving [cyan]{len(app.state.dispatcher.registry)}[/cyan] tool(s) on "
        f"http://{server.host}:{server.port} (Weaviate at {settings.weaviate.base_url})"
    )
    uvicorn.run(app, host=server.host, port=server.port, log_level=server.log_level, log_config=None)
