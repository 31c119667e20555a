"""Command line entry point."""

from __future__ import annotations

import logging
from typing import Annotated, Optional

import typer
from rich.console import Console

from .web.config import WebConfig

console = Console()

app = typer.Typer(
    name="syncboard",
    help="Real-time collaborative kanban board server",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def main() -> None:
    """syncboard server commands."""


@app.command()
def serve(
    host: Annotated[Optional[str], typer.Option("--host", "-h", help="Bind address")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Bind port")] = None,
    reload: Annotated[bool, typer.Option("--reload", help="Reload on code changes")] = False,
) -> None:
    """Run the REST API and the Socket.IO sync channel."""
    import uvicorn

    config = WebConfig.load()
    log_format = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    logging.basicConfig(level=config.log_level, format=log_format)

    host = host or config.host
    port = port or config.port
    console.print(f"[cyan]syncboard listening on http://{host}:{port}[/cyan]")
    uvicorn.run(
        "syncboard.web.app:create_asgi_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    app()
