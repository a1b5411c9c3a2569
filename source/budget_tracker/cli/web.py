"""Web CLI commands."""

import click
import uvicorn


@click.group(name="web")
def web_group() -> None:
    """Manage the REST API server."""
    pass


@web_group.command(name="serve")
@click.option("--host", default="127.0.0.1", help="Host to bind to.")
@click.option("--port", default=8000, type=int, help="Port to bind to.")
@click.option("--reload", is_flag=True, help="Enable auto-reload.")
def serve(host: str, port: int, reload: bool) -> None:
    """Start the web server.

    Args:
        host: Host to bind to.
        port: Port to bind to.
        reload: Enable auto-reload.
    """
    click.echo(f"Starting server at http://{host}:{port}")
    uvicorn.run("budget_tracker.web.main:app", host=host, port=port, reload=reload, log_level="info")
