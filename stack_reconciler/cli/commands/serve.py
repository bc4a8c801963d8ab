"""Run the HTTP API."""

from typing import Annotated

import typer
import uvicorn

from stack_reconciler.app.api.http.app import create_app
from stack_reconciler.cli.context import get_cli_context


def serve(
    ctx: typer.Context,
    host: Annotated[str | None, typer.Option("--host", help="Bind address")] = None,
    port: Annotated[int | None, typer.Option("--port", help="Bind port")] = None,
) -> None:
    """Serve the stack API with uvicorn."""
    cli = get_cli_context(ctx)
    app = create_app(cli.deps)
    cli.deps.database_service.create_all()
    cli.console.info(
        f"Serving on {host or cli.config.app.host}:{port or cli.config.app.port}"
    )
    uvicorn.run(
        app,
        host=host or cli.config.app.host,
        port=port or cli.config.app.port,
        log_level=cli.config.logging.level.lower(),
    )
