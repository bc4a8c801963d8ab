"""Database commands."""

import os
import subprocess
from typing import Annotated

import typer

from stack_reconciler.cli.context import get_cli_context
from stack_reconciler.cli.shared.console import with_error_handling

db_app = typer.Typer(help="Database commands", no_args_is_help=True)

MIGRATE_ACTIONS = ("upgrade", "downgrade", "current", "history")


@db_app.command()
@with_error_handling
def init(ctx: typer.Context) -> None:
    """Create all tables directly from the models."""
    cli = get_cli_context(ctx)
    cli.deps.database_service.create_all()
    cli.console.ok("Database tables created")


@db_app.command()
@with_error_handling
def migrate(
    ctx: typer.Context,
    action: Annotated[
        str, typer.Argument(help="upgrade, downgrade, current or history")
    ] = "upgrade",
    revision: Annotated[
        str | None, typer.Argument(help="Target revision (default: head)")
    ] = None,
) -> None:
    """Run Alembic migrations against the configured database."""
    cli = get_cli_context(ctx)
    console = cli.console
    if action not in MIGRATE_ACTIONS:
        console.handle_error(f"Unknown migrate action: {action}")
        return

    alembic_ini = cli.project_root / "alembic.ini"
    if not alembic_ini.exists():
        console.handle_error(f"Alembic configuration not found: {alembic_ini}")
        return

    alembic_args = ["alembic", "-c", str(alembic_ini), action]
    if action == "upgrade":
        alembic_args.append(revision or "head")
    elif action == "downgrade":
        if not revision:
            console.handle_error("Downgrade requires a target revision")
            return
        alembic_args.append(revision)
    elif action == "history":
        alembic_args.append("--verbose")

    env = os.environ.copy()
    env["DATABASE_URL"] = cli.config.database.url
    console.info(f"Running alembic {action}...")
    result = subprocess.run(alembic_args, cwd=cli.project_root, env=env, check=False)
    if result.returncode != 0:
        console.handle_error(f"alembic {action} failed", exit_code=result.returncode)
        return
    console.ok(f"alembic {action} completed")
