"""CLI context and dependency container."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import click
import typer

from stack_reconciler.app.api.http.app_data import (
    ApplicationDependencies,
    build_application_dependencies,
)
from stack_reconciler.app.runtime.config.config_data import ConfigData
from stack_reconciler.app.runtime.context import get_config
from stack_reconciler.app.runtime.log_setup import configure_logging
from stack_reconciler.cli.shared.console import CLIConsole, console
from stack_reconciler.utils.paths import get_project_root


@dataclass(frozen=True)
class CLIContext:
    """Runtime dependencies for CLI commands."""

    console: CLIConsole
    project_root: Path
    config: ConfigData
    deps: ApplicationDependencies


def build_cli_context() -> CLIContext:
    """Build a fresh CLIContext."""
    config = get_config()
    configure_logging(config.logging.level)
    return CLIContext(
        console=console,
        project_root=get_project_root(),
        config=config,
        deps=build_application_dependencies(config),
    )


def get_cli_context(ctx: typer.Context | None = None) -> CLIContext:
    """Return the CLIContext from Typer, falling back to a new instance."""
    context = ctx or click.get_current_context(silent=True)
    if context and isinstance(context.obj, CLIContext):
        return context.obj
    return build_cli_context()
