"""Tests for CLI context dependency injection."""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest
import typer

from stack_reconciler.app.runtime.config.config_data import ConfigData
from stack_reconciler.cli.context import CLIContext, build_cli_context, get_cli_context


def test_cli_context_is_immutable():
    ctx = CLIContext(
        console=Mock(),
        project_root=Path("/test"),
        config=ConfigData(),
        deps=Mock(),
    )

    with pytest.raises(AttributeError):
        ctx.console = Mock()  # type: ignore[misc]


@patch("stack_reconciler.cli.context.configure_logging")
@patch("stack_reconciler.cli.context.build_application_dependencies")
@patch("stack_reconciler.cli.context.get_config")
@patch("stack_reconciler.cli.context.get_project_root")
def test_build_cli_context_wires_dependencies(
    mock_get_root, mock_get_config, mock_build_deps, mock_configure_logging
):
    config = ConfigData()
    mock_get_root.return_value = Path("/test/project")
    mock_get_config.return_value = config

    ctx = build_cli_context()

    assert ctx.project_root == Path("/test/project")
    assert ctx.config is config
    assert ctx.deps is mock_build_deps.return_value
    mock_build_deps.assert_called_once_with(config)
    mock_configure_logging.assert_called_once_with("INFO")


def test_get_cli_context_from_typer_context():
    cli_ctx = CLIContext(
        console=Mock(), project_root=Path("/test"), config=ConfigData(), deps=Mock()
    )
    typer_ctx = Mock(spec=typer.Context)
    typer_ctx.obj = cli_ctx

    assert get_cli_context(typer_ctx) is cli_ctx


@patch("stack_reconciler.cli.context.build_cli_context")
def test_get_cli_context_falls_back_to_new_instance(mock_build):
    typer_ctx = Mock(spec=typer.Context)
    typer_ctx.obj = None

    assert get_cli_context(typer_ctx) is mock_build.return_value
