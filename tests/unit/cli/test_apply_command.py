"""Tests for the apply command."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from stack_reconciler.app.api.http.app_data import ApplicationDependencies
from stack_reconciler.app.core.reconciler import Reconciler
from stack_reconciler.app.runtime.config.config_data import ConfigData
from stack_reconciler.cli import app
from stack_reconciler.cli.context import CLIContext
from stack_reconciler.cli.shared.console import CLIConsole

MANIFEST = """
version: v1stack
apps:
  worker:
    run: python worker.py
"""

runner = CliRunner()


@pytest.fixture
def manifest(tmp_path) -> Path:
    path = tmp_path / "porter.yaml"
    path.write_text(MANIFEST)
    return path


@pytest.fixture
def cli_context(db_service, store, platform, k8s_controller) -> CLIContext:
    return CLIContext(
        console=CLIConsole(),
        project_root=Path("/test"),
        config=ConfigData(),
        deps=ApplicationDependencies(
            config=ConfigData(),
            database_service=db_service,
            store=store,
            reconciler=Reconciler(platform, store, lambda cluster: k8s_controller),
        ),
    )


def _apply(cli_context: CLIContext, *args: str):
    return runner.invoke(app, ["apply", *args], obj=cli_context)


class TestApplyCommand:
    def test_creates_then_updates(self, cli_context, cluster_row, manifest, store):
        args = ["-p", "1", "-c", str(cluster_row.id), "-n", "jobs", "-f", str(manifest)]

        created = _apply(cli_context, *args, "-i", "registry.example.com/jobs:v2")
        updated = _apply(cli_context, *args)

        assert created.exit_code == 0, created.output
        assert "Created stack jobs (revision 1)" in created.output
        assert "attempting creation" in created.output
        assert updated.exit_code == 0, updated.output
        assert "Updated stack jobs (revision 2)" in updated.output
        assert store.read_by_name(cluster_row.id, "jobs").porter_yaml_path == str(manifest)

    def test_builder_is_stored(self, cli_context, cluster_row, manifest, store):
        result = _apply(
            cli_context,
            "-p", "1", "-c", str(cluster_row.id), "-n", "jobs", "-f", str(manifest),
            "--builder", "heroku/buildpacks:20",
        )

        assert result.exit_code == 0, result.output
        assert store.read_by_name(cluster_row.id, "jobs").builder == "heroku/buildpacks:20"

    def test_null_builder_clears_stored_builder(self, cli_context, cluster_row, manifest, store):
        args = ["-p", "1", "-c", str(cluster_row.id), "-n", "jobs", "-f", str(manifest)]
        _apply(cli_context, *args, "--builder", "heroku/buildpacks:20")

        result = _apply(cli_context, *args, "--builder", "null")

        assert result.exit_code == 0, result.output
        assert store.read_by_name(cluster_row.id, "jobs").builder == ""

    def test_unknown_cluster_exits_1(self, cli_context, cluster_row, manifest):
        result = _apply(
            cli_context, "-p", "2", "-c", str(cluster_row.id), "-n", "jobs", "-f", str(manifest)
        )

        assert result.exit_code == 1

    def test_invalid_name_exits_2(self, cli_context, cluster_row, manifest, platform):
        result = _apply(
            cli_context, "-p", "1", "-c", str(cluster_row.id), "-n", "Jobs", "-f", str(manifest)
        )

        assert result.exit_code == 2
        assert platform.calls == []

    def test_conflicting_row_exits_2(self, cli_context, cluster_row, manifest, store):
        from stack_reconciler.app.entities.application.table import PorterApp

        store.upsert(PorterApp(name="jobs", cluster_id=cluster_row.id, project_id=1))

        result = _apply(
            cli_context, "-p", "1", "-c", str(cluster_row.id), "-n", "jobs", "-f", str(manifest)
        )

        assert result.exit_code == 2

    def test_controller_factory_is_not_called_on_update(
        self, cli_context, cluster_row, manifest, k8s_controller
    ):
        args = ["-p", "1", "-c", str(cluster_row.id), "-n", "jobs", "-f", str(manifest)]
        _apply(cli_context, *args)
        k8s_controller.create_namespace.reset_mock()

        _apply(cli_context, *args)

        k8s_controller.create_namespace.assert_not_awaited()
