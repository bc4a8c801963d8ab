"""Tests for Helm command construction."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from stack_reconciler.infra.helm import CommandResult, HelmCommands


@pytest.fixture
def mock_runner() -> MagicMock:
    """Create a mock command runner."""
    runner = MagicMock()
    runner.run.return_value = CommandResult(success=True, stdout="{}", stderr="", returncode=0)
    return runner


@pytest.fixture
def helm_commands(mock_runner: MagicMock) -> HelmCommands:
    return HelmCommands(mock_runner)


class TestHelmDeployCommands:
    def test_install_from_repository(
        self, helm_commands: HelmCommands, mock_runner: MagicMock
    ) -> None:
        helm_commands.install(
            "api-r",
            "job",
            "porter-stack-api",
            repo="https://charts.getporter.dev",
            version="0.10.0",
            value_files=[Path("/tmp/values.yaml")],
            kube_context="prod",
            timeout="5m",
        )

        cmd = mock_runner.run.call_args[0][0]
        assert cmd[:4] == ["helm", "install", "api-r", "job"]
        assert cmd[cmd.index("--namespace") + 1] == "porter-stack-api"
        assert cmd[cmd.index("--kube-context") + 1] == "prod"
        assert cmd[cmd.index("--repo") + 1] == "https://charts.getporter.dev"
        assert cmd[cmd.index("--version") + 1] == "0.10.0"
        assert cmd[cmd.index("--timeout") + 1] == "5m"
        assert cmd[cmd.index("-f") + 1] == "/tmp/values.yaml"
        assert cmd[-2:] == ["-o", "json"]
        assert "--wait" not in cmd

    def test_upgrade_install(self, helm_commands: HelmCommands, mock_runner: MagicMock) -> None:
        helm_commands.upgrade_install("api", "/tmp/chart/api", "porter-stack-api", wait=True)

        cmd = mock_runner.run.call_args[0][0]
        assert cmd[:5] == ["helm", "upgrade", "--install", "api", "/tmp/chart/api"]
        assert "--wait" in cmd
        assert "--repo" not in cmd
        assert "--kube-context" not in cmd

    def test_upgrade_without_install(
        self, helm_commands: HelmCommands, mock_runner: MagicMock
    ) -> None:
        helm_commands.upgrade("api-r", "job", "porter-stack-api")

        cmd = mock_runner.run.call_args[0][0]
        assert cmd[:3] == ["helm", "upgrade", "api-r"]
        assert "--install" not in cmd


class TestHelmQueries:
    def test_status(self, helm_commands: HelmCommands, mock_runner: MagicMock) -> None:
        helm_commands.status("api", "porter-stack-api", kube_context="kind")

        cmd = mock_runner.run.call_args[0][0]
        assert cmd == [
            "helm",
            "status",
            "api",
            "-n",
            "porter-stack-api",
            "-o",
            "json",
            "--kube-context",
            "kind",
        ]

    def test_get_values(self, helm_commands: HelmCommands, mock_runner: MagicMock) -> None:
        helm_commands.get_values("api", "porter-stack-api")

        cmd = mock_runner.run.call_args[0][0]
        assert cmd[:4] == ["helm", "get", "values", "api"]

    def test_uninstall_waits_by_default(
        self, helm_commands: HelmCommands, mock_runner: MagicMock
    ) -> None:
        helm_commands.uninstall("api", "porter-stack-api")

        cmd = mock_runner.run.call_args[0][0]
        assert cmd[:3] == ["helm", "uninstall", "api"]
        assert "--wait" in cmd

    def test_custom_binary(self, mock_runner: MagicMock) -> None:
        HelmCommands(mock_runner, binary="/usr/local/bin/helm3").dependency_update(
            Path("/tmp/chart")
        )

        cmd = mock_runner.run.call_args[0][0]
        assert cmd == ["/usr/local/bin/helm3", "dependency", "update", "/tmp/chart"]
