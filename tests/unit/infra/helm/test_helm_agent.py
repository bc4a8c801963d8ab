"""Tests for the Helm-backed release platform."""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import yaml

from stack_reconciler.app.entities.registry.table import Registry
from stack_reconciler.infra.helm import (
    ChartDependency,
    ChartRef,
    ClusterTarget,
    CommandResult,
    HelmAgent,
    HelmError,
    InstallChartConfig,
    ReleaseNotFoundError,
)

CLUSTER = ClusterTarget(id=1, project_id=1, kube_context="kind-test")

STATUS_JSON = {
    "name": "api",
    "namespace": "porter-stack-api",
    "version": 3,
    "info": {"status": "deployed"},
    "chart": {
        "metadata": {
            "name": "api",
            "version": "0.1.0",
            "dependencies": [
                {
                    "name": "web",
                    "version": "0.50.0",
                    "repository": "https://charts.getporter.dev",
                    "alias": "api-web",
                }
            ],
        }
    },
    "config": {"global": {"image": {"repository": "repo/api", "tag": "v3"}}},
}


def _ok(payload: object = None) -> CommandResult:
    return CommandResult(success=True, stdout=json.dumps(payload or {}))


@pytest.fixture
def commands() -> MagicMock:
    return MagicMock()


@pytest.fixture
def agent(commands: MagicMock) -> HelmAgent:
    return HelmAgent(commands, timeout="2m")


class TestGetRelease:
    def test_parses_status(self, agent: HelmAgent, commands: MagicMock) -> None:
        commands.status.return_value = _ok(STATUS_JSON)

        release = agent.get_release(CLUSTER, "porter-stack-api", "api")

        assert release.version == 3
        assert release.status == "deployed"
        assert release.chart_name == "api"
        assert release.dependencies == [
            ChartDependency("web", "0.50.0", "https://charts.getporter.dev", "api-web")
        ]
        assert release.config["global"]["image"]["tag"] == "v3"
        commands.status.assert_called_once_with(
            "api", "porter-stack-api", kube_context="kind-test"
        )

    def test_falls_back_to_get_values(self, agent: HelmAgent, commands: MagicMock) -> None:
        commands.status.return_value = _ok({**STATUS_JSON, "config": None})
        commands.get_values.return_value = _ok({"web": {"replicaCount": 2}})

        release = agent.get_release(CLUSTER, "porter-stack-api", "api")

        assert release.config == {"web": {"replicaCount": 2}}

    def test_not_found(self, agent: HelmAgent, commands: MagicMock) -> None:
        commands.status.return_value = CommandResult(
            success=False, stderr="Error: release: not found", returncode=1
        )

        with pytest.raises(ReleaseNotFoundError):
            agent.get_release(CLUSTER, "porter-stack-api", "api")

    def test_other_failures(self, agent: HelmAgent, commands: MagicMock) -> None:
        commands.status.return_value = CommandResult(
            success=False, stderr="Kubernetes cluster unreachable", returncode=1
        )

        with pytest.raises(HelmError) as excinfo:
            agent.get_release(CLUSTER, "porter-stack-api", "api")

        assert not isinstance(excinfo.value, ReleaseNotFoundError)


class TestDeploy:
    def test_install_repository_chart_with_pull_secrets(
        self, agent: HelmAgent, commands: MagicMock
    ) -> None:
        written: dict = {}

        def install(name, chart, namespace, **kwargs):
            written["values"] = yaml.safe_load(Path(kwargs["value_files"][0]).read_text())
            written["kwargs"] = kwargs
            return _ok(STATUS_JSON)

        commands.install.side_effect = install
        config = InstallChartConfig(
            chart=ChartRef(name="job", repository="https://charts.getporter.dev"),
            name="api-r",
            namespace="porter-stack-api",
            values={"paused": True},
            cluster=CLUSTER,
            registries=[
                Registry(project_id=1, name="ecr", url="ecr", pull_secret_name="ecr-pull"),
                Registry(project_id=1, name="public", url="docker.io"),
            ],
        )

        release = agent.install_chart(config)

        assert release.version == 3
        assert written["values"] == {
            "paused": True,
            "global": {"imagePullSecrets": [{"name": "ecr-pull"}]},
        }
        assert written["kwargs"]["repo"] == "https://charts.getporter.dev"
        assert written["kwargs"]["timeout"] == "2m"
        assert written["kwargs"]["kube_context"] == "kind-test"
        # Caller's values are not mutated
        assert config.values == {"paused": True}

    def test_pull_secret_injection_can_be_disabled(self, commands: MagicMock) -> None:
        agent = HelmAgent(commands, inject_pull_secrets=False)
        written: dict = {}

        def install(name, chart, namespace, **kwargs):
            written["values"] = yaml.safe_load(Path(kwargs["value_files"][0]).read_text())
            return _ok(STATUS_JSON)

        commands.install.side_effect = install

        agent.install_chart(
            InstallChartConfig(
                chart=ChartRef(name="job"),
                name="api-r",
                namespace="porter-stack-api",
                values={"paused": True},
                cluster=CLUSTER,
                registries=[
                    Registry(project_id=1, name="ecr", url="ecr", pull_secret_name="s")
                ],
            )
        )

        assert written["values"] == {"paused": True}

    def test_umbrella_chart_is_written_and_resolved(
        self, agent: HelmAgent, commands: MagicMock
    ) -> None:
        seen: dict = {}

        def dependency_update(chart_dir: Path) -> CommandResult:
            seen["chart_yaml"] = yaml.safe_load((chart_dir / "Chart.yaml").read_text())
            return CommandResult(success=True)

        def upgrade_install(name, chart, namespace, **kwargs):
            seen["chart"] = chart
            seen["repo"] = kwargs["repo"]
            return _ok(STATUS_JSON)

        commands.dependency_update.side_effect = dependency_update
        commands.upgrade_install.side_effect = upgrade_install

        agent.upgrade_install_chart(
            InstallChartConfig(
                chart=ChartRef(
                    name="api",
                    dependencies=[
                        ChartDependency("web", "", "https://charts.getporter.dev", "web-web")
                    ],
                ),
                name="api",
                namespace="porter-stack-api",
                values={},
                cluster=CLUSTER,
            )
        )

        assert seen["chart"].endswith("/api")
        assert seen["repo"] is None
        assert seen["chart_yaml"]["apiVersion"] == "v2"
        assert seen["chart_yaml"]["version"] == "0.1.0"
        assert seen["chart_yaml"]["dependencies"][0]["alias"] == "web-web"

    def test_failed_command_raises(self, agent: HelmAgent, commands: MagicMock) -> None:
        commands.upgrade.return_value = CommandResult(
            success=False, stderr="UPGRADE FAILED: has no deployed releases", returncode=1
        )

        with pytest.raises(HelmError) as excinfo:
            agent.upgrade_release(
                InstallChartConfig(
                    chart=ChartRef(name="job"),
                    name="api-r",
                    namespace="porter-stack-api",
                    values={},
                    cluster=CLUSTER,
                )
            )

        assert "no deployed releases" in str(excinfo.value)

    def test_non_json_output_reads_release_back(
        self, agent: HelmAgent, commands: MagicMock
    ) -> None:
        commands.install.return_value = CommandResult(success=True, stdout="NAME: api-r")
        commands.status.return_value = _ok(STATUS_JSON)

        release = agent.install_chart(
            InstallChartConfig(
                chart=ChartRef(name="job"),
                name="api-r",
                namespace="porter-stack-api",
                values={},
                cluster=CLUSTER,
            )
        )

        assert release.version == 3
        commands.status.assert_called_once()


class TestUninstall:
    def test_uninstall(self, agent: HelmAgent, commands: MagicMock) -> None:
        commands.uninstall.return_value = CommandResult(success=True)

        agent.uninstall_chart(CLUSTER, "porter-stack-api", "api")

        commands.uninstall.assert_called_once_with(
            "api", "porter-stack-api", kube_context="kind-test"
        )

    def test_uninstall_failure(self, agent: HelmAgent, commands: MagicMock) -> None:
        commands.uninstall.return_value = CommandResult(
            success=False, stderr="uninstall: Release not loaded: api: release: not found"
        )

        with pytest.raises(HelmError):
            agent.uninstall_chart(CLUSTER, "porter-stack-api", "api")
