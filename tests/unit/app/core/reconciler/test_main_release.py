"""Tests for namespace creation and main release install/upgrade."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from stack_reconciler.app.core.reconciler.errors import PlatformFailure
from stack_reconciler.app.core.reconciler.main_release import MainReleaseDriver
from stack_reconciler.infra.helm import ChartRef, ClusterTarget, InstallChartConfig
from stack_reconciler.infra.k8s import CommandResult

CLUSTER = ClusterTarget(id=3, project_id=1, kube_context="kind-test")


def _config(name: str = "api") -> InstallChartConfig:
    return InstallChartConfig(
        chart=ChartRef(name=name),
        name=name,
        namespace=f"porter-stack-{name}",
        values={"web-web": {"replicaCount": 1}},
        cluster=CLUSTER,
    )


@pytest.fixture
def driver(platform, k8s_controller) -> MainReleaseDriver:
    return MainReleaseDriver(platform, lambda cluster: k8s_controller)


class TestEnsureNamespace:
    def test_creates_namespace(self, driver, k8s_controller) -> None:
        driver.ensure_namespace(CLUSTER, "porter-stack-api")

        k8s_controller.create_namespace.assert_awaited_once_with("porter-stack-api")

    def test_already_existing_namespace_is_fine(self, driver, k8s_controller) -> None:
        k8s_controller.create_namespace.return_value = CommandResult(
            success=True, stdout='namespace "porter-stack-api" already exists'
        )

        driver.ensure_namespace(CLUSTER, "porter-stack-api")

    def test_failed_creation_raises(self, driver, k8s_controller) -> None:
        k8s_controller.create_namespace.return_value = CommandResult(
            success=False, stderr="forbidden", returncode=1
        )

        with pytest.raises(PlatformFailure) as excinfo:
            driver.ensure_namespace(CLUSTER, "porter-stack-api")

        assert excinfo.value.details == "forbidden"

    def test_controller_exception_raises(self, platform) -> None:
        controller = MagicMock()
        controller.create_namespace = AsyncMock(side_effect=RuntimeError("no kubeconfig"))
        driver = MainReleaseDriver(platform, lambda cluster: controller)

        with pytest.raises(PlatformFailure):
            driver.ensure_namespace(CLUSTER, "porter-stack-api")


class TestInstall:
    def test_install(self, driver, platform) -> None:
        release = driver.install(_config())

        assert release.version == 1
        assert platform.actions() == [("install", "api")]

    def test_failed_install_rolls_back(self, driver, platform) -> None:
        platform.fail_on["install"] = "api"

        with pytest.raises(PlatformFailure) as excinfo:
            driver.install(_config())

        assert platform.actions() == [("install", "api"), ("uninstall", "api")]
        assert excinfo.value.http_status == 400
        assert excinfo.value.operation == "install main release"

    def test_rollback_failure_is_attached_not_raised(self, driver, platform) -> None:
        platform.fail_on["install"] = "api"
        platform.fail_on["uninstall"] = "api"

        with pytest.raises(PlatformFailure) as excinfo:
            driver.install(_config())

        error = excinfo.value
        assert "injected failure" in (error.details or "")
        assert len(error.secondary_errors) == 1
        assert "uninstall" in str(error.secondary_errors[0])
        assert "additionally" in str(error)

    def test_existing_release_is_kept_when_name_is_in_use(self, driver, platform) -> None:
        platform.seed("porter-stack-api", "api", version=5)

        with pytest.raises(PlatformFailure) as excinfo:
            driver.install(_config())

        assert platform.actions() == [("install", "api")]
        assert platform.releases[("porter-stack-api", "api")].version == 5
        assert excinfo.value.secondary_errors == []

    def test_release_left_by_failed_install_is_removed(self, driver, platform) -> None:
        platform.fail_on["install"] = "api"
        platform.seed("porter-stack-api", "api", version=1).status = "failed"

        with pytest.raises(PlatformFailure):
            driver.install(_config())

        assert ("porter-stack-api", "api") not in platform.releases

    def test_established_release_is_kept_on_other_errors(self, driver, platform) -> None:
        platform.fail_on["install"] = "api"
        platform.seed("porter-stack-api", "api", version=2)

        with pytest.raises(PlatformFailure):
            driver.install(_config())

        assert platform.actions() == [("install", "api")]
        assert ("porter-stack-api", "api") in platform.releases


class TestUpgrade:
    def test_upgrade_bumps_version(self, driver, platform) -> None:
        platform.seed("porter-stack-api", "api", version=3)

        release = driver.upgrade(_config())

        assert release.version == 4
        assert platform.actions() == [("upgrade_install", "api")]

    def test_upgrade_installs_missing_release(self, driver, platform) -> None:
        release = driver.upgrade(_config())

        assert release.version == 1

    def test_failed_upgrade_is_client_error(self, driver, platform) -> None:
        platform.fail_on["upgrade_install"] = "api"

        with pytest.raises(PlatformFailure) as excinfo:
            driver.upgrade(_config())

        assert excinfo.value.client_error
        assert platform.actions() == [("upgrade_install", "api")]
