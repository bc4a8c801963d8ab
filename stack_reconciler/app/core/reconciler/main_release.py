"""Namespace and main release operations."""

from __future__ import annotations

from collections.abc import Callable

from loguru import logger

from stack_reconciler.infra.helm import (
    ClusterTarget,
    InstallChartConfig,
    ReleaseInfo,
    ReleasePlatform,
)
from stack_reconciler.infra.k8s import KubernetesController, run_sync

from .errors import PlatformFailure
from .prober import probe_release

# Main release errors are returned to the caller as-is
MAIN_RELEASE_ERROR_STATUS = 400

# Helm refuses the install because a release of that name already exists
NAME_IN_USE = "cannot re-use a name that is still in use"

# States of a release left behind by an install that did not complete
INCOMPLETE_INSTALL_STATUSES = ("failed", "pending-install")


class MainReleaseDriver:
    """Creates the stack namespace and installs or upgrades the main release."""

    def __init__(
        self,
        platform: ReleasePlatform,
        controller_factory: Callable[[ClusterTarget], KubernetesController],
    ) -> None:
        self.platform = platform
        self.controller_factory = controller_factory

    def ensure_namespace(self, cluster: ClusterTarget, namespace: str) -> None:
        """Create ``namespace`` unless it already exists.

        Raises:
            PlatformFailure: If the namespace cannot be created
        """
        controller = self.controller_factory(cluster)
        try:
            result = run_sync(controller.create_namespace(namespace))
        except Exception as e:
            raise PlatformFailure(
                "error creating namespace",
                operation="create namespace",
                target=namespace,
                details=str(e),
            ) from e

        if not result.success:
            raise PlatformFailure(
                "error creating namespace",
                operation="create namespace",
                target=namespace,
                details=result.stderr.strip() or None,
            )
        logger.info(f"Namespace {namespace} ready")

    def install(self, config: InstallChartConfig) -> ReleaseInfo:
        """Install the main release, removing it again if the install fails.

        Only a release left behind by this install is removed. A release that
        was already there, e.g. one a failed probe reported as absent, is kept.

        Raises:
            PlatformFailure: The install error, with any rollback error
                attached as a secondary error
        """
        target = f"{config.namespace}/{config.name}"
        logger.info(f"Installing main release {target}")
        try:
            return self.platform.install_chart(config)
        except Exception as e:
            error = PlatformFailure(
                "error installing a new chart",
                operation="install main release",
                target=target,
                details=str(e),
                http_status=MAIN_RELEASE_ERROR_STATUS,
            )
            if self._left_by_install(config, e):
                self._rollback(config, error)
            raise error from e

    def upgrade(self, config: InstallChartConfig) -> ReleaseInfo:
        """Upgrade the main release, installing it if it has gone missing.

        Raises:
            PlatformFailure: If the upgrade fails
        """
        target = f"{config.namespace}/{config.name}"
        logger.info(f"Upgrading main release {target}")
        try:
            return self.platform.upgrade_install_chart(config)
        except Exception as e:
            raise PlatformFailure(
                "error upgrading application",
                operation="upgrade main release",
                target=target,
                details=str(e),
                http_status=MAIN_RELEASE_ERROR_STATUS,
            ) from e

    def _rollback(self, config: InstallChartConfig, error: PlatformFailure) -> None:
        target = f"{config.namespace}/{config.name}"
        try:
            self.platform.uninstall_chart(config.cluster, config.namespace, config.name)
            logger.warning(f"Rolled back failed install of {target}")
        except Exception as rollback_error:
            logger.warning(f"Rollback of {target} failed: {rollback_error}")
            error.add_secondary(rollback_error)

    def _left_by_install(self, config: InstallChartConfig, install_error: Exception) -> bool:
        target = f"{config.namespace}/{config.name}"
        if NAME_IN_USE in str(install_error):
            logger.warning(f"Release {target} already existed, keeping it")
            return False

        current = probe_release(self.platform, config.cluster, config.namespace, config.name)
        if current is None:
            return True
        if current.version == 1 and current.status in INCOMPLETE_INSTALL_STATUSES:
            return True
        logger.warning(
            f"Release {target} is at version {current.version} ({current.status}), "
            "keeping it"
        )
        return False
