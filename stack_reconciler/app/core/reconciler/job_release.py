"""Lifecycle of a stack's release job release.

The job release (``<name>-r``) exists only while the latest override
reconciliation supplied job values. Its existence is probed on every run:

| exists | requested | action    |
|--------|-----------|-----------|
| no     | no        | none      |
| no     | yes       | install   |
| yes    | no        | uninstall |
| yes    | yes       | upgrade   |
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from loguru import logger

from stack_reconciler.infra.constants import DEFAULT_CONSTANTS, ReleaseConstants
from stack_reconciler.infra.helm import (
    ChartRef,
    ClusterTarget,
    InstallChartConfig,
    RegistryCredential,
    ReleasePlatform,
)

from .errors import PlatformFailure
from .prober import ReleaseStateProber
from .types import JobReleaseAction


def decide_job_action(exists: bool, job_values: dict[str, Any] | None) -> JobReleaseAction:
    """Pick the job release action for the observed and requested state."""
    requested = bool(job_values)
    if exists and requested:
        return JobReleaseAction.UPGRADE
    if exists:
        return JobReleaseAction.UNINSTALL
    if requested:
        return JobReleaseAction.INSTALL
    return JobReleaseAction.NONE


class JobReleaseManager:
    """Installs, upgrades or removes the job release of a stack."""

    def __init__(
        self,
        platform: ReleasePlatform,
        job_chart: ChartRef,
        constants: ReleaseConstants | None = None,
    ) -> None:
        """
        Args:
            platform: Release platform used for every job release call
            job_chart: Chart the job release is installed from
            constants: Optional release constants
        """
        self.platform = platform
        self.job_chart = job_chart
        self.constants = constants or DEFAULT_CONSTANTS
        self.prober = ReleaseStateProber(platform, self.constants)

    def reconcile(
        self,
        cluster: ClusterTarget,
        stack_name: str,
        job_values: dict[str, Any] | None,
        registries: Sequence[RegistryCredential] = (),
    ) -> JobReleaseAction:
        """Drive the job release towards ``job_values``.

        Returns:
            The action taken

        Raises:
            PlatformFailure: If the action fails; a failed cleanup uninstall
                is attached as a secondary error
        """
        release_name = self.constants.job_release_name(stack_name)
        namespace = self.constants.namespace_for(stack_name)
        existing = self.prober.probe_job_release(cluster, stack_name)
        action = decide_job_action(existing is not None, job_values)
        target = f"{namespace}/{release_name}"
        logger.info(f"Job release {target}: {action.value}")

        if action is JobReleaseAction.NONE:
            return action

        if action is JobReleaseAction.UNINSTALL:
            try:
                self.platform.uninstall_chart(cluster, namespace, release_name)
            except Exception as e:
                raise PlatformFailure(
                    "error uninstalling release job chart",
                    operation="uninstall job release",
                    target=target,
                    details=str(e),
                ) from e
            return action

        config = InstallChartConfig(
            chart=self.job_chart,
            name=release_name,
            namespace=namespace,
            values=job_values or {},
            cluster=cluster,
            registries=registries,
        )
        try:
            if action is JobReleaseAction.INSTALL:
                self.platform.install_chart(config)
            else:
                self.platform.upgrade_release(config)
        except Exception as e:
            error = PlatformFailure(
                f"error during {action.value} of release job chart",
                operation=f"{action.value} job release",
                target=target,
                details=str(e),
            )
            self._cleanup(cluster, namespace, release_name, error)
            raise error from e
        return action

    def _cleanup(
        self,
        cluster: ClusterTarget,
        namespace: str,
        release_name: str,
        error: PlatformFailure,
    ) -> None:
        try:
            self.platform.uninstall_chart(cluster, namespace, release_name)
            logger.warning(f"Removed job release {namespace}/{release_name} after failure")
        except Exception as cleanup_error:
            logger.warning(
                f"Failed to remove job release {namespace}/{release_name}: {cleanup_error}"
            )
            error.add_secondary(cleanup_error)
