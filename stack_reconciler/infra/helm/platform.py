"""Abstract release platform interface.

Defines the install/upgrade/uninstall/get contract the reconciler drives.
The Helm CLI adapter implements it; tests substitute mocks.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .types import ClusterTarget, InstallChartConfig, ReleaseInfo


class ReleasePlatform(ABC):
    """Release store of a container-orchestration cluster."""

    @abstractmethod
    def get_release(
        self, cluster: ClusterTarget, namespace: str, name: str
    ) -> ReleaseInfo:
        """Get the latest revision of a release.

        Raises:
            ReleaseNotFoundError: If the release does not exist
            HelmError: If the platform cannot be queried
        """
        ...

    @abstractmethod
    def install_chart(self, config: InstallChartConfig) -> ReleaseInfo:
        """Install a new release.

        Raises:
            HelmError: If the install fails
        """
        ...

    @abstractmethod
    def upgrade_install_chart(self, config: InstallChartConfig) -> ReleaseInfo:
        """Upgrade a release, installing it when it does not exist.

        Raises:
            HelmError: If the upgrade fails
        """
        ...

    @abstractmethod
    def upgrade_release(self, config: InstallChartConfig) -> ReleaseInfo:
        """Upgrade an existing release by replacing its values.

        Raises:
            HelmError: If the release is missing or the upgrade fails
        """
        ...

    @abstractmethod
    def uninstall_chart(self, cluster: ClusterTarget, namespace: str, name: str) -> None:
        """Uninstall a release.

        Raises:
            HelmError: If the uninstall fails
        """
        ...
