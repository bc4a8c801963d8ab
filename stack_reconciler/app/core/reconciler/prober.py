"""Release state probing.

A failed query of the release store is read as "no release". Connectivity
problems therefore route a stack down the create path, where the namespace
and install calls surface the real error.
"""

from __future__ import annotations

from loguru import logger

from stack_reconciler.infra.constants import DEFAULT_CONSTANTS, ReleaseConstants
from stack_reconciler.infra.helm import ClusterTarget, ReleaseInfo, ReleasePlatform


def probe_release(
    platform: ReleasePlatform, cluster: ClusterTarget, namespace: str, name: str
) -> ReleaseInfo | None:
    """Return the current release, or None when it is absent or unreadable."""
    try:
        return platform.get_release(cluster, namespace, name)
    except Exception as e:
        logger.debug(f"No readable release {namespace}/{name}: {e}")
        return None


class ReleaseStateProber:
    """Probes the main and job releases of a stack."""

    def __init__(
        self, platform: ReleasePlatform, constants: ReleaseConstants | None = None
    ) -> None:
        self.platform = platform
        self.constants = constants or DEFAULT_CONSTANTS

    def probe(self, cluster: ClusterTarget, stack_name: str) -> ReleaseInfo | None:
        namespace = self.constants.namespace_for(stack_name)
        return probe_release(self.platform, cluster, namespace, stack_name)

    def probe_job_release(
        self, cluster: ClusterTarget, stack_name: str
    ) -> ReleaseInfo | None:
        namespace = self.constants.namespace_for(stack_name)
        return probe_release(
            self.platform,
            cluster,
            namespace,
            self.constants.job_release_name(stack_name),
        )
