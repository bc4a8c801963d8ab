"""Tests for release probing."""

from unittest.mock import MagicMock

from stack_reconciler.app.core.reconciler.prober import ReleaseStateProber, probe_release
from stack_reconciler.infra.helm import ClusterTarget, HelmError, ReleaseInfo

CLUSTER = ClusterTarget(id=7, project_id=1)


class TestProbeRelease:
    def test_returns_existing_release(self, platform) -> None:
        platform.seed("porter-stack-api", "api", version=4)

        release = ReleaseStateProber(platform).probe(CLUSTER, "api")

        assert release is not None
        assert release.version == 4
        assert ("get", "porter-stack-api", "api") in platform.calls

    def test_missing_release_is_none(self, platform) -> None:
        assert ReleaseStateProber(platform).probe(CLUSTER, "api") is None

    def test_any_error_is_treated_as_absent(self) -> None:
        failing = MagicMock()
        failing.get_release.side_effect = HelmError("Kubernetes cluster unreachable")

        assert probe_release(failing, CLUSTER, "porter-stack-api", "api") is None

    def test_job_release_probe_uses_suffixed_name(self, platform) -> None:
        platform.seed("porter-stack-api", "api-r")

        release = ReleaseStateProber(platform).probe_job_release(CLUSTER, "api")

        assert isinstance(release, ReleaseInfo)
        assert release.name == "api-r"
