"""Shared fixtures: an in-memory SQLite store and an in-memory release platform."""

import copy
import os
from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest

# Keep config loading away from a developer's config.yaml
os.environ.setdefault("STACK_RECONCILER_CONFIG", "/nonexistent/config.yaml")

from stack_reconciler.app.core.services.database import (  # noqa: E402
    DbManageService,
    SqlApplicationStore,
)
from stack_reconciler.app.entities.cluster.table import Cluster  # noqa: E402
from stack_reconciler.app.entities.registry.table import Registry  # noqa: E402
from stack_reconciler.app.runtime.config.config_data import DatabaseConfig  # noqa: E402
from stack_reconciler.infra.helm import (  # noqa: E402
    ClusterTarget,
    CommandResult,
    HelmError,
    InstallChartConfig,
    ReleaseInfo,
    ReleaseNotFoundError,
    ReleasePlatform,
)


class InMemoryReleasePlatform(ReleasePlatform):
    """Release store kept in a dict, keyed by (namespace, name).

    Set ``fail_on`` to make an operation raise HelmError, e.g.
    ``{"install": "api"}`` fails installs of the release named ``api``.
    """

    def __init__(self) -> None:
        self.releases: dict[tuple[str, str], ReleaseInfo] = {}
        self.calls: list[tuple[str, str, str]] = []
        self.fail_on: dict[str, str] = {}

    def seed(
        self,
        namespace: str,
        name: str,
        *,
        version: int = 1,
        config: dict | None = None,
        chart_name: str = "",
    ) -> ReleaseInfo:
        release = ReleaseInfo(
            name=name,
            namespace=namespace,
            version=version,
            status="deployed",
            chart_name=chart_name or name,
            config=config or {},
        )
        self.releases[(namespace, name)] = release
        return release

    def _maybe_fail(self, action: str, name: str) -> None:
        if self.fail_on.get(action) == name:
            raise HelmError(f"helm {action} of {name} failed", "injected failure")

    def get_release(self, cluster: ClusterTarget, namespace: str, name: str) -> ReleaseInfo:
        self.calls.append(("get", namespace, name))
        self._maybe_fail("get", name)
        try:
            return copy.deepcopy(self.releases[(namespace, name)])
        except KeyError:
            raise ReleaseNotFoundError(f"release {namespace}/{name} not found") from None

    def _store(self, config: InstallChartConfig, version: int) -> ReleaseInfo:
        release = ReleaseInfo(
            name=config.name,
            namespace=config.namespace,
            version=version,
            status="deployed",
            chart_name=config.chart.name,
            chart_version=config.chart.version,
            dependencies=list(config.chart.dependencies),
            config=copy.deepcopy(config.values),
        )
        self.releases[(config.namespace, config.name)] = release
        return copy.deepcopy(release)

    def install_chart(self, config: InstallChartConfig) -> ReleaseInfo:
        self.calls.append(("install", config.namespace, config.name))
        self._maybe_fail("install", config.name)
        if (config.namespace, config.name) in self.releases:
            raise HelmError("cannot re-use a name that is still in use")
        return self._store(config, 1)

    def upgrade_install_chart(self, config: InstallChartConfig) -> ReleaseInfo:
        self.calls.append(("upgrade_install", config.namespace, config.name))
        self._maybe_fail("upgrade_install", config.name)
        existing = self.releases.get((config.namespace, config.name))
        return self._store(config, existing.version + 1 if existing else 1)

    def upgrade_release(self, config: InstallChartConfig) -> ReleaseInfo:
        self.calls.append(("upgrade", config.namespace, config.name))
        self._maybe_fail("upgrade", config.name)
        existing = self.releases.get((config.namespace, config.name))
        if existing is None:
            raise HelmError(f'"{config.name}" has no deployed releases')
        return self._store(config, existing.version + 1)

    def uninstall_chart(self, cluster: ClusterTarget, namespace: str, name: str) -> None:
        self.calls.append(("uninstall", namespace, name))
        self._maybe_fail("uninstall", name)
        if self.releases.pop((namespace, name), None) is None:
            raise ReleaseNotFoundError(f"release {namespace}/{name} not found")

    def actions(self) -> list[tuple[str, str]]:
        """Mutating calls as (action, release name), in order."""
        return [(action, name) for action, _, name in self.calls if action != "get"]


@pytest.fixture
def platform() -> InMemoryReleasePlatform:
    return InMemoryReleasePlatform()


@pytest.fixture
def k8s_controller() -> MagicMock:
    """Kubernetes controller whose namespace creation succeeds."""
    controller = MagicMock()
    controller.create_namespace = AsyncMock(
        return_value=CommandResult(success=True, stdout="namespace created")
    )
    return controller


@pytest.fixture
def db_service() -> DbManageService:
    service = DbManageService(DatabaseConfig(url="sqlite://"))
    service.create_all()
    return service


@pytest.fixture
def store(db_service: DbManageService) -> Iterator[SqlApplicationStore]:
    yield SqlApplicationStore(db_service.engine)
    db_service.engine.dispose()


@pytest.fixture
def cluster_row(db_service: DbManageService) -> Cluster:
    from sqlmodel import Session

    with Session(db_service.engine, expire_on_commit=False) as session:
        cluster = Cluster(project_id=1, name="test-cluster", kube_context="kind-test")
        session.add(cluster)
        session.add(
            Registry(
                project_id=1,
                name="ecr",
                url="123.dkr.ecr.us-east-1.amazonaws.com",
                pull_secret_name="ecr-pull",
            )
        )
        session.commit()
        session.refresh(cluster)
        return cluster


@pytest.fixture
def cluster(cluster_row: Cluster) -> ClusterTarget:
    return cluster_row.to_target()
