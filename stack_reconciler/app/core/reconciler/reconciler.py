"""Stack reconciliation.

One call to ``Reconciler.reconcile`` drives the cluster towards a porter.yaml
manifest and mirrors the outcome into the application store:

1. Probe the main release: absent means create, present means update.
2. Resolve the image and compile the manifest into chart, values and job
   values. Nothing has been mutated yet, so bad input fails cleanly.
3. Create: ensure the stack namespace exists.
4. Override requests: reconcile the job release.
5. Install (create) or upgrade-install (update) the main release.
6. Write the application row and append a deploy event.

Reconciliations of the same (cluster, name) are serialized for the whole
sequence. There is no cross-system transaction: a failed store write after
a successful cluster mutation leaves the cluster as it is.
"""

from __future__ import annotations

from collections.abc import Callable

from loguru import logger

from stack_reconciler.app.core.services.database.store import ApplicationStore
from stack_reconciler.app.entities.registry.table import Registry
from stack_reconciler.app.runtime.config.config_data import ConfigData
from stack_reconciler.infra.constants import DEFAULT_CONSTANTS, ReleaseConstants
from stack_reconciler.infra.helm import (
    ChartRef,
    ClusterTarget,
    InstallChartConfig,
    ReleasePlatform,
)
from stack_reconciler.infra.k8s import KubernetesController

from .compiler import CompileOptions, PorterYamlCompiler, StackCompiler, uses_launcher
from .errors import PersistenceFailure, ValidationFailure
from .image import resolve_image
from .job_release import JobReleaseManager
from .locks import KeyedLock
from .main_release import MainReleaseDriver
from .prober import ReleaseStateProber
from .records import RecordSynchronizer
from .types import DeployRequest, JobReleaseAction, PatchKind, ReconcileResult


def release_constants(config: ConfigData) -> ReleaseConstants:
    """Build release constants from the ``stacks`` and ``helm`` sections."""
    return ReleaseConstants(
        NAMESPACE_PREFIX=config.stacks.namespace_prefix,
        JOB_RELEASE_SUFFIX=config.stacks.job_release_suffix,
        JOB_CHART_NAME=config.helm.job_chart_name,
        DEFAULT_APP_HELM_REPO_URL=config.helm.default_app_helm_repo_url,
        HELM_TIMEOUT=config.helm.timeout,
        EVENTS_PAGE_SIZE=config.stacks.events_page_size,
    )


class Reconciler:
    """Creates or updates stacks.

    Attributes:
        platform: Release platform for every Helm call
        store: Application system-of-record
        compiler: Manifest compiler
        constants: Release naming constants
    """

    def __init__(
        self,
        platform: ReleasePlatform,
        store: ApplicationStore,
        controller_factory: Callable[[ClusterTarget], KubernetesController],
        *,
        compiler: StackCompiler | None = None,
        constants: ReleaseConstants | None = None,
        job_chart_version: str = "",
        locks: KeyedLock | None = None,
    ) -> None:
        self.platform = platform
        self.store = store
        self.constants = constants or DEFAULT_CONSTANTS
        self.compiler = compiler or PorterYamlCompiler(self.constants)
        self.locks = locks or KeyedLock()

        self.prober = ReleaseStateProber(platform, self.constants)
        self.main_release = MainReleaseDriver(platform, controller_factory)
        self.job_release = JobReleaseManager(
            platform,
            ChartRef(
                name=self.constants.JOB_CHART_NAME,
                version=job_chart_version,
                repository=self.constants.DEFAULT_APP_HELM_REPO_URL,
            ),
            self.constants,
        )
        self.records = RecordSynchronizer(store, self.constants)

    def reconcile(self, request: DeployRequest, cluster: ClusterTarget) -> ReconcileResult:
        """Run one reconciliation.

        Raises:
            ValidationFailure: Bad stack name or manifest (nothing mutated)
            ConflictFailure: The app row appeared after the release install
            PlatformFailure: A namespace or release operation failed
            PersistenceFailure: A store read or write failed
        """
        self.validate_stack_name(request.stack_name)

        with self.locks.hold((cluster.id, request.stack_name)):
            return self._reconcile(request, cluster)

    def _reconcile(self, request: DeployRequest, cluster: ClusterTarget) -> ReconcileResult:
        name = request.stack_name
        prior = self.prober.probe(cluster, name)
        creating = prior is None
        logger.info(
            f"Reconciling stack {name} on cluster {cluster.id}: "
            f"{'create' if creating else 'update'}"
            f"{' (override)' if request.override_release else ''}"
        )

        registries = self._list_registries(request.project_id)

        consult_prior = creating or request.override_release
        image_info = resolve_image(
            request.image_info,
            consult_prior=consult_prior,
            prior_config=prior.config if prior is not None else None,
            build_output=request.build_image,
        )
        if image_info.is_empty:
            logger.info(f"No image resolved for stack {name}")

        prior_values = None
        prior_dependencies = None
        if prior is not None and not request.override_release:
            prior_values = prior.config
            prior_dependencies = prior.dependencies

        compiled = self.compiler.compile(
            request.porter_yaml,
            image_info,
            prior_values,
            prior_dependencies,
            CompileOptions(
                stack_name=name,
                inject_launcher=uses_launcher(self._builder(request, cluster)),
                app_repo_url=self.constants.DEFAULT_APP_HELM_REPO_URL,
            ),
        )

        if creating:
            self.main_release.ensure_namespace(cluster, compiled.namespace)

        job_action = JobReleaseAction.NONE
        if request.override_release:
            job_action = self.job_release.reconcile(
                cluster, name, compiled.job_values, registries
            )

        config = InstallChartConfig(
            chart=compiled.chart,
            name=name,
            namespace=compiled.namespace,
            values=compiled.values,
            cluster=cluster,
            registries=registries,
        )
        if prior is None:
            self.main_release.install(config)
            app, event = self.records.create(request, cluster)
        else:
            self.main_release.upgrade(config)
            app, event = self.records.update(request, cluster, prior.version)

        return ReconcileResult(
            app=app, event=event, created=creating, job_action=job_action
        )

    def validate_stack_name(self, name: str) -> None:
        """Reject names that cannot form a namespace or release name."""
        namespace = self.constants.namespace_for(name)
        if (
            not self.constants.STACK_NAME_PATTERN.match(name)
            or len(namespace) > self.constants.MAX_NAMESPACE_LENGTH
        ):
            raise ValidationFailure(
                f"invalid stack name {name!r}",
                operation="validate request",
                target=name,
                details="must be a lowercase DNS label fitting the namespace prefix",
            )

    def _list_registries(self, project_id: int) -> list[Registry]:
        try:
            return self.store.list_registries(project_id)
        except Exception as e:
            raise PersistenceFailure(
                "error listing registries",
                operation="list registries",
                target=f"project {project_id}",
                details=str(e),
            ) from e

    def _builder(self, request: DeployRequest, cluster: ClusterTarget) -> str:
        """Requested builder, falling back to the stored one when not given."""
        patch = request.patch("builder")
        if patch.kind is not PatchKind.UNSET:
            return patch.apply("")
        try:
            app = self.store.read_by_name(cluster.id, request.stack_name)
        except Exception as e:
            logger.debug(f"Could not read stored builder of {request.stack_name}: {e}")
            return ""
        return app.builder if app is not None else ""


def build_reconciler(
    config: ConfigData,
    store: ApplicationStore,
    platform: ReleasePlatform | None = None,
    controller_factory: Callable[[ClusterTarget], KubernetesController] | None = None,
) -> Reconciler:
    """Create a Reconciler wired to the Helm CLI and the configured k8s backend."""
    from stack_reconciler.infra.helm import build_helm_agent
    from stack_reconciler.infra.k8s import controller_for_cluster

    constants = release_constants(config)
    if platform is None:
        platform = build_helm_agent(
            binary=config.helm.binary,
            timeout=config.helm.timeout,
            inject_pull_secrets=not config.helm.disable_pull_secrets_injection,
        )
    if controller_factory is None:
        backend = config.kubernetes.backend

        def _controller(cluster: ClusterTarget) -> KubernetesController:
            return controller_for_cluster(cluster, backend)

        controller_factory = _controller

    return Reconciler(
        platform,
        store,
        controller_factory,
        constants=constants,
        job_chart_version=config.helm.job_chart_version,
    )
