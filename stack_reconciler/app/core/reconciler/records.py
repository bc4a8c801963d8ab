"""Relational bookkeeping after a successful cluster mutation.

Writes here never undo cluster changes: the cluster is authoritative and the
application row and event feed mirror it on a best-effort basis.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from loguru import logger

from stack_reconciler.app.core.services.database.store import ApplicationStore
from stack_reconciler.app.entities.application.table import PorterApp
from stack_reconciler.app.entities.deploy_event.table import PorterAppEvent
from stack_reconciler.infra.constants import DEFAULT_CONSTANTS, ReleaseConstants
from stack_reconciler.infra.helm import ClusterTarget

from .errors import ConflictFailure, PersistenceFailure
from .types import PATCHABLE_FIELDS, DeployRequest

T = TypeVar("T")


class RecordSynchronizer:
    """Creates or patches application rows and appends deploy events."""

    def __init__(
        self, store: ApplicationStore, constants: ReleaseConstants | None = None
    ) -> None:
        self.store = store
        self.constants = constants or DEFAULT_CONSTANTS

    def create(
        self, request: DeployRequest, cluster: ClusterTarget
    ) -> tuple[PorterApp, PorterAppEvent]:
        """Insert the application row and its first deploy event.

        Raises:
            ConflictFailure: If an application with the same name exists
            PersistenceFailure: If a store call fails
        """
        target = f"cluster {cluster.id} app {request.stack_name}"
        existing = self._call(
            "read application",
            target,
            self.store.read_by_name,
            cluster.id,
            request.stack_name,
        )
        if existing is not None:
            raise ConflictFailure(
                f"app with name {request.stack_name} already exists in your project",
                operation="create application",
                target=target,
            )

        app = PorterApp(
            name=request.stack_name,
            cluster_id=cluster.id,
            project_id=request.project_id,
            git_repo_id=request.git_repo_id,
            **{name: request.patch(name).initial() for name in PATCHABLE_FIELDS},
        )
        app = self._call("write application", target, self.store.upsert, app)
        event = self._append_event(app, 1, target)
        logger.info(f"Created application {request.stack_name} (id {app.id})")
        return app, event

    def update(
        self, request: DeployRequest, cluster: ClusterTarget, prior_version: int
    ) -> tuple[PorterApp, PorterAppEvent]:
        """Patch the application row and append a deploy event.

        Args:
            request: Deploy request carrying the field patches
            cluster: Target cluster
            prior_version: Version of the main release before the upgrade

        Raises:
            PersistenceFailure: If the row is missing or a store call fails
        """
        target = f"cluster {cluster.id} app {request.stack_name}"
        app = self._call(
            "read application",
            target,
            self.store.read_by_name,
            cluster.id,
            request.stack_name,
        )
        if app is None:
            raise PersistenceFailure(
                f"no record of deployed app {request.stack_name}",
                operation="read application",
                target=target,
            )

        for name in PATCHABLE_FIELDS:
            setattr(app, name, request.patch(name).apply(getattr(app, name)))
        if request.git_repo_id is not None:
            app.git_repo_id = request.git_repo_id

        app = self._call("write application", target, self.store.upsert, app)
        event = self._append_event(app, prior_version + 1, target)
        logger.info(f"Updated application {request.stack_name} (id {app.id})")
        return app, event

    def _append_event(self, app: PorterApp, revision: int, target: str) -> PorterAppEvent:
        if app.id is None:
            raise PersistenceFailure(
                "application row has no id",
                operation="append deploy event",
                target=target,
            )
        event = PorterAppEvent(
            status=self.constants.EVENT_STATUS_SUCCESS,
            type=self.constants.EVENT_TYPE_DEPLOY,
            type_external_source=self.constants.EVENT_SOURCE_KUBERNETES,
            porter_app_id=app.id,
            revision=revision,
            event_metadata={"revision": revision},
        )
        return self._call("append deploy event", target, self.store.append_event, event)

    @staticmethod
    def _call(
        operation: str, target: str, func: Callable[..., T], *args: Any
    ) -> T:
        try:
            return func(*args)
        except Exception as e:
            raise PersistenceFailure(
                f"error during {operation}",
                operation=operation,
                target=target,
                details=str(e),
            ) from e
