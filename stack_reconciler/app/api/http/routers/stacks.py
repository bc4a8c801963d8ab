"""Stack deployment endpoints.

Endpoint Summary:
    POST /projects/{project_id}/clusters/{cluster_id}/stacks/{stack_name}
        - Create or update a stack from a porter.yaml manifest
    GET  /projects/{project_id}/clusters/{cluster_id}/stacks/{stack_name}/events
        - Page through the stack's activity feed
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from stack_reconciler.app.api.http.deps import get_app_config, get_reconciler, get_store
from stack_reconciler.app.api.http.schemas.stacks import (
    CreateStackRequest,
    EventListResponse,
    PorterAppEventResponse,
    PorterAppResponse,
    ReconcileErrorResponse,
)
from stack_reconciler.app.core.reconciler import Reconciler
from stack_reconciler.app.core.services.database import ApplicationStore
from stack_reconciler.app.entities.cluster.table import Cluster
from stack_reconciler.app.runtime.config.config_data import ConfigData

router = APIRouter(
    prefix="/projects/{project_id}/clusters/{cluster_id}/stacks", tags=["stacks"]
)


def _get_cluster(store: ApplicationStore, project_id: int, cluster_id: int) -> Cluster:
    cluster = store.get_cluster(cluster_id)
    if cluster is None or cluster.project_id != project_id:
        raise HTTPException(
            status_code=404,
            detail=f"cluster {cluster_id} not found in project {project_id}",
        )
    return cluster


@router.post(
    "/{stack_name}",
    response_model=PorterAppResponse,
    responses={
        400: {"description": "Invalid request or deploy failed", "model": ReconcileErrorResponse},
        403: {"description": "App already exists", "model": ReconcileErrorResponse},
        404: {"description": "Cluster not found"},
        500: {"description": "Reconciliation failed", "model": ReconcileErrorResponse},
    },
    summary="Create or update a stack",
)
def create_or_update_stack(
    project_id: int,
    cluster_id: int,
    stack_name: str,
    body: CreateStackRequest,
    store: ApplicationStore = Depends(get_store),
    reconciler: Reconciler = Depends(get_reconciler),
) -> PorterAppResponse:
    """Deploy a porter.yaml stack to a cluster.

    Installs the stack when no release exists yet, otherwise upgrades it.
    Runs in the threadpool since every Helm call blocks.
    """
    cluster = _get_cluster(store, project_id, cluster_id)
    request = body.to_deploy_request(stack_name, project_id)
    result = reconciler.reconcile(request, cluster.to_target())
    return PorterAppResponse.model_validate(result.app)


@router.get(
    "/{stack_name}/events",
    response_model=EventListResponse,
    summary="List a stack's events",
)
def list_stack_events(
    project_id: int,
    cluster_id: int,
    stack_name: str,
    page: int = Query(default=1, ge=1),
    store: ApplicationStore = Depends(get_store),
    config: ConfigData = Depends(get_app_config),
) -> EventListResponse:
    """Return one page of the stack's activity feed, newest first."""
    _get_cluster(store, project_id, cluster_id)
    app = store.read_by_name(cluster_id, stack_name)
    if app is None or app.id is None:
        raise HTTPException(status_code=404, detail=f"stack {stack_name} not found")

    result = store.list_events(app.id, page, config.stacks.events_page_size)
    return EventListResponse(
        events=[PorterAppEventResponse.model_validate(e) for e in result.events],
        page=result.page,
        num_pages=result.num_pages,
    )
