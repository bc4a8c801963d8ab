"""Health check endpoints.

Endpoint Summary:
    GET /health/live     - Liveness probe (app is running)
    GET /health/database - Application store connectivity
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from stack_reconciler.app.api.http.app_data import ApplicationDependencies
from stack_reconciler.app.api.http.deps import get_app_dependencies
from stack_reconciler.app.api.http.schemas.health import (
    DatabaseHealth,
    HealthCheckError,
    LivenessResponse,
    ServiceStatus,
)

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "/live",
    response_model=LivenessResponse,
    summary="Liveness probe",
    description="Basic health check - returns 200 if the application process is running.",
)
async def liveness() -> LivenessResponse:
    return LivenessResponse()


@router.get(
    "/database",
    response_model=DatabaseHealth,
    responses={
        503: {
            "description": "Database is unhealthy",
            "model": HealthCheckError,
        },
    },
    summary="Database health check",
)
def health_database(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> DatabaseHealth | JSONResponse:
    """Check that the application store accepts connections."""
    url = app_deps.config.database.url
    db_type = "postgresql" if "postgresql" in url else "sqlite"

    if not app_deps.database_service.health_check():
        return JSONResponse(
            status_code=503,
            content=HealthCheckError(
                error="database did not accept a connection",
                error_type="ConnectionError",
            ).model_dump(mode="json"),
        )
    return DatabaseHealth(status=ServiceStatus.HEALTHY, type=db_type)
