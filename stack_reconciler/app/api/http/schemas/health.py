"""Health check response schemas."""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class ServiceStatus(str, Enum):
    """Status values for dependency health checks."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class LivenessResponse(BaseModel):
    """Response model for the liveness probe.

    Only verifies the process is running; dependencies are not checked.
    """

    status: Annotated[
        str,
        Field(description="Always 'healthy' if the app is running"),
    ] = "healthy"
    service: Annotated[
        str,
        Field(description="Service identifier"),
    ] = "stack-reconciler"


class DatabaseHealth(BaseModel):
    """Health check result for the application store."""

    model_config = ConfigDict(use_enum_values=True)

    status: ServiceStatus = Field(description="Current health status of the database")
    type: Annotated[
        str,
        Field(description="Database type (postgresql, sqlite)"),
    ]


class HealthCheckError(BaseModel):
    """Error body of a failed health check."""

    model_config = ConfigDict(use_enum_values=True)

    status: ServiceStatus = ServiceStatus.UNHEALTHY
    error: str
    error_type: str
