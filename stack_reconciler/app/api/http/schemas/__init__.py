"""Request and response schemas of the HTTP API."""

from stack_reconciler.app.api.http.schemas.health import LivenessResponse
from stack_reconciler.app.api.http.schemas.stacks import (
    CreateStackRequest,
    EventListResponse,
    PorterAppEventResponse,
    PorterAppResponse,
    ReconcileErrorResponse,
)

__all__ = [
    "CreateStackRequest",
    "EventListResponse",
    "LivenessResponse",
    "PorterAppEventResponse",
    "PorterAppResponse",
    "ReconcileErrorResponse",
]
