"""Pydantic schemas for stack API endpoints."""

from __future__ import annotations

import base64
import binascii
import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from stack_reconciler.app.core.reconciler import (
    DeployRequest,
    FieldPatch,
    ImageInfo,
    ValidationFailure,
)
from stack_reconciler.app.core.reconciler.types import PATCHABLE_FIELDS

# =============================================================================
# Request Models
# =============================================================================


class ImageInfoModel(BaseModel):
    repository: str = ""
    tag: str = ""


class CreateStackRequest(BaseModel):
    """Request model for creating or updating a stack.

    Build provenance fields follow patch semantics: an omitted field or ``""``
    keeps the stored value, ``null`` (or the string ``"null"``) clears it and
    any other string replaces it.

    Example:
        ```json
        {
            "porter_yaml": "dmVyc2lvbjogdjFzdGFjawphcHBzOiB7fQo=",
            "image_info": {"repository": "registry.example.com/api", "tag": "v1"},
            "override_release": false,
            "builder": "heroku/buildpacks:20"
        }
        ```
    """

    porter_yaml: str = Field(description="Base64-encoded porter.yaml manifest")
    image_info: ImageInfoModel | None = Field(
        default=None, description="Image to deploy; prior release values otherwise"
    )
    override_release: bool = Field(
        default=False,
        description="Discard prior values and manage the release job release",
    )
    git_repo_id: int | None = None

    repo_name: str | None = None
    git_branch: str | None = None
    build_context: str | None = None
    builder: str | None = None
    buildpacks: str | None = None
    dockerfile: str | None = None
    image_repo_uri: str | None = None
    pull_request_url: str | None = None
    porter_yaml_path: str | None = None

    def field_patch(self, name: str) -> FieldPatch:
        if name not in self.model_fields_set:
            return FieldPatch.unset()
        return FieldPatch.from_input(getattr(self, name))

    def decode_manifest(self) -> bytes:
        try:
            return base64.b64decode(self.porter_yaml, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationFailure(
                "error decoding porter.yaml",
                operation="decode request",
                details=str(e),
            ) from e

    def to_deploy_request(self, stack_name: str, project_id: int) -> DeployRequest:
        image = self.image_info or ImageInfoModel()
        return DeployRequest(
            stack_name=stack_name,
            project_id=project_id,
            porter_yaml=self.decode_manifest(),
            image_info=ImageInfo(repository=image.repository, tag=image.tag),
            override_release=self.override_release,
            git_repo_id=self.git_repo_id or None,
            patches={name: self.field_patch(name) for name in PATCHABLE_FIELDS},
        )


# =============================================================================
# Response Models
# =============================================================================


class PorterAppResponse(BaseModel):
    """A deployed stack."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    cluster_id: int
    project_id: int
    repo_name: str = ""
    git_repo_id: int | None = None
    git_branch: str = ""
    build_context: str = ""
    builder: str = ""
    buildpacks: str = ""
    dockerfile: str = ""
    image_repo_uri: str = ""
    pull_request_url: str = ""
    porter_yaml_path: str = ""
    created_at: datetime
    updated_at: datetime


class PorterAppEventResponse(BaseModel):
    """One entry of a stack's activity feed."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    status: str
    type: str
    type_external_source: str
    porter_app_id: int
    metadata: dict[str, Any] = Field(validation_alias="event_metadata")
    created_at: datetime


class EventListResponse(BaseModel):
    """A page of a stack's activity feed, newest first."""

    events: list[PorterAppEventResponse]
    page: int
    num_pages: int


class ReconcileErrorResponse(BaseModel):
    """Body returned for a failed reconciliation."""

    detail: str
    kind: str
    operation: str = ""
    target: str = ""
    secondary_errors: list[str] = Field(default_factory=list)
