"""Value types shared by the reconciler components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stack_reconciler.app.entities.application.table import PorterApp
    from stack_reconciler.app.entities.deploy_event.table import PorterAppEvent


@dataclass(frozen=True)
class ImageInfo:
    """Container image of a stack."""

    repository: str = ""
    tag: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.repository) and bool(self.tag)

    @property
    def is_empty(self) -> bool:
        return not self.is_complete

    def __str__(self) -> str:
        return f"{self.repository}:{self.tag}" if self.is_complete else ""


class PatchKind(Enum):
    UNSET = "unset"
    CLEAR = "clear"
    SET = "set"


# Legacy clients send this string to clear a field
CLEAR_SENTINEL = "null"


@dataclass(frozen=True)
class FieldPatch:
    """Requested change to one application field.

    ``UNSET`` keeps the stored value, ``CLEAR`` empties it and ``SET``
    overwrites it with ``value``.
    """

    kind: PatchKind = PatchKind.UNSET
    value: str = ""

    @classmethod
    def unset(cls) -> FieldPatch:
        return cls(PatchKind.UNSET)

    @classmethod
    def clear(cls) -> FieldPatch:
        return cls(PatchKind.CLEAR)

    @classmethod
    def set(cls, value: str) -> FieldPatch:
        return cls(PatchKind.SET, value)

    @classmethod
    def of(cls, value: str | None) -> FieldPatch:
        """Build from a raw value: None clears, "" leaves unset."""
        if value is None:
            return cls.clear()
        if value == "":
            return cls.unset()
        return cls.set(value)

    @classmethod
    def from_input(cls, value: str | None) -> FieldPatch:
        """Like :meth:`of`, also reading the legacy ``"null"`` string as clear."""
        if value == CLEAR_SENTINEL:
            return cls.clear()
        return cls.of(value)

    @property
    def is_unset(self) -> bool:
        return self.kind is PatchKind.UNSET

    def apply(self, current: str) -> str:
        """Return the field value after applying this patch."""
        if self.kind is PatchKind.SET:
            return self.value
        if self.kind is PatchKind.CLEAR:
            return ""
        return current

    def initial(self) -> str:
        """Value of the field on a freshly created record."""
        return self.apply("")


PATCHABLE_FIELDS = (
    "repo_name",
    "git_branch",
    "build_context",
    "builder",
    "buildpacks",
    "dockerfile",
    "image_repo_uri",
    "pull_request_url",
    "porter_yaml_path",
)


@dataclass
class DeployRequest:
    """One deploy request for a stack.

    Attributes:
        stack_name: Application name (also the main release name)
        project_id: Owning project
        porter_yaml: Raw manifest bytes
        image_info: Explicit image from the request
        build_image: ``repo:tag`` output of an upstream build step
        override_release: Discard prior values and manage the job release
        git_repo_id: Git integration id (None keeps the stored one)
        patches: Per-field build provenance patches (see PATCHABLE_FIELDS)
    """

    stack_name: str
    project_id: int
    porter_yaml: bytes
    image_info: ImageInfo = field(default_factory=ImageInfo)
    build_image: str = ""
    override_release: bool = False
    git_repo_id: int | None = None
    patches: dict[str, FieldPatch] = field(default_factory=dict)

    def patch(self, field_name: str) -> FieldPatch:
        if field_name not in PATCHABLE_FIELDS:
            raise KeyError(field_name)
        return self.patches.get(field_name, FieldPatch.unset())


class JobReleaseAction(Enum):
    NONE = "none"
    INSTALL = "install"
    UPGRADE = "upgrade"
    UNINSTALL = "uninstall"


@dataclass
class ReconcileResult:
    """Outcome of a successful reconciliation."""

    app: PorterApp
    event: PorterAppEvent
    created: bool
    job_action: JobReleaseAction = JobReleaseAction.NONE
