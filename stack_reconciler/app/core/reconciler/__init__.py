"""Stack reconciliation core.

Usage:
    from stack_reconciler.app.core.reconciler import DeployRequest, build_reconciler

    reconciler = build_reconciler(config, store)
    result = reconciler.reconcile(request, cluster.to_target())
"""

from .compiler import CompiledStack, CompileOptions, PorterYamlCompiler, StackCompiler
from .errors import (
    ConflictFailure,
    PersistenceFailure,
    PlatformFailure,
    ReconcileError,
    ValidationFailure,
)
from .image import image_from_release_config, parse_image_reference, resolve_image
from .job_release import JobReleaseManager, decide_job_action
from .locks import KeyedLock
from .main_release import MainReleaseDriver
from .prober import ReleaseStateProber, probe_release
from .reconciler import Reconciler, build_reconciler, release_constants
from .records import RecordSynchronizer
from .types import (
    DeployRequest,
    FieldPatch,
    ImageInfo,
    JobReleaseAction,
    PatchKind,
    ReconcileResult,
)

__all__ = [
    "CompileOptions",
    "CompiledStack",
    "ConflictFailure",
    "DeployRequest",
    "FieldPatch",
    "ImageInfo",
    "JobReleaseAction",
    "JobReleaseManager",
    "KeyedLock",
    "MainReleaseDriver",
    "PatchKind",
    "PersistenceFailure",
    "PlatformFailure",
    "PorterYamlCompiler",
    "ReconcileError",
    "ReconcileResult",
    "Reconciler",
    "RecordSynchronizer",
    "ReleaseStateProber",
    "StackCompiler",
    "ValidationFailure",
    "build_reconciler",
    "decide_job_action",
    "image_from_release_config",
    "parse_image_reference",
    "probe_release",
    "release_constants",
    "resolve_image",
]
