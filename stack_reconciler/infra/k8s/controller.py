"""Abstract Kubernetes controller interface.

Defines the contract for the Kubernetes operations the reconciler needs,
implemented by different backends (kubectl subprocess, kr8s library).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

# =============================================================================
# Data Types
# =============================================================================


@dataclass
class CommandResult:
    """Result of a command execution."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0


@dataclass(frozen=True)
class ClusterTarget:
    """Identity of a target cluster.

    Attributes:
        id: Cluster id in the system-of-record
        project_id: Owning project id
        name: Human readable cluster name
        kube_context: kubeconfig context used to reach the cluster
                      (None uses the current context)
    """

    id: int
    project_id: int
    name: str = ""
    kube_context: str | None = None


# =============================================================================
# Abstract Controller
# =============================================================================


class KubernetesController(ABC):
    """Abstract base class for Kubernetes operations.

    All methods are async to support both sync (kubectl) and async (kr8s)
    implementations. Use `run_sync()` to call from synchronous code.

    Example:
        from stack_reconciler.infra.k8s import KubectlController, run_sync

        controller = KubectlController(context="prod")
        run_sync(controller.create_namespace("porter-stack-api"))
    """

    def __init__(self, context: str | None = None) -> None:
        """Initialize the controller.

        Args:
            context: kubeconfig context to target (None for the current one)
        """
        self.context = context

    # =========================================================================
    # Namespace Operations
    # =========================================================================

    @abstractmethod
    async def create_namespace(self, namespace: str) -> CommandResult:
        """Create a namespace if it does not exist yet.

        An already existing namespace is reported as success with
        ``already exists`` in stdout.

        Args:
            namespace: Namespace to create

        Returns:
            CommandResult with creation status
        """
        ...
