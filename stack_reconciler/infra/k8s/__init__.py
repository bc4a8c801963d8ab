"""Kubernetes infrastructure abstraction layer.

This module provides a clean abstraction over the Kubernetes operations the
reconciler needs, supporting multiple backends (kubectl subprocess, kr8s library).

Example:
    from stack_reconciler.infra.k8s import KubectlController, run_sync

    controller = KubectlController()
    run_sync(controller.create_namespace("porter-stack-api"))
"""

from .controller import ClusterTarget, CommandResult, KubernetesController
from .helpers import controller_for_cluster, get_k8s_controller
from .kubectl_controller import KubectlController
from .utils import run_sync

__all__ = [
    # Controller classes
    "KubernetesController",
    "KubectlController",
    # Data classes
    "ClusterTarget",
    "CommandResult",
    # Factories
    "controller_for_cluster",
    "get_k8s_controller",
    # Utilities
    "run_sync",
]
