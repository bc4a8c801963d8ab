from __future__ import annotations

from cachetools.func import lru_cache  # type: ignore

from stack_reconciler.infra.k8s.controller import ClusterTarget, KubernetesController


@lru_cache(maxsize=32)
def get_k8s_controller(
    context: str | None = None, backend: str = "kr8s"
) -> KubernetesController:
    """Get a KubernetesController for a kubeconfig context.

    Args:
        context: kubeconfig context (None for the current one)
        backend: "kr8s" (default) or "kubectl"

    Returns:
        An instance of KubernetesController
    """
    if backend == "kubectl":
        from stack_reconciler.infra.k8s.kubectl_controller import KubectlController

        return KubectlController(context)

    from stack_reconciler.infra.k8s.kr8s_controller import Kr8sController

    return Kr8sController(context)


def controller_for_cluster(
    cluster: ClusterTarget, backend: str = "kr8s"
) -> KubernetesController:
    """Get the controller that targets a cluster's kube context."""
    return get_k8s_controller(cluster.kube_context, backend)
