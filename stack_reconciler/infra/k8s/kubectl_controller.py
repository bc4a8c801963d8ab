"""Kubectl-based implementation of KubernetesController.

Uses subprocess calls to kubectl for all operations.
"""

from __future__ import annotations

import asyncio
import subprocess

from .controller import CommandResult, KubernetesController


class KubectlController(KubernetesController):
    """Kubernetes controller using kubectl subprocess calls.

    All methods are async but internally use asyncio.to_thread()
    to run blocking subprocess calls without blocking the event loop.
    """

    def __init__(self, context: str | None = None, binary: str = "kubectl") -> None:
        super().__init__(context)
        self.binary = binary

    async def _run_kubectl(self, args: list[str]) -> CommandResult:
        """Run a kubectl command asynchronously.

        Args:
            args: Command arguments (without 'kubectl' prefix)

        Returns:
            CommandResult with execution results
        """
        cmd = [self.binary, *args]
        if self.context:
            cmd.extend(["--context", self.context])

        def _run() -> CommandResult:
            result = subprocess.run(cmd, capture_output=True, text=True)
            return CommandResult(
                success=result.returncode == 0,
                stdout=result.stdout or "",
                stderr=result.stderr or "",
                returncode=result.returncode,
            )

        return await asyncio.to_thread(_run)

    # =========================================================================
    # Namespace Operations
    # =========================================================================

    async def create_namespace(self, namespace: str) -> CommandResult:
        """Create a namespace, treating an existing one as success."""
        result = await self._run_kubectl(["create", "namespace", namespace])
        if not result.success and "AlreadyExists" in result.stderr:
            return CommandResult(
                success=True,
                stdout=f'namespace "{namespace}" already exists',
            )
        return result
