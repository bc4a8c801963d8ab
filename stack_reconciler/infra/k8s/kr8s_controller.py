"""Kr8s-based implementation of KubernetesController.

Uses the kr8s library for native async Kubernetes operations.
"""

from __future__ import annotations

from typing import Any

import kr8s
from kr8s.asyncio.objects import Namespace

from .controller import CommandResult, KubernetesController

HTTP_CONFLICT = 409


class Kr8sController(KubernetesController):
    """Kubernetes controller using kr8s library.

    Note: The kr8s API client is NOT cached because it's tied to the event loop
    that was running when created. When using run_sync() which calls asyncio.run(),
    each call creates a new event loop, making the cached API unusable.
    """

    async def _get_api(self) -> Any:  # Returns kr8s._api.Api
        """Create a kr8s API client bound to the configured context."""
        if self.context:
            return await kr8s.asyncio.api(context=self.context)
        return await kr8s.asyncio.api()

    # =========================================================================
    # Namespace Operations
    # =========================================================================

    async def create_namespace(self, namespace: str) -> CommandResult:
        """Create a namespace, treating an existing one as success."""
        try:
            api = await self._get_api()
            ns = Namespace(
                {
                    "apiVersion": "v1",
                    "kind": "Namespace",
                    "metadata": {"name": namespace},
                },
                api=api,
            )
            await ns.create()
            return CommandResult(
                success=True, stdout=f'namespace "{namespace}" created'
            )
        except kr8s.ServerError as e:
            response = getattr(e, "response", None)
            if getattr(response, "status_code", None) == HTTP_CONFLICT:
                return CommandResult(
                    success=True,
                    stdout=f'namespace "{namespace}" already exists',
                )
            return CommandResult(success=False, stderr=str(e), returncode=1)
        except Exception as e:
            return CommandResult(success=False, stderr=str(e), returncode=1)
