"""Release naming constants.

This module centralizes the magic strings used to derive Kubernetes and Helm
identifiers for a stack, so every component names releases the same way.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class ReleaseConstants:
    """Constants for stack releases.

    All attributes are immutable; override them through the ``stacks`` and
    ``helm`` configuration sections rather than by mutation.
    """

    # Kubernetes/Helm identifiers
    NAMESPACE_PREFIX: str = "porter-stack-"
    JOB_RELEASE_SUFFIX: str = "-r"
    JOB_CHART_NAME: str = "job"
    UMBRELLA_CHART_VERSION: str = "0.1.0"
    DEFAULT_APP_HELM_REPO_URL: str = "https://charts.getporter.dev"

    # Timeouts
    HELM_TIMEOUT: str = "10m"

    # Deploy event fields
    EVENT_STATUS_SUCCESS: str = "SUCCESS"
    EVENT_TYPE_DEPLOY: str = "DEPLOY"
    EVENT_SOURCE_KUBERNETES: str = "KUBERNETES"

    # Activity feed paging
    EVENTS_PAGE_SIZE: int = 20

    # Kubernetes namespace names are DNS-1123 labels (max 63 chars)
    MAX_NAMESPACE_LENGTH: int = 63
    STACK_NAME_PATTERN: re.Pattern[str] = re.compile(
        r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$"
    )

    def namespace_for(self, stack_name: str) -> str:
        """Get the namespace that holds a stack's releases."""
        return f"{self.NAMESPACE_PREFIX}{stack_name}"

    def job_release_name(self, stack_name: str) -> str:
        """Get the name of a stack's release job release."""
        return f"{stack_name}{self.JOB_RELEASE_SUFFIX}"


DEFAULT_CONSTANTS = ReleaseConstants()
