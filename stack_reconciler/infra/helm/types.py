"""Data types for Helm releases and charts.

This module contains the dataclasses passed between the Helm adapter and the
reconciler, plus the errors raised by the adapter.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

# Re-export Kubernetes types from canonical location
from stack_reconciler.infra.k8s.controller import ClusterTarget, CommandResult

__all__ = [
    "ChartDependency",
    "ChartRef",
    "ClusterTarget",
    "CommandResult",
    "HelmError",
    "InstallChartConfig",
    "RegistryCredential",
    "ReleaseInfo",
    "ReleaseNotFoundError",
]


class HelmError(Exception):
    """Raised when a Helm operation fails."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ReleaseNotFoundError(HelmError):
    """Raised when a release does not exist in the target namespace."""


class RegistryCredential(Protocol):
    """Container registry passed through to chart installs."""

    name: str
    url: str
    pull_secret_name: str | None


@dataclass(frozen=True)
class ChartDependency:
    """A subchart of an umbrella chart.

    Attributes:
        name: Chart name in the repository (e.g. "web")
        version: Chart version constraint
        repository: Helm repository URL
        alias: Name the subchart's values live under (e.g. "api-web")
    """

    name: str
    version: str = ""
    repository: str = ""
    alias: str = ""

    @property
    def key(self) -> str:
        """Values key of the dependency."""
        return self.alias or self.name

    def to_dict(self) -> dict[str, str]:
        data = {"name": self.name, "version": self.version, "repository": self.repository}
        if self.alias:
            data["alias"] = self.alias
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChartDependency:
        return cls(
            name=str(data.get("name", "")),
            version=str(data.get("version", "") or ""),
            repository=str(data.get("repository", "") or ""),
            alias=str(data.get("alias", "") or ""),
        )


@dataclass
class ChartRef:
    """Reference to a deployable chart.

    A chart with dependencies is an umbrella chart that the Helm adapter
    writes to disk before installing; a chart without dependencies is
    pulled by name from ``repository``.
    """

    name: str
    version: str = ""
    repository: str | None = None
    dependencies: list[ChartDependency] = field(default_factory=list)

    @property
    def is_umbrella(self) -> bool:
        return bool(self.dependencies)


@dataclass
class ReleaseInfo:
    """State of a Helm release as reported by the cluster.

    Attributes:
        name: Release name
        namespace: Kubernetes namespace
        version: Release revision, incremented by Helm on every upgrade
        status: Release status (deployed, failed, pending-install, ...)
        chart_name: Name of the deployed chart
        chart_version: Version of the deployed chart
        dependencies: Chart dependencies of the deployed chart
        config: User-supplied values of the release
    """

    name: str
    namespace: str
    version: int
    status: str = ""
    chart_name: str = ""
    chart_version: str = ""
    dependencies: list[ChartDependency] = field(default_factory=list)
    config: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_helm(cls, data: dict[str, Any]) -> ReleaseInfo:
        """Build from the JSON emitted by ``helm status -o json``."""
        chart = data.get("chart") or {}
        metadata = chart.get("metadata") or {}
        info = data.get("info") or {}
        return cls(
            name=str(data.get("name", "")),
            namespace=str(data.get("namespace", "")),
            version=int(data.get("version", 0) or 0),
            status=str(info.get("status", "")),
            chart_name=str(metadata.get("name", "")),
            chart_version=str(metadata.get("version", "")),
            dependencies=[
                ChartDependency.from_dict(dep)
                for dep in metadata.get("dependencies") or []
            ],
            config=dict(data.get("config") or {}),
        )


@dataclass
class InstallChartConfig:
    """Everything needed to install or upgrade one release."""

    chart: ChartRef
    name: str
    namespace: str
    values: dict[str, Any]
    cluster: ClusterTarget
    registries: Sequence[RegistryCredential] = ()
