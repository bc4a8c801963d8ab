"""Helm release platform.

This module implements the ReleasePlatform contract on top of the Helm CLI:
it writes values and umbrella charts to temporary files, injects registry
pull secrets and translates command results into ReleaseInfo or HelmError.
"""

from __future__ import annotations

import copy
import json
import tempfile
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from loguru import logger

from stack_reconciler.infra.constants import DEFAULT_CONSTANTS, ReleaseConstants

from .commands import HelmCommands
from .platform import ReleasePlatform
from .types import (
    ClusterTarget,
    CommandResult,
    HelmError,
    InstallChartConfig,
    RegistryCredential,
    ReleaseInfo,
    ReleaseNotFoundError,
)

NOT_FOUND_MARKERS = ("release: not found", "not found")


@dataclass
class _PreparedChart:
    chart: str
    repo: str | None
    version: str | None
    value_files: list[Path]


class HelmAgent(ReleasePlatform):
    """Drives Helm releases through the ``helm`` CLI.

    Attributes:
        commands: Helm command executor
        timeout: Timeout passed to every mutating Helm call
        inject_pull_secrets: Whether registry pull secrets are added to values
    """

    def __init__(
        self,
        commands: HelmCommands,
        *,
        timeout: str | None = None,
        inject_pull_secrets: bool = True,
        constants: ReleaseConstants | None = None,
    ) -> None:
        """Initialize the Helm agent.

        Args:
            commands: Helm command executor
            timeout: Helm operation timeout (defaults to the release constants)
            inject_pull_secrets: Add ``global.imagePullSecrets`` from registries
            constants: Optional release constants
        """
        self.commands = commands
        self.constants = constants or DEFAULT_CONSTANTS
        self.timeout = timeout or self.constants.HELM_TIMEOUT
        self.inject_pull_secrets = inject_pull_secrets

    # =========================================================================
    # Queries
    # =========================================================================

    def get_release(
        self, cluster: ClusterTarget, namespace: str, name: str
    ) -> ReleaseInfo:
        result = self.commands.status(
            name, namespace, kube_context=cluster.kube_context
        )
        if not result.success:
            stderr = result.stderr.lower()
            if any(marker in stderr for marker in NOT_FOUND_MARKERS):
                raise ReleaseNotFoundError(
                    f"release {namespace}/{name} not found", result.stderr.strip()
                )
            raise HelmError(
                f"failed to get release {namespace}/{name}", result.stderr.strip()
            )

        release = ReleaseInfo.from_helm(self._parse_json(result, "status"))
        if not release.config:
            release.config = self._get_values(cluster, namespace, name)
        return release

    def _get_values(
        self, cluster: ClusterTarget, namespace: str, name: str
    ) -> dict[str, Any]:
        result = self.commands.get_values(
            name, namespace, kube_context=cluster.kube_context
        )
        if not result.success:
            raise HelmError(
                f"failed to get values of release {namespace}/{name}",
                result.stderr.strip(),
            )
        values = self._parse_json(result, "get values")
        return values if isinstance(values, dict) else {}

    # =========================================================================
    # Mutations
    # =========================================================================

    def install_chart(self, config: InstallChartConfig) -> ReleaseInfo:
        return self._deploy("install", self.commands.install, config)

    def upgrade_install_chart(self, config: InstallChartConfig) -> ReleaseInfo:
        return self._deploy("upgrade --install", self.commands.upgrade_install, config)

    def upgrade_release(self, config: InstallChartConfig) -> ReleaseInfo:
        return self._deploy("upgrade", self.commands.upgrade, config)

    def uninstall_chart(self, cluster: ClusterTarget, namespace: str, name: str) -> None:
        logger.info(f"Uninstalling release {namespace}/{name}")
        result = self.commands.uninstall(
            name, namespace, kube_context=cluster.kube_context
        )
        if not result.success:
            raise HelmError(
                f"failed to uninstall release {namespace}/{name}",
                result.stderr.strip(),
            )

    def _deploy(
        self,
        action: str,
        run: Callable[..., CommandResult],
        config: InstallChartConfig,
    ) -> ReleaseInfo:
        logger.info(
            f"Running helm {action} for {config.namespace}/{config.name} "
            f"(chart {config.chart.name})"
        )
        with self._prepare(config) as prepared:
            result = run(
                config.name,
                prepared.chart,
                config.namespace,
                value_files=prepared.value_files,
                repo=prepared.repo,
                version=prepared.version,
                kube_context=config.cluster.kube_context,
                timeout=self.timeout,
            )
        if not result.success:
            raise HelmError(
                f"helm {action} of {config.namespace}/{config.name} failed",
                result.stderr.strip(),
            )

        try:
            return ReleaseInfo.from_helm(self._parse_json(result, action))
        except HelmError:
            # Output was not JSON; read the release back instead
            return self.get_release(config.cluster, config.namespace, config.name)

    # =========================================================================
    # Chart and values files
    # =========================================================================

    @contextmanager
    def _prepare(self, config: InstallChartConfig) -> Iterator[_PreparedChart]:
        """Write the values file (and umbrella chart) to a temp directory."""
        with tempfile.TemporaryDirectory(prefix="helm-release-") as tmp:
            workdir = Path(tmp)
            values_file = workdir / "values.yaml"
            values = self._with_pull_secrets(config.values, config.registries)
            with open(values_file, "w") as f:
                yaml.safe_dump(values, f, default_flow_style=False, sort_keys=False)

            chart = config.chart
            if chart.is_umbrella:
                chart_dir = self._write_umbrella_chart(workdir, config)
                yield _PreparedChart(
                    chart=str(chart_dir), repo=None, version=None, value_files=[values_file]
                )
            else:
                yield _PreparedChart(
                    chart=chart.name,
                    repo=chart.repository,
                    version=chart.version or None,
                    value_files=[values_file],
                )

    def _write_umbrella_chart(self, workdir: Path, config: InstallChartConfig) -> Path:
        chart = config.chart
        chart_dir = workdir / chart.name
        chart_dir.mkdir(parents=True)
        chart_yaml = {
            "apiVersion": "v2",
            "name": chart.name,
            "version": chart.version or self.constants.UMBRELLA_CHART_VERSION,
            "type": "application",
            "dependencies": [dep.to_dict() for dep in chart.dependencies],
        }
        with open(chart_dir / "Chart.yaml", "w") as f:
            yaml.safe_dump(chart_yaml, f, default_flow_style=False, sort_keys=False)

        result = self.commands.dependency_update(chart_dir)
        if not result.success:
            raise HelmError(
                f"failed to resolve dependencies of chart {chart.name}",
                result.stderr.strip(),
            )
        return chart_dir

    def _with_pull_secrets(
        self, values: dict[str, Any], registries: Sequence[RegistryCredential]
    ) -> dict[str, Any]:
        secrets = [
            {"name": registry.pull_secret_name}
            for registry in registries
            if registry.pull_secret_name
        ]
        if not self.inject_pull_secrets or not secrets:
            return values

        merged = copy.deepcopy(values)
        global_values = merged.setdefault("global", {})
        existing = global_values.get("imagePullSecrets") or []
        global_values["imagePullSecrets"] = existing + [
            s for s in secrets if s not in existing
        ]
        return merged

    @staticmethod
    def _parse_json(result: CommandResult, action: str) -> Any:
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise HelmError(f"unexpected output from helm {action}", str(e)) from e
