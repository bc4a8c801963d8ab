"""Helm command abstractions.

This module provides commands for Helm release management,
including installs, upgrades, uninstallation, and status queries.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class HelmCommands:
    """Helm-related shell commands.

    Provides operations for:
    - Release management (install, upgrade, uninstall)
    - Status queries (status, values)
    - Chart dependency resolution
    """

    def __init__(self, runner: CommandRunner, binary: str = "helm") -> None:
        """Initialize Helm commands.

        Args:
            runner: Command runner for executing shell commands
            binary: Helm executable to invoke
        """
        self._runner = runner
        self._binary = binary

    def _base(self, *args: str, kube_context: str | None = None) -> list[str]:
        cmd = [self._binary, *args]
        if kube_context:
            cmd.extend(["--kube-context", kube_context])
        return cmd

    def _deploy(
        self,
        action: list[str],
        release_name: str,
        chart: str,
        namespace: str,
        *,
        value_files: list[Path] | None,
        repo: str | None,
        version: str | None,
        kube_context: str | None,
        timeout: str,
        wait: bool,
    ) -> CommandResult:
        cmd = self._base(
            *action,
            release_name,
            chart,
            "--namespace",
            namespace,
            kube_context=kube_context,
        )
        if repo:
            cmd.extend(["--repo", repo])
        if version:
            cmd.extend(["--version", version])
        if wait:
            cmd.append("--wait")
        cmd.extend(["--timeout", timeout])
        for vf in value_files or []:
            cmd.extend(["-f", str(vf)])
        cmd.extend(["-o", "json"])
        return self._runner.run(cmd)

    # =========================================================================
    # Release Management
    # =========================================================================

    def install(
        self,
        release_name: str,
        chart: str,
        namespace: str,
        *,
        value_files: list[Path] | None = None,
        repo: str | None = None,
        version: str | None = None,
        kube_context: str | None = None,
        timeout: str = "10m",
        wait: bool = False,
    ) -> CommandResult:
        """Install a new Helm release.

        Fails if a release with the same name already exists.

        Args:
            release_name: Name for the Helm release (e.g., "api")
            chart: Chart directory or chart name (with ``repo``)
            namespace: Kubernetes namespace for deployment
            value_files: Optional list of values.yaml override files
            repo: Chart repository URL when ``chart`` is a chart name
            version: Chart version constraint
            kube_context: kubeconfig context of the target cluster
            timeout: Maximum time to wait for the operation
            wait: Whether to wait for resources to be ready

        Returns:
            CommandResult with the release JSON in stdout on success

        Example:
            >>> helm.install(
            ...     "api-r",
            ...     "job",
            ...     "porter-stack-api",
            ...     repo="https://charts.getporter.dev",
            ...     value_files=[Path("./values.yaml")],
            ... )
        """
        return self._deploy(
            ["install"],
            release_name,
            chart,
            namespace,
            value_files=value_files,
            repo=repo,
            version=version,
            kube_context=kube_context,
            timeout=timeout,
            wait=wait,
        )

    def upgrade_install(
        self,
        release_name: str,
        chart: str,
        namespace: str,
        *,
        value_files: list[Path] | None = None,
        repo: str | None = None,
        version: str | None = None,
        kube_context: str | None = None,
        timeout: str = "10m",
        wait: bool = False,
    ) -> CommandResult:
        """Deploy or upgrade a Helm release.

        Uses `helm upgrade --install` to idempotently deploy a chart.
        If the release doesn't exist, it will be installed. If it exists,
        it will be upgraded.

        Args:
            release_name: Name for the Helm release
            chart: Chart directory or chart name (with ``repo``)
            namespace: Kubernetes namespace for deployment
            value_files: Optional list of values.yaml override files
            repo: Chart repository URL when ``chart`` is a chart name
            version: Chart version constraint
            kube_context: kubeconfig context of the target cluster
            timeout: Maximum time to wait for deployment
            wait: Whether to wait for resources to be ready

        Returns:
            CommandResult with the release JSON in stdout on success
        """
        return self._deploy(
            ["upgrade", "--install"],
            release_name,
            chart,
            namespace,
            value_files=value_files,
            repo=repo,
            version=version,
            kube_context=kube_context,
            timeout=timeout,
            wait=wait,
        )

    def upgrade(
        self,
        release_name: str,
        chart: str,
        namespace: str,
        *,
        value_files: list[Path] | None = None,
        repo: str | None = None,
        version: str | None = None,
        kube_context: str | None = None,
        timeout: str = "10m",
        wait: bool = False,
    ) -> CommandResult:
        """Upgrade an existing Helm release.

        Unlike upgrade_install, fails when the release does not exist.
        Values are replaced by the given files, not merged with the
        previous revision's values.
        """
        return self._deploy(
            ["upgrade"],
            release_name,
            chart,
            namespace,
            value_files=value_files,
            repo=repo,
            version=version,
            kube_context=kube_context,
            timeout=timeout,
            wait=wait,
        )

    def uninstall(
        self,
        release_name: str,
        namespace: str,
        *,
        kube_context: str | None = None,
        wait: bool = True,
    ) -> CommandResult:
        """Uninstall a Helm release.

        Args:
            release_name: Name of the release to uninstall
            namespace: Kubernetes namespace
            kube_context: kubeconfig context of the target cluster
            wait: Whether to wait for resources to be deleted

        Returns:
            CommandResult with uninstall status
        """
        cmd = self._base(
            "uninstall", release_name, "-n", namespace, kube_context=kube_context
        )
        if wait:
            cmd.append("--wait")
        return self._runner.run(cmd)

    # =========================================================================
    # Status Queries
    # =========================================================================

    def status(
        self,
        release_name: str,
        namespace: str,
        *,
        kube_context: str | None = None,
    ) -> CommandResult:
        """Get the status of a release as JSON.

        Returns:
            CommandResult with the release JSON in stdout on success
        """
        cmd = self._base(
            "status",
            release_name,
            "-n",
            namespace,
            "-o",
            "json",
            kube_context=kube_context,
        )
        return self._runner.run(cmd)

    def get_values(
        self,
        release_name: str,
        namespace: str,
        *,
        kube_context: str | None = None,
    ) -> CommandResult:
        """Get the user-supplied values of a release as JSON."""
        cmd = self._base(
            "get",
            "values",
            release_name,
            "-n",
            namespace,
            "-o",
            "json",
            kube_context=kube_context,
        )
        return self._runner.run(cmd)

    # =========================================================================
    # Charts
    # =========================================================================

    def dependency_update(self, chart_path: Path) -> CommandResult:
        """Download the dependencies declared in a chart's Chart.yaml.

        Args:
            chart_path: Path to the chart directory

        Returns:
            CommandResult with dependency resolution status
        """
        return self._runner.run(
            [self._binary, "dependency", "update", str(chart_path)]
        )
