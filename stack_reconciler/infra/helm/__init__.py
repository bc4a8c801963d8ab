"""Helm adapter for the release platform contract.

- commands: thin wrappers over ``helm`` subcommands
- agent: ReleasePlatform implementation (values files, umbrella charts,
  pull secret injection)
- types: chart/release dataclasses and errors

Usage:
    from stack_reconciler.infra.helm import build_helm_agent

    agent = build_helm_agent(timeout="5m")
    release = agent.get_release(cluster, "porter-stack-api", "api")
"""

from pathlib import Path

from .agent import HelmAgent
from .commands import HelmCommands
from .platform import ReleasePlatform
from .runner import CommandRunner
from .types import (
    ChartDependency,
    ChartRef,
    ClusterTarget,
    CommandResult,
    HelmError,
    InstallChartConfig,
    RegistryCredential,
    ReleaseInfo,
    ReleaseNotFoundError,
)


def build_helm_agent(
    *,
    binary: str = "helm",
    timeout: str | None = None,
    inject_pull_secrets: bool = True,
    cwd: Path | None = None,
) -> HelmAgent:
    """Create a HelmAgent backed by the Helm CLI."""
    commands = HelmCommands(CommandRunner(cwd), binary=binary)
    return HelmAgent(
        commands, timeout=timeout, inject_pull_secrets=inject_pull_secrets
    )


__all__ = [
    "ChartDependency",
    "ChartRef",
    "ClusterTarget",
    "CommandResult",
    "CommandRunner",
    "HelmAgent",
    "HelmCommands",
    "HelmError",
    "InstallChartConfig",
    "RegistryCredential",
    "ReleaseInfo",
    "ReleaseNotFoundError",
    "ReleasePlatform",
    "build_helm_agent",
]
