"""Compilation of stack manifests into Helm charts and values."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from stack_reconciler.infra.constants import DEFAULT_CONSTANTS, ReleaseConstants
from stack_reconciler.infra.helm import ChartDependency, ChartRef

from .errors import ValidationFailure
from .manifest import App, PorterStackYAML, parse_manifest
from .types import ImageInfo

LAUNCHER = "/cnb/lifecycle/launcher"
BUILDPACK_BUILDER_MARKERS = ("heroku", "paketo")


def uses_launcher(builder: str | None) -> bool:
    """Whether images from ``builder`` need the buildpack launcher."""
    if not builder:
        return False
    return any(marker in builder for marker in BUILDPACK_BUILDER_MARKERS)


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` over ``base``; ``override`` wins."""
    merged: dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


@dataclass
class CompileOptions:
    """Per-request compiler inputs.

    Attributes:
        stack_name: Name of the stack (umbrella chart and main release name)
        inject_launcher: Prefix commands with the buildpack launcher
        app_repo_url: Helm repository holding the web/worker/job charts
        dependency_version: Version of the app charts (empty means latest)
    """

    stack_name: str
    inject_launcher: bool = False
    app_repo_url: str = DEFAULT_CONSTANTS.DEFAULT_APP_HELM_REPO_URL
    dependency_version: str = ""


@dataclass
class CompiledStack:
    """Output of a compilation.

    ``job_values`` is None when the manifest declares no release job.
    """

    chart: ChartRef
    values: dict[str, Any]
    namespace: str
    job_values: dict[str, Any] | None = None
    apps: list[str] = field(default_factory=list)


class StackCompiler(ABC):
    """Turns a manifest into a deployable chart and its values."""

    @abstractmethod
    def compile(
        self,
        manifest: bytes,
        image_info: ImageInfo,
        prior_values: Mapping[str, Any] | None,
        prior_dependencies: Sequence[ChartDependency] | None,
        options: CompileOptions,
    ) -> CompiledStack:
        """Compile a manifest.

        Args:
            manifest: Raw porter.yaml bytes
            image_info: Image to deploy (may be empty)
            prior_values: Values of the deployed release, merged under the
                new values (update without override only)
            prior_dependencies: Dependencies of the deployed chart, reused by
                alias (update without override only)
            options: Per-request options

        Raises:
            ValidationFailure: If the manifest cannot be parsed
        """
        pass


class PorterYamlCompiler(StackCompiler):
    """Default compiler for porter.yaml stacks.

    Each app becomes a subchart of an umbrella chart named after the stack,
    aliased ``{name}-{type}``. The ``release`` block becomes the values of
    the stack's job chart.
    """

    def __init__(self, constants: ReleaseConstants | None = None) -> None:
        self.constants = constants or DEFAULT_CONSTANTS

    def compile(
        self,
        manifest: bytes,
        image_info: ImageInfo,
        prior_values: Mapping[str, Any] | None,
        prior_dependencies: Sequence[ChartDependency] | None,
        options: CompileOptions,
    ) -> CompiledStack:
        stack = parse_manifest(manifest)
        if not stack.apps:
            raise ValidationFailure(
                "porter.yaml declares no apps",
                operation="compile manifest",
                target=options.stack_name,
            )
        env = _stringify_env(stack.env)

        values: dict[str, Any] = {}
        aliases: list[str] = []
        for name, app in stack.apps.items():
            alias = f"{name}-{app.resolved_type(name)}"
            aliases.append(alias)
            values[alias] = self._app_values(app, image_info, env, options)

        if image_info.is_complete:
            values["global"] = {
                "image": {"repository": image_info.repository, "tag": image_info.tag}
            }

        if prior_values:
            values = deep_merge(prior_values, values)

        chart = ChartRef(
            name=options.stack_name,
            version=self.constants.UMBRELLA_CHART_VERSION,
            dependencies=self._dependencies(stack, prior_dependencies, options),
        )

        return CompiledStack(
            chart=chart,
            values=values,
            namespace=self.constants.namespace_for(options.stack_name),
            job_values=self._job_values(stack, image_info, env, options),
            apps=aliases,
        )

    def _app_values(
        self,
        app: App,
        image_info: ImageInfo,
        env: dict[str, str],
        options: CompileOptions,
    ) -> dict[str, Any]:
        values = copy.deepcopy(app.config)
        if image_info.is_complete:
            values["image"] = {
                "repository": image_info.repository,
                "tag": image_info.tag,
            }
        container = values.setdefault("container", {})
        command = _command(app.run, options.inject_launcher)
        if command:
            container["command"] = command
        if env:
            container_env = container.setdefault("env", {})
            container_env["normal"] = {**container_env.get("normal", {}), **env}
        return values

    def _dependencies(
        self,
        stack: PorterStackYAML,
        prior: Sequence[ChartDependency] | None,
        options: CompileOptions,
    ) -> list[ChartDependency]:
        prior_by_alias = {dep.key: dep for dep in prior or ()}
        dependencies = []
        for name, app in stack.apps.items():
            app_type = app.resolved_type(name)
            alias = f"{name}-{app_type}"
            if alias in prior_by_alias:
                dependencies.append(prior_by_alias[alias])
                continue
            dependencies.append(
                ChartDependency(
                    name=app_type,
                    version=options.dependency_version,
                    repository=options.app_repo_url,
                    alias=alias,
                )
            )
        return dependencies

    def _job_values(
        self,
        stack: PorterStackYAML,
        image_info: ImageInfo,
        env: dict[str, str],
        options: CompileOptions,
    ) -> dict[str, Any] | None:
        if stack.release is None:
            return None
        values = self._app_values(stack.release, image_info, env, options)
        values["paused"] = True
        return values


def _command(run: str | None, inject_launcher: bool) -> str:
    if not run:
        return ""
    if inject_launcher and not run.startswith(LAUNCHER):
        return f"{LAUNCHER} {run}"
    return run


def _stringify_env(env: Mapping[str, Any]) -> dict[str, str]:
    result = {}
    for key, value in env.items():
        if isinstance(value, bool):
            result[key] = "true" if value else "false"
        else:
            result[key] = "" if value is None else str(value)
    return result
