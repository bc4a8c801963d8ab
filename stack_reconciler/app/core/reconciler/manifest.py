"""porter.yaml stack manifest models."""

from __future__ import annotations

from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ValidationFailure

AppType = Literal["web", "worker", "job"]


class Build(BaseModel):
    model_config = ConfigDict(extra="allow")

    context: str | None = None
    method: str | None = None
    builder: str | None = None
    buildpacks: list[str] = Field(default_factory=list)
    dockerfile: str | None = None
    image: str | None = None


class App(BaseModel):
    """One process of the stack.

    ``type`` is inferred from the app name when it is not given.
    """

    model_config = ConfigDict(extra="forbid")

    run: str | None = None
    type: AppType | None = None
    config: dict[str, Any] = Field(default_factory=dict)

    def resolved_type(self, name: str) -> AppType:
        if self.type is not None:
            return self.type
        lowered = name.lower()
        if "web" in lowered:
            return "web"
        if "job" in lowered:
            return "job"
        return "worker"


class PorterStackYAML(BaseModel):
    """Top level of a porter.yaml manifest."""

    model_config = ConfigDict(extra="forbid")

    version: str | None = None
    build: Build | None = None
    env: dict[str, Any] = Field(default_factory=dict)
    apps: dict[str, App] = Field(default_factory=dict)
    release: App | None = None


def parse_manifest(raw: bytes | str) -> PorterStackYAML:
    """Parse and validate a porter.yaml document.

    Raises:
        ValidationFailure: If the document is not valid YAML or does not
            match the manifest schema
    """
    try:
        loaded = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ValidationFailure(
            "porter.yaml is not valid YAML", operation="parse manifest", details=str(e)
        ) from e

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ValidationFailure(
            "porter.yaml must be a mapping", operation="parse manifest"
        )

    try:
        return PorterStackYAML.model_validate(loaded)
    except ValidationError as e:
        raise ValidationFailure(
            "porter.yaml does not match the stack schema",
            operation="parse manifest",
            details=str(e),
        ) from e
