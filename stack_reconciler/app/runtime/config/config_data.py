"""Typed configuration model.

Mirrors the ``config:`` section of config.yaml. Every section has defaults so
a minimal file (or none of a section) still validates.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from stack_reconciler.infra.constants import DEFAULT_CONSTANTS


class AppConfig(BaseModel):
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 8080


class DatabaseConfig(BaseModel):
    url: str = "sqlite:///./stack_reconciler.db"
    echo: bool = False

    @property
    def connection_string(self) -> str:
        return self.url


class HelmConfig(BaseModel):
    binary: str = "helm"
    timeout: str = DEFAULT_CONSTANTS.HELM_TIMEOUT
    default_app_helm_repo_url: str = DEFAULT_CONSTANTS.DEFAULT_APP_HELM_REPO_URL
    job_chart_name: str = DEFAULT_CONSTANTS.JOB_CHART_NAME
    job_chart_version: str = ""
    disable_pull_secrets_injection: bool = False


class KubernetesConfig(BaseModel):
    backend: Literal["kr8s", "kubectl"] = "kr8s"


class StacksConfig(BaseModel):
    namespace_prefix: str = DEFAULT_CONSTANTS.NAMESPACE_PREFIX
    job_release_suffix: str = DEFAULT_CONSTANTS.JOB_RELEASE_SUFFIX
    events_page_size: int = Field(default=DEFAULT_CONSTANTS.EVENTS_PAGE_SIZE, gt=0)


class LoggingConfig(BaseModel):
    level: str = "INFO"


class ConfigData(BaseModel):
    """Root configuration object."""

    app: AppConfig = Field(default_factory=AppConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    helm: HelmConfig = Field(default_factory=HelmConfig)
    kubernetes: KubernetesConfig = Field(default_factory=KubernetesConfig)
    stacks: StacksConfig = Field(default_factory=StacksConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
