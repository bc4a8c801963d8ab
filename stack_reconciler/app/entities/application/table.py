"""Application (stack) record."""

from datetime import UTC, datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PorterApp(SQLModel, table=True):
    """One deployed stack per (cluster, name).

    Build provenance fields are plain strings; an empty string means
    "not set".
    """

    __tablename__ = "porter_apps"
    __table_args__ = (
        UniqueConstraint("cluster_id", "name", name="uq_porter_apps_cluster_name"),
    )

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    cluster_id: int = Field(index=True)
    project_id: int = Field(index=True)

    repo_name: str = ""
    git_repo_id: int | None = None
    git_branch: str = ""
    build_context: str = ""
    builder: str = ""
    buildpacks: str = ""
    dockerfile: str = ""
    image_repo_uri: str = ""
    pull_request_url: str = ""
    porter_yaml_path: str = ""

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
