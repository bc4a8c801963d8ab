"""Initial schema: porter_apps, porter_app_events, registries, clusters.

Revision ID: 0001_initial
Revises: None
Create Date: 2026-10-19

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "clusters",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("project_id", sa.Integer, nullable=False),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("kube_context", sa.String, nullable=True),
    )
    op.create_index("ix_clusters_project_id", "clusters", ["project_id"])

    op.create_table(
        "registries",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("project_id", sa.Integer, nullable=False),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("url", sa.String, nullable=False),
        sa.Column("pull_secret_name", sa.String, nullable=True),
    )
    op.create_index("ix_registries_project_id", "registries", ["project_id"])

    op.create_table(
        "porter_apps",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("cluster_id", sa.Integer, nullable=False),
        sa.Column("project_id", sa.Integer, nullable=False),
        sa.Column("repo_name", sa.String, nullable=False),
        sa.Column("git_repo_id", sa.Integer, nullable=True),
        sa.Column("git_branch", sa.String, nullable=False),
        sa.Column("build_context", sa.String, nullable=False),
        sa.Column("builder", sa.String, nullable=False),
        sa.Column("buildpacks", sa.String, nullable=False),
        sa.Column("dockerfile", sa.String, nullable=False),
        sa.Column("image_repo_uri", sa.String, nullable=False),
        sa.Column("pull_request_url", sa.String, nullable=False),
        sa.Column("porter_yaml_path", sa.String, nullable=False),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
        sa.UniqueConstraint("cluster_id", "name", name="uq_porter_apps_cluster_name"),
    )
    op.create_index("ix_porter_apps_name", "porter_apps", ["name"])
    op.create_index("ix_porter_apps_cluster_id", "porter_apps", ["cluster_id"])
    op.create_index("ix_porter_apps_project_id", "porter_apps", ["project_id"])

    op.create_table(
        "porter_app_events",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("status", sa.String, nullable=False),
        sa.Column("type", sa.String, nullable=False),
        sa.Column("type_external_source", sa.String, nullable=False),
        sa.Column(
            "porter_app_id",
            sa.Integer,
            sa.ForeignKey("porter_apps.id"),
            nullable=False,
        ),
        sa.Column("revision", sa.Integer, nullable=False),
        sa.Column("metadata", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )
    op.create_index(
        "ix_porter_app_events_porter_app_id", "porter_app_events", ["porter_app_id"]
    )
    op.create_index(
        "ix_porter_app_events_created_at", "porter_app_events", ["created_at"]
    )


def downgrade() -> None:
    op.drop_table("porter_app_events")
    op.drop_table("porter_apps")
    op.drop_table("registries")
    op.drop_table("clusters")
