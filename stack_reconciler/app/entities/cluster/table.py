"""Clusters linked to a project."""

from sqlmodel import Field, SQLModel

from stack_reconciler.infra.k8s.controller import ClusterTarget


class Cluster(SQLModel, table=True):
    __tablename__ = "clusters"

    id: int | None = Field(default=None, primary_key=True)
    project_id: int = Field(index=True)
    name: str
    kube_context: str | None = None

    def to_target(self) -> ClusterTarget:
        """Identity used for Helm and Kubernetes calls."""
        return ClusterTarget(
            id=self.id or 0,
            project_id=self.project_id,
            name=self.name,
            kube_context=self.kube_context,
        )
