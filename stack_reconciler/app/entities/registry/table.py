"""Container registries linked to a project."""

from sqlmodel import Field, SQLModel


class Registry(SQLModel, table=True):
    __tablename__ = "registries"

    id: int | None = Field(default=None, primary_key=True)
    project_id: int = Field(index=True)
    name: str
    url: str = ""
    # Name of the image pull secret holding this registry's credentials
    pull_secret_name: str | None = None
