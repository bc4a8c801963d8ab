"""Append-only activity feed events."""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class PorterAppEvent(SQLModel, table=True):
    """An immutable deploy event of an application."""

    __tablename__ = "porter_app_events"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    status: str
    type: str
    type_external_source: str = ""
    porter_app_id: int = Field(index=True, foreign_key="porter_apps.id")
    revision: int = 0
    event_metadata: dict[str, Any] = Field(
        default_factory=dict, sa_column=Column("metadata", JSON, nullable=False)
    )
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)
