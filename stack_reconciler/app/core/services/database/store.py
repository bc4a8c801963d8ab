"""Relational system-of-record for stacks.

Provides the read/write contract the reconciler relies on and a SQLModel
implementation of it.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import Engine, func
from sqlmodel import Session, select

from stack_reconciler.app.entities.application.table import PorterApp
from stack_reconciler.app.entities.cluster.table import Cluster
from stack_reconciler.app.entities.deploy_event.table import PorterAppEvent
from stack_reconciler.app.entities.registry.table import Registry


@dataclass
class EventPage:
    """One page of an application's activity feed."""

    events: list[PorterAppEvent]
    page: int
    num_pages: int


class ApplicationStore(ABC):
    """Abstract interface for the application system-of-record."""

    @abstractmethod
    def read_by_name(self, cluster_id: int, name: str) -> PorterApp | None:
        """Get the application named ``name`` on a cluster.

        Returns:
            The application, or None if there is none
        """
        pass

    @abstractmethod
    def upsert(self, app: PorterApp) -> PorterApp:
        """Insert a new application or write back changes to an existing one.

        Returns:
            The persisted application with its id populated
        """
        pass

    @abstractmethod
    def append_event(self, event: PorterAppEvent) -> PorterAppEvent:
        """Append an event to an application's activity feed."""
        pass

    @abstractmethod
    def list_registries(self, project_id: int) -> list[Registry]:
        """List the container registries of a project."""
        pass

    @abstractmethod
    def get_cluster(self, cluster_id: int) -> Cluster | None:
        """Get a cluster by id."""
        pass

    @abstractmethod
    def list_events(self, app_id: int, page: int, page_size: int) -> EventPage:
        """List an application's events, newest first.

        Args:
            app_id: Application id
            page: 1-based page number
            page_size: Events per page
        """
        pass


class SqlApplicationStore(ApplicationStore):
    """SQLModel-backed application store.

    Every call runs in its own short session; returned rows are detached
    with their attributes loaded.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def _session(self) -> Session:
        return Session(self._engine, expire_on_commit=False)

    def read_by_name(self, cluster_id: int, name: str) -> PorterApp | None:
        with self._session() as session:
            stmt = select(PorterApp).where(
                PorterApp.cluster_id == cluster_id, PorterApp.name == name
            )
            return session.exec(stmt).first()

    def upsert(self, app: PorterApp) -> PorterApp:
        with self._session() as session:
            if app.id is not None:
                app.updated_at = datetime.now(UTC)
            merged = session.merge(app)
            session.commit()
            session.refresh(merged)
            return merged

    def append_event(self, event: PorterAppEvent) -> PorterAppEvent:
        with self._session() as session:
            session.add(event)
            session.commit()
            session.refresh(event)
            return event

    def list_registries(self, project_id: int) -> list[Registry]:
        with self._session() as session:
            stmt = (
                select(Registry)
                .where(Registry.project_id == project_id)
                .order_by(Registry.id)
            )
            return list(session.exec(stmt).all())

    def get_cluster(self, cluster_id: int) -> Cluster | None:
        with self._session() as session:
            return session.get(Cluster, cluster_id)

    def list_events(self, app_id: int, page: int, page_size: int) -> EventPage:
        page = max(page, 1)
        with self._session() as session:
            total = session.exec(
                select(func.count())
                .select_from(PorterAppEvent)
                .where(PorterAppEvent.porter_app_id == app_id)
            ).one()
            stmt = (
                select(PorterAppEvent)
                .where(PorterAppEvent.porter_app_id == app_id)
                .order_by(
                    PorterAppEvent.created_at.desc(),  # type: ignore[attr-defined]
                    PorterAppEvent.revision.desc(),  # type: ignore[attr-defined]
                )
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
            events = list(session.exec(stmt).all())
        return EventPage(
            events=events, page=page, num_pages=math.ceil(total / page_size)
        )
