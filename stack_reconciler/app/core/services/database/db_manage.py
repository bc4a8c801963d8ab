"""Database engine and schema bootstrap."""

from loguru import logger
from sqlalchemy import Engine
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from stack_reconciler.app.entities.loader import get_metadata
from stack_reconciler.app.runtime.config.config_data import DatabaseConfig


class DbManageService:
    def __init__(self, config: DatabaseConfig) -> None:
        kwargs: dict = {"echo": config.echo}
        url = config.connection_string
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            # In-memory SQLite must share one connection across threads
            if url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool
        self._engine = create_engine(url, **kwargs)

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_all(self) -> None:
        """Create all database tables."""
        get_metadata()  # Ensure all tables are imported and registered

        try:
            SQLModel.metadata.create_all(self._engine)
            logger.info("Database initialized with tables.")
        except (ProgrammingError, IntegrityError, OperationalError) as e:
            # Handle race condition when multiple workers try to create tables
            error_msg = str(e).lower()
            if "already exists" in error_msg or "duplicate key" in error_msg:
                logger.debug(
                    f"Tables already exist or partially created, skipping: {type(e).__name__}"
                )
            else:
                raise

    def health_check(self) -> bool:
        """Check that the database accepts connections."""
        from sqlalchemy import text

        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"Database health check failed: {e}")
            return False
