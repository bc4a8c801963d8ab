"""Registers every entity table with SQLModel.metadata.

Each entity lives in ``entities/<name>/table.py``. A table class only joins
the shared metadata once its module is imported, so schema creation and
Alembic autogenerate go through :func:`get_metadata`.
"""

import importlib
from pathlib import Path

from loguru import logger
from sqlalchemy import MetaData
from sqlmodel import SQLModel

ENTITIES_DIR = Path(__file__).parent
ENTITIES_PACKAGE = __name__.rpartition(".")[0]


def table_modules() -> list[str]:
    """Dotted names of all entity table modules, sorted."""
    return [
        ".".join([ENTITIES_PACKAGE, *path.relative_to(ENTITIES_DIR).with_suffix("").parts])
        for path in sorted(ENTITIES_DIR.rglob("table.py"))
    ]


def get_metadata() -> MetaData:
    """Import all entity tables and return the populated metadata."""
    for module_name in table_modules():
        try:
            importlib.import_module(module_name)
        except ImportError as e:
            raise ImportError(f"Cannot load entity tables from {module_name}: {e}") from e
        logger.debug(f"Registered tables from {module_name}")
    return SQLModel.metadata
