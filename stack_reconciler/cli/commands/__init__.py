"""CLI command modules.

- apply: create or update a stack from porter.yaml
- db: table bootstrap and Alembic migrations
- serve: run the HTTP API
"""

from .apply import apply
from .db import db_app
from .serve import serve

__all__ = ["apply", "db_app", "serve"]
