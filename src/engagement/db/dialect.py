"""Dialect-specific INSERT for upserts.

Production runs on PostgreSQL; the test suite runs on SQLite. Both
dialects provide insert().on_conflict_do_update/do_nothing with the same
signature for index_elements.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def insert_for(db: AsyncSession, model: Any) -> Any:
    """Return an upsert-capable INSERT for the session's dialect."""
    if db.get_bind().dialect.name == "sqlite":
        return sqlite.insert(model)
    return postgresql.insert(model)
