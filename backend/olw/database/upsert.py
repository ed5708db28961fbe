"""Dialect-aware ``INSERT ... ON CONFLICT`` support.

PostgreSQL and SQLite both implement ``on_conflict_do_update``, but each
through its own ``insert`` construct; pick the one matching the session.
"""

from collections.abc import Callable
from typing import Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession


_INSERTS: dict[str, Callable[..., Any]] = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def dialect_insert(session: AsyncSession) -> Callable[..., Any]:
    """Return the ``insert`` factory for the session's database dialect."""
    dialect_name = session.get_bind().dialect.name
    try:
        return _INSERTS[dialect_name]
    except KeyError:
        msg = f"Upserts are not supported on the {dialect_name!r} dialect"
        raise NotImplementedError(msg) from None
