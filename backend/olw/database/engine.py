from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_app_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create the async engine for the configured database.

    - PostgreSQL (psycopg): standard pool with pre-ping.
    - SQLite (aiosqlite): single shared connection so in-memory databases
      survive across sessions, with foreign keys switched on so
      ``ON DELETE CASCADE`` behaves like it does on Postgres.
    """
    if database_url.startswith("sqlite"):
        engine = create_async_engine(
            database_url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_async_engine(
        database_url,
        echo=echo,
        pool_size=10,
        max_overflow=10,
        pool_recycle=3600,  # ~1h
        pool_pre_ping=True,
        pool_use_lifo=True,
        connect_args={"connect_timeout": 10},
    )
