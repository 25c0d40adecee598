"""Async database engine setup.

SQLAlchemy Core (not ORM) over an ``AsyncEngine``. The default driver is
``sqlite+aiosqlite``; SQLite connections run in WAL mode with foreign
keys enforced.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from restodesk.infrastructure.database.schema import metadata


def create_db_engine(url: str) -> AsyncEngine:
    """Create an async engine; SQLite file databases get WAL + foreign keys."""
    engine = create_async_engine(url, echo=False)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


async def init_database(url: str) -> AsyncEngine:
    """Create every table from :data:`schema.metadata` and return the engine.

    For SQLite file URLs the parent directory is created first. Idempotent:
    safe to call on an existing database.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_db_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    return engine
