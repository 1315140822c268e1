"""SQLite database connection and schema management.

Consultations are stored in ~/.gtm-alpha/consultations.db by default.
WAL mode is enabled so tool calls can read while the purge scheduler writes.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = os.path.expanduser("~/.gtm-alpha")
DB_FILENAME = "consultations.db"


def get_data_dir() -> Path:
    """Get the data directory, creating it if needed."""
    data_dir = Path(os.environ.get("DATA_DIR", DEFAULT_DATA_DIR))
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_db_url(data_dir: Optional[Path] = None) -> str:
    """Get the SQLite database URL."""
    db_path = (data_dir or get_data_dir()) / DB_FILENAME
    return f"sqlite+aiosqlite:///{db_path}"


def _set_wal_mode(dbapi_connection, connection_record):
    """Enable WAL mode for concurrent reads during writes."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def create_engine(url: Optional[str] = None) -> AsyncEngine:
    """Create an async engine with WAL enabled on every connection.

    Connections are not pooled so an engine can be used from whichever event
    loop opened the store (the HTTP test client runs its own loop).
    """
    engine = create_async_engine(url or get_db_url(), echo=False, poolclass=NullPool)
    event.listen(engine.sync_engine, "connect", _set_wal_mode)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables if they don't exist."""
    from .sqlmodels import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized at %s", engine.url.database)
