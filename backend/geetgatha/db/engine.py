"""
Database engine configuration for geetgatha.

Provides an async SQLAlchemy engine with SQLite WAL mode and
session management for chat history and run logs.
"""
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from geetgatha.config import settings


def configure_sqlite_pragmas(dbapi_conn, connection_record):
    """
    Configure SQLite PRAGMA settings on every new connection.

    - WAL mode: readers (status polling) do not block the result writer
    - NORMAL synchronous: chat history is cheap to regenerate
    - Busy timeout: wait up to 5s for locks
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


engine = create_async_engine(
    settings.storage.database_url,
    echo=False,
)

if engine.dialect.name == "sqlite":
    # Must hook the sync engine for aiosqlite
    event.listens_for(engine.sync_engine, "connect")(configure_sqlite_pragmas)

# expire_on_commit=False keeps attributes readable after commit without a greenlet
async_session = async_sessionmaker(
    engine,
    expire_on_commit=False,
    class_=AsyncSession,
)


async def get_session():
    """FastAPI dependency yielding an async session."""
    async with async_session() as session:
        yield session


async def shutdown():
    """Dispose of engine and close all connections."""
    await engine.dispose()
