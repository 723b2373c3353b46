"""
Database module for geetgatha.

Provides the async SQLAlchemy engine, session management and
schema initialization for chat history and run logs.
"""
from geetgatha.db.engine import async_session, engine, get_session, shutdown
from geetgatha.db.models import Base, ChatMessageRecord, PipelineRunRecord


async def init_database():
    """Initialize database schema on first run."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


__all__ = [
    "Base",
    "ChatMessageRecord",
    "PipelineRunRecord",
    "engine",
    "async_session",
    "get_session",
    "shutdown",
    "init_database",
]
