"""Database session management for the FastAPI backend."""
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import get_settings


def build_engine(database_url: str, **kwargs: Any) -> AsyncEngine:
    """Create an async engine; SQLite connections get foreign keys switched on."""

    is_sqlite = database_url.startswith("sqlite+")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    async_engine = create_async_engine(
        database_url, future=True, echo=False, connect_args=connect_args, **kwargs
    )

    if is_sqlite:
        # ON DELETE CASCADE / RESTRICT / SET NULL are only honoured with this pragma.
        @event.listens_for(async_engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return async_engine


settings = get_settings()
engine = build_engine(settings.database_url)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async SQLAlchemy session per request."""

    async with AsyncSessionLocal() as session:
        yield session
