"""Async database engine and session configuration."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from companion.core.config import settings


def _engine_options() -> dict[str, Any]:
    """Pool options for the configured backend (SQLite has no sized pool)."""
    options: dict[str, Any] = {
        "pool_pre_ping": True,
        "echo": settings.app.is_development and settings.app.debug,
    }
    if not settings.database.is_sqlite:
        options.update(pool_size=10, max_overflow=20, pool_recycle=3600)
    return options


engine = create_async_engine(settings.database.async_url, **_engine_options())

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
