"""Async engine, session factory and schema helpers."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from erp_engine.config import get_settings
from erp_engine.models import Base

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

# Process-wide engine, created on first use
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Build an engine for DATABASE_URL (asyncpg in production)."""
    settings = get_settings()
    return create_async_engine(settings.database_url, echo=settings.debug, pool_pre_ping=True)


def init_db() -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Return the shared engine and session factory, creating them once."""
    global _engine, _session_factory
    if _engine is None or _session_factory is None:
        _engine = get_engine()
        # Posted entries and payroll runs stay readable after commit
        _session_factory = async_sessionmaker(_engine, expire_on_commit=False, autoflush=False)
    return _engine, _session_factory


async def dispose_db() -> None:
    """Close pooled connections and forget the shared engine."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine, _session_factory = None, None


async def create_schema(engine: AsyncEngine) -> None:
    """Create missing ledger and HR tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Unit of work: commit when the block succeeds, roll back when it raises."""
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        await session.commit()
