"""Database engine, schema bootstrap and transactional sessions."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from statutory_payroll.config import get_settings
from statutory_payroll.models import Base

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine(database_url: str | None = None) -> AsyncEngine:
    """Create an async engine for ``database_url`` or the configured URL."""
    settings = get_settings()
    return create_async_engine(
        database_url or settings.database_url,
        echo=settings.debug,
        pool_pre_ping=True,
    )


def init_db(
    database_url: str | None = None,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create the process engine and session factory on first use.

    ``database_url`` only matters on the first call.
    """
    global _engine, _session_factory
    if _engine is None or _session_factory is None:
        _engine = get_engine(database_url)
        _session_factory = async_sessionmaker(
            _engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.debug("Initialized database engine for %s", _engine.url.render_as_string())
    return _engine, _session_factory


async def dispose_db() -> None:
    """Close pooled connections and forget the process engine."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


async def create_schema(engine: AsyncEngine | None = None) -> None:
    """Create any missing statutory tables. Existing tables are left alone."""
    engine = engine or init_db()[0]
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Statutory schema ready (%d tables)", len(Base.metadata.tables))


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """One unit of work: commit on success, roll back on any error.

    Repositories only flush; this is the only place that commits.
    """
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
