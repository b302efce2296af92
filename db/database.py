"""
Database connection module using a SQLAlchemy async engine with connection pooling
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import text

from utils.settings import get_settings

logger = logging.getLogger("forms.db")

# SQLAlchemy models base class
Base = declarative_base()

engine: Optional[AsyncEngine] = None
async_session_maker: Optional[async_sessionmaker] = None


def init_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """Create (or replace) the process-wide engine and session factory."""
    global engine, async_session_maker

    settings = get_settings()
    url = database_url or settings.DATABASE_URL
    kwargs = {"echo": False, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=1800,
        )

    engine = create_async_engine(url, **kwargs)
    async_session_maker = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    logger.info("database engine created dialect=%s", engine.dialect.name)
    return engine


def _session_factory() -> async_sessionmaker:
    if async_session_maker is None:
        init_engine()
    return async_session_maker


async def init_db() -> None:
    """Create tables for every model registered on Base."""
    # Import models so they register on Base.metadata
    from db import models  # noqa: F401

    if engine is None:
        init_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    global engine, async_session_maker
    if engine is not None:
        await engine.dispose()
    engine = None
    async_session_maker = None


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an AsyncSession and manages commit/rollback/close."""
    session = _session_factory()()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


@asynccontextmanager
async def session_scope(commit: bool = False):
    """Async context manager for handlers that own their transaction"""
    async with _session_factory()() as session:
        try:
            yield session
            if commit:
                await session.commit()
        except Exception:
            await session.rollback()
            raise


async def ping() -> bool:
    """Run SELECT 1 against the configured database."""
    async with _session_factory()() as session:
        await session.execute(text("SELECT 1"))
    return True
