"""
Database session management for SQLAlchemy with async support

Supports both FastAPI (explicit init in lifespan) and Celery workers /
standalone scripts (lazy init from settings).
"""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from packages.common.config import get_settings

logger = structlog.get_logger()


def to_async_url(database_url: str) -> str:
    """Convert postgresql:// to postgresql+asyncpg://"""
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return database_url


class DatabaseSessionManager:
    """Manage database connections and sessions"""

    def __init__(self):
        self._engine = None
        self._sessionmaker = None
        self._init_lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        """Check if session manager is initialized"""
        return self._sessionmaker is not None

    async def init(self, database_url: str, **engine_kwargs):
        """Initialize database engine and session maker"""
        if self.initialized:
            return

        async with self._init_lock:  # Double-checked locking
            if self.initialized:
                return

            default_kwargs = {
                "echo": False,
                "pool_size": 10,
                "max_overflow": 10,
                "pool_pre_ping": True,
                "pool_recycle": 3600,
            }
            default_kwargs.update(engine_kwargs)

            self._engine = create_async_engine(to_async_url(database_url), **default_kwargs)

            self._sessionmaker = async_sessionmaker(
                bind=self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
            logger.info("database_initialized", pool_size=default_kwargs["pool_size"])

    async def close(self):
        """Close database connections"""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("database_closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Context manager for database sessions (commit on success)"""
        if not self.initialized:
            raise RuntimeError("DatabaseSessionManager not initialized")

        async with self._sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


# Global session manager instance
sessionmanager = DatabaseSessionManager()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Get database session (works in FastAPI, workers and scripts).

    In FastAPI: sessionmanager.init() is called during startup.
    Elsewhere: auto-initializes from settings on first use.
    """
    if not sessionmanager.initialized:
        settings = get_settings()
        await sessionmanager.init(settings.database_url, echo=settings.debug)

    async with sessionmanager.session() as session:
        yield session
