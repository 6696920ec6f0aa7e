"""
Database configuration with async sessions and retry logic
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.exc import DisconnectionError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from taxoai.core.config import settings
from taxoai.core.logging import log


# Retry decorator for database operations
db_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=5),
    reraise=True,
    retry=retry_if_exception_type((OperationalError, DisconnectionError)),
)


def create_engine_for(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine; SQLite needs cross-thread access for aiosqlite"""
    kwargs = {"echo": echo, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    return create_async_engine(url, **kwargs)


class DatabaseSessionManager:
    """Manages database session lifecycle with proper error handling"""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or settings.database_url
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("DatabaseSessionManager is not initialized")
        return self._engine

    @db_retry
    async def init(self, create_tables: bool = True):
        """Initialize the database connection"""
        if self._engine is not None:
            return

        self._engine = create_engine_for(self.database_url, echo=settings.db_echo)
        self._sessionmaker = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

        async with self._engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if create_tables:
                # Register table models before create_all
                import taxoai.models  # noqa: F401

                await conn.run_sync(SQLModel.metadata.create_all)
        log.info("Database connection established", url=self.database_url.split("@")[-1])

    async def close(self):
        """Close database connection"""
        if self._engine is None:
            return

        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        log.info("Database connection closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a transactional scope with proper error handling"""
        if self._sessionmaker is None:
            await self.init()

        async with self._sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                await session.rollback()
                log.error(f"Database session error: {e}")
                raise


# Global session manager instance
db_manager = DatabaseSessionManager()


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Async session dependency with proper lifecycle management"""
    async with db_manager.session() as session:
        yield session


async def init_db():
    """Initialize database and create tables"""
    await db_manager.init(create_tables=True)
