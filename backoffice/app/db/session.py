"""
Database session configuration.

This module handles database engine creation and session management
using SQLAlchemy with async support for PostgreSQL.

The engine is owned by a ``Database`` instance that the application
lifespan opens on startup and disposes on shutdown; request handlers
receive sessions through the ``get_db`` dependency.
"""

from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from backoffice.app.core.config import Settings

# Create declarative base for models
Base = declarative_base()


class Database:
    """Explicitly constructed storage client with an open/close lifecycle."""

    def __init__(self, url: str, echo: bool = False, **engine_options):
        self.url = url
        self.echo = echo
        self.engine_options = engine_options
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        options = {}
        if not settings.database_url.startswith("sqlite"):
            options = {
                "pool_size": settings.db_pool_size,
                "max_overflow": settings.db_max_overflow,
            }
        return cls(settings.database_url, echo=settings.db_echo, **options)

    async def connect(self, create_tables: bool = True) -> None:
        self.engine = create_async_engine(self.url, echo=self.echo, future=True, **self.engine_options)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )
        if create_tables:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

    async def disconnect(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
        self.engine = None
        self.session_factory = None

    def session(self) -> AsyncSession:
        if self.session_factory is None:
            raise RuntimeError("Database is not connected")
        return self.session_factory()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    FastAPI dependency for database sessions.

    Yields an async database session and ensures it's properly closed.
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
        finally:
            await session.close()
