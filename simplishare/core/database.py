"""
Async database setup with SQLAlchemy 2.0.
Provides the process-wide database handle, session management, and base model.
"""
from typing import AsyncGenerator
from contextlib import asynccontextmanager
import uuid
from datetime import datetime

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
    AsyncEngine
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import JSON, MetaData, DateTime, func, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.pool import NullPool

from ..logging_config import get_logger

logger = get_logger("database")

# Naming convention for constraints
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)

# JSONB on PostgreSQL, plain JSON elsewhere
JSONList = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all database models."""
    metadata = metadata

    # Common columns for all tables
    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


class Database:
    """
    Owns the async engine and session factory.

    One instance is created at startup and shared by every request; it is
    handed to the components that need it instead of living in module globals.
    """

    def __init__(
        self,
        url: str,
        echo: bool = False,
        pool_size: int = 20,
        max_overflow: int = 40,
    ):
        self.url = url
        self.engine: AsyncEngine = self._create_engine(url, echo, pool_size, max_overflow)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False
        )

    @staticmethod
    def _create_engine(url: str, echo: bool, pool_size: int, max_overflow: int) -> AsyncEngine:
        # Use appropriate pool based on database URL
        if url.startswith("sqlite"):
            # SQLite doesn't support connection pooling
            return create_async_engine(
                url,
                echo=echo,
                poolclass=NullPool,
                connect_args={"check_same_thread": False}
            )
        return create_async_engine(
            url,
            echo=echo,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,  # Verify connections before using
            pool_recycle=3600,   # Recycle connections after 1 hour
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Context manager for database sessions outside a request.

        Usage:
            async with database.session() as db:
                result = await db.execute(select(Store))
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        """Initialize database tables. Use Alembic in production."""
        # Import all models to ensure they're registered
        from .. import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """Health check for database connection."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as exc:
            logger.error(f"Database ping failed: {exc}")
            return False

    async def dispose(self) -> None:
        """Close database connections."""
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for FastAPI endpoints.
    Provides a database session and ensures proper cleanup.
    """
    async with get_database(request).session() as session:
        yield session
