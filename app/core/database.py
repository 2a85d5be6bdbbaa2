# ============================================================================
# Database Connection
# ============================================================================
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, AsyncIterator, Optional
import json
import logging

from fastapi import Request
from sqlalchemy import String, cast
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
)
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)

# Define Base FIRST (very important)
class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def like_escape(term: str) -> str:
    """Escape LIKE wildcards so ``term`` matches literally with ``escape="\\"``"""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def json_array_contains(column, value: str):
    """Match rows whose JSON list column holds ``value``.

    Works on both PostgreSQL and SQLite by matching the element the way the
    JSON serializer writes it (quoted, non-ASCII as \\uXXXX escapes).
    """
    element = like_escape(json.dumps(value))
    return cast(column, String).like(f"%{element}%", escape="\\")


def normalize_database_url(url: str) -> str:
    # Convert postgresql:// to postgresql+asyncpg://
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return url


class Database:
    """Owns the engine and session factory for one application instance."""

    def __init__(
        self,
        url: str,
        echo: bool = False,
        pool_size: int = 5,
        max_overflow: int = 10,
        connect_timeout: int = 5
    ):
        self.url = normalize_database_url(url)
        self.echo = echo
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.connect_timeout = connect_timeout
        self.engine: Optional[AsyncEngine] = None
        self.session_maker: Optional[async_sessionmaker] = None

    def connect(self) -> None:
        if self.engine is not None:
            return

        options = {"echo": self.echo, "connect_args": {"timeout": self.connect_timeout}}
        if not self.url.startswith("sqlite"):
            options.update(
                pool_size=self.pool_size,
                max_overflow=self.max_overflow,
                pool_pre_ping=True,
            )

        safe_url = self.url.split("@")[1] if "@" in self.url else self.url
        logger.info(f"Connecting to database: {safe_url}")

        self.engine = create_async_engine(self.url, **options)
        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False
        )

    async def create_all(self) -> None:
        # Make sure every model is registered on Base.metadata
        import app.models  # noqa: F401

        self.connect()
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            self.session_maker = None

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Standalone session for scripts and tests; the caller commits."""
        self.connect()
        async with self.session_maker() as session:
            yield session


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    database: Database = request.app.state.context.database
    database.connect()
    async with database.session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
