"""
Database base configuration for SQLAlchemy models.

This module uses SQLAlchemy 2.0 style with DeclarativeBase. All FastAPI
endpoints use the async engine (get_db yields AsyncSession). Pass count
aggregation opens one session per concurrent count through
get_session_factory, since a single AsyncSession cannot run queries
concurrently.
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from typing import AsyncGenerator
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "") or "postgresql://localhost:5432/proftest"

# Echo SQL in development only
DEBUG = os.getenv("DEBUG", "True").lower() in ("true", "1", "yes")

# Connection pool settings
POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
POOL_MAX_OVERFLOW = int(os.getenv("DB_POOL_MAX_OVERFLOW", "20"))
POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))
POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "3600"))
POOL_PRE_PING = os.getenv("DB_POOL_PRE_PING", "True").lower() in (
    "true",
    "1",
    "yes",
)

# Build the async URL by string-prefix replacement on the raw DATABASE_URL.
_SYNC_PREFIX_MAP = {
    "postgresql+psycopg2://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


def to_async_url(url: str) -> str:
    """
    Map a sync database URL onto its async driver equivalent.

    URLs that already name an async driver are returned unchanged.

    Args:
        url: Database URL as configured in the environment

    Returns:
        URL using asyncpg or aiosqlite

    Raises:
        ValueError: If no async driver mapping exists for the URL prefix
    """
    if url.startswith(("postgresql+asyncpg://", "sqlite+aiosqlite://")):
        return url
    for sync_prefix, async_prefix in _SYNC_PREFIX_MAP.items():
        if url.startswith(sync_prefix):
            return async_prefix + url[len(sync_prefix) :]
    raise ValueError(
        f"No async driver mapping for DATABASE_URL prefix. "
        f"Supported prefixes: {list(_SYNC_PREFIX_MAP.keys())}"
    )


_ASYNC_DATABASE_URL = to_async_url(DATABASE_URL)

if _ASYNC_DATABASE_URL.startswith("sqlite"):
    # SQLite uses a static pool; sizing arguments are rejected.
    async_engine = create_async_engine(_ASYNC_DATABASE_URL, echo=DEBUG)
else:
    async_engine = create_async_engine(
        _ASYNC_DATABASE_URL,
        echo=DEBUG,
        pool_size=POOL_SIZE,
        max_overflow=POOL_MAX_OVERFLOW,
        pool_timeout=POOL_TIMEOUT,
        pool_recycle=POOL_RECYCLE,
        pool_pre_ping=POOL_PRE_PING,
    )

AsyncSessionLocal = async_sessionmaker(
    async_engine, class_=AsyncSession, expire_on_commit=False
)


class Base(DeclarativeBase):
    """
    SQLAlchemy 2.0 declarative base class with type annotation support.
    """

    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Async dependency function to get database session.

    Yields an async database session and ensures proper cleanup.
    """
    async with AsyncSessionLocal() as db:
        try:
            yield db
        except Exception:
            await db.rollback()
            raise


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Dependency returning the session factory used for concurrent work.

    Overridden in tests to point at the test database.
    """
    return AsyncSessionLocal
