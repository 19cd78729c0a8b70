"""Async engine, session factory and declarative base.

The search core borrows short-lived sessions from
:data:`async_session_factory` directly; request handlers that need a
single session use the :func:`get_db` dependency.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from newsroom.config import get_settings

settings = get_settings()

engine = create_async_engine(
    settings.async_database_url,
    echo=settings.DB_ECHO,
    pool_size=settings.DB_POOL_SIZE,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session for one request. Every route is read-only, so
    nothing is committed; the session is rolled back on close."""
    async with async_session_factory() as session:
        yield session
