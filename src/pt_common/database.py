"""PostgreSQL access: one async engine per process, one session per request.

Repositories receive the session from the caller and never commit. The
application services decide the transaction boundary (``db.commit()`` /
``db.rollback()``); routers only inject the session.
"""

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    """Declarative base for the few ORM-mapped tables (users)."""


def _build_engine(url: str) -> AsyncEngine:
    return create_async_engine(
        url,
        echo=settings.DEBUG,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
    )


engine = _build_engine(settings.DATABASE_URL)
async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        yield session


async def ping_database() -> None:
    """Raises if PostgreSQL is unreachable; called once at startup."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
