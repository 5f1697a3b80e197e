"""Async engine and session factory.

Sessions are handed to services, which own commits through
``run_in_transaction``. A request never shares a session with another.
"""
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from spendwise.config import settings


def _engine_options(url: str) -> dict:
    # SQLite serialises writers; wait on a locked file instead of failing at once.
    if url.startswith("sqlite"):
        return {"connect_args": {"timeout": settings.sqlite_busy_timeout}}
    return {"pool_pre_ping": True}


# SQL parameters carry amounts and emails, so echo only in development.
async_engine = create_async_engine(
    settings.database_url,
    echo=(settings.db_echo if settings.app_env.lower() == "development" else False),
    **_engine_options(settings.database_url),
)

AsyncSessionLocal = async_sessionmaker(
    async_engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield a request-scoped session (FastAPI dependency)."""
    async with AsyncSessionLocal() as session:
        yield session
