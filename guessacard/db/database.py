"""
Snapshot store engine and sessions.

Session snapshots live in whatever database ``settings.database_url`` names:
a local SQLite file by default, Postgres (asyncpg) in deployment.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from guessacard.config import settings
from guessacard.models.db import Base


def _engine_options(url: str) -> dict[str, Any]:
    # SQLite has no server connection to go stale
    if url.startswith("sqlite"):
        return {}
    return {"pool_pre_ping": True}


engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_options(settings.database_url),
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session.

    The snapshot written by a command is committed only when the handler
    returns normally. Any exception, classified or not, leaves the stored
    snapshot as it was.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create the snapshot table if it does not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_db() -> None:
    """Close pooled connections at shutdown."""
    await engine.dispose()
