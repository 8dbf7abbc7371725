"""
Database CRUD operations.

Provides async functions for reading, writing and deleting session snapshots.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from guessacard.models.db import SessionSnapshotDB
from guessacard.models.session import SessionState


async def get_snapshot(session: AsyncSession, session_key: str) -> SessionSnapshotDB | None:
    """
    Get a stored snapshot by session key.

    Returns None if nothing has been saved for this key.
    """
    result = await session.execute(
        select(SessionSnapshotDB).where(SessionSnapshotDB.session_key == session_key)
    )
    return result.scalar_one_or_none()


async def save_snapshot(
    session: AsyncSession,
    session_key: str,
    state: SessionState,
) -> SessionSnapshotDB:
    """
    Write a session snapshot, creating the row on first save.
    """
    snapshot = await get_snapshot(session, session_key)
    payload = state.to_snapshot()

    if snapshot is None:
        snapshot = SessionSnapshotDB(session_key=session_key, payload=payload)
        session.add(snapshot)
    else:
        snapshot.payload = payload

    await session.flush()
    return snapshot


async def delete_snapshot(session: AsyncSession, session_key: str) -> bool:
    """
    Delete a stored snapshot.

    Returns True if a snapshot was deleted, False if none existed.
    """
    result = await session.execute(
        delete(SessionSnapshotDB).where(SessionSnapshotDB.session_key == session_key)
    )
    return bool(result.rowcount)


async def load_state(session: AsyncSession, session_key: str) -> SessionState:
    """Restore a session state, or a fresh one if nothing was saved."""
    snapshot = await get_snapshot(session, session_key)
    if snapshot is None:
        return SessionState()
    return SessionState.from_snapshot(snapshot.payload)
