"""
SQLAlchemy ORM models for persistent storage.

Session state is stored as a single keyed JSON snapshot per player.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class SessionSnapshotDB(Base):
    """
    Snapshot of one player's session.

    The payload holds cards, guesses, sort order and dataset selection.
    It is rewritten after every mutating command.
    """

    __tablename__ = "session_snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_key: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<SessionSnapshotDB(id={self.id}, session_key={self.session_key})>"
