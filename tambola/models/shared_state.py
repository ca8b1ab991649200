"""Database models backing the shared game-state store."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import DateTime, Integer, String, Text, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from tambola.db.utils import dt_iso, epoch_millis

from .base import Base


class SharedStateEntry(Base):
    """One key of the shared key-value store read by display screens.

    Each write replaces ``value`` and bumps ``version`` so a poller can tell
    whether anything changed since its last read.
    """

    __tablename__ = "shared_state"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    """Store key, e.g. ``"tambolaGameState"``."""

    value: Mapped[str] = mapped_column(Text, nullable=False)
    """JSON-encoded payload."""

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    """Incremented on every write."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<SharedStateEntry(key='{self.key}', version={self.version})>"

    @property
    def payload(self) -> Any:
        return json.loads(self.value)

    def to_json(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "value": self.payload,
            "version": self.version,
            "updated_at": dt_iso(self.updated_at),
            "timestamp": epoch_millis(self.updated_at),
        }

    @classmethod
    def get(cls, session: Session, key: str) -> Optional["SharedStateEntry"]:
        return session.scalar(select(cls).where(cls.key == key))

    @classmethod
    def put(cls, session: Session, key: str, payload: Any) -> "SharedStateEntry":
        """Insert or overwrite ``key`` with the JSON encoding of ``payload``.

        The entry is flushed but not committed; the caller owns the
        transaction.
        """
        encoded = json.dumps(payload, ensure_ascii=False)
        now = datetime.now(timezone.utc)
        entry = cls.get(session, key)
        if entry is None:
            entry = cls(key=key, value=encoded, version=1, updated_at=now)
            session.add(entry)
        else:
            entry.value = encoded
            entry.version = entry.version + 1
            entry.updated_at = now
        session.flush()
        return entry


class AnnouncementRecord(Base):
    """Append-only log of winner announcements, in emission order."""

    __tablename__ = "announcements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    participant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    rank_label: Mapped[str] = mapped_column(String(8), nullable=False)
    display_name: Mapped[str] = mapped_column(String(64), nullable=False)
    announced_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return (
            f"<AnnouncementRecord(id={self.id}, category='{self.category}', "
            f"participant_name='{self.participant_name}')>"
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category,
            "participantName": self.participant_name,
            "rankLabel": self.rank_label,
            "displayName": self.display_name,
            "timestamp": epoch_millis(self.announced_at),
        }

    @classmethod
    def since(cls, session: Session, last_id: int = 0) -> list["AnnouncementRecord"]:
        """Announcements with an id greater than ``last_id``, oldest first."""
        return list(
            session.scalars(select(cls).where(cls.id > last_id).order_by(cls.id))
        )
