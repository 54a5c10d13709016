from __future__ import annotations

import datetime
import logging
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text, UniqueConstraint, create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from config import DATABASE_URL, ensure_data_dirs

logger = logging.getLogger(__name__)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Base(DeclarativeBase):
    """Metadata for the roster store living in roster.db."""

    pass


class RosterSnapshot(Base):
    """Whole-roster JSON document stored under a versioned key."""

    __tablename__ = "roster_snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    storage_key: Mapped[str] = mapped_column(String(64), nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
    )

    __table_args__ = (UniqueConstraint("storage_key", name="uq_roster_snapshots_key"),)


if DATABASE_URL.startswith("sqlite:///"):
    ensure_data_dirs()
engine = create_engine(
    DATABASE_URL,
    echo=False,
    future=True,
)
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False, future=True)


def init_database(bind=None) -> None:
    Base.metadata.create_all(bind or engine)


def load_roster_payload(session, storage_key: str) -> Optional[str]:
    """Return the stored JSON for ``storage_key`` or None when absent or unreadable."""
    try:
        snapshot = session.scalars(
            select(RosterSnapshot).where(RosterSnapshot.storage_key == storage_key)
        ).first()
    except SQLAlchemyError as exc:
        logger.warning("Could not read roster '%s': %s", storage_key, exc)
        return None
    if not snapshot:
        return None
    return snapshot.payload


def save_roster_payload(session, storage_key: str, payload: str) -> bool:
    try:
        snapshot = session.scalars(
            select(RosterSnapshot).where(RosterSnapshot.storage_key == storage_key)
        ).first()
        if snapshot:
            snapshot.payload = payload
        else:
            session.add(RosterSnapshot(storage_key=storage_key, payload=payload))
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Failed to save roster '%s': %s", storage_key, exc)
        return False
    return True

