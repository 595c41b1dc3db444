"""
spookbot.database.models — SQLAlchemy 2.0 Data Models
======================================================

Tables:
- profiles — one row per (namespace, user) with candy, title, inventory,
  and the timestamp of the last trick-or-treat.

Storage is a single flat table keyed by the application namespace and the
Discord user id, so the leaderboard is one ordinary indexed query.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    JSON,
    BigInteger,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from spookbot.constants import DEFAULT_TITLE


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all spookbot ORM models."""


# JSONB on PostgreSQL, plain JSON everywhere else (SQLite in tests).
InventoryJSON = JSON().with_variant(JSONB(), "postgresql")


# ---------------------------------------------------------------------------
# Profiles — one row per trick-or-treater
# ---------------------------------------------------------------------------
class Profile(Base):
    """Persisted candy profile.

    ``revision`` is SQLAlchemy's ``version_id_col``: every UPDATE is issued
    as ``... WHERE revision = <read value>`` and raises
    :class:`~sqlalchemy.orm.exc.StaleDataError` if another writer got there
    first.  The profile store uses that to make read-modify-write atomic.
    """
    __tablename__ = "profiles"

    namespace: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    username: Mapped[str | None] = mapped_column(String(100), default=None)
    candy: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    title: Mapped[str] = mapped_column(String(100), default=DEFAULT_TITLE, nullable=False)
    inventory: Mapped[list[str]] = mapped_column(InventoryJSON, default=list, nullable=False)
    last_used: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    revision: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("candy >= 0", name="ck_profiles_candy_non_negative"),
        Index("ix_profiles_namespace_candy", "namespace", "candy"),
    )

    __mapper_args__ = {"version_id_col": revision}

    def __repr__(self) -> str:
        return f"<Profile user={self.user_id} name={self.username!r} candy={self.candy}>"
