"""SQLAlchemy model for anonymously authored confessions."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from confession_board.db.session import Base
from confession_board.db.time import utcnow

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .comment import ConfessionComment
    from .report import ConfessionReport
    from .vote import ConfessionVote


def new_record_id() -> str:
    """Return a fresh string identifier for a record."""
    return str(uuid.uuid4())


class Confession(Base):
    """An anonymous post.

    Confessions are immutable once authored; only moderators remove them, and
    removal cascades to the votes, comments and reports that reference them.
    """

    __tablename__ = "confessions"
    __table_args__ = (Index("ix_confessions_created_at", "created_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_record_id)
    author_name: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    slug: Mapped[str | None] = mapped_column(String(120), unique=True, nullable=True)

    # Set only when the author posted while signed in.
    user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Request metadata surfaced to moderators only.
    ip_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    device_info: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    votes: Mapped[list[ConfessionVote]] = relationship(
        "ConfessionVote",
        back_populates="confession",
        cascade="all, delete-orphan",
    )
    comments: Mapped[list[ConfessionComment]] = relationship(
        "ConfessionComment",
        back_populates="confession",
        cascade="all, delete-orphan",
    )
    reports: Mapped[list[ConfessionReport]] = relationship(
        "ConfessionReport",
        back_populates="confession",
        cascade="all, delete-orphan",
    )
