"""Models capturing voting interactions on confessions."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from confession_board.db.session import Base
from confession_board.db.time import utcnow

from .confession import new_record_id

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .confession import Confession

VOTE_TYPE_UP = "upvote"
VOTE_TYPE_DOWN = "downvote"


class ConfessionVote(Base):
    """A single voter's stance on a confession.

    The voter is either a signed-in account (`user_id`) or an anonymous
    browser token (`vote_identifier`). There is no unique
    constraint on the voter columns; one vote per voter is kept by the
    vote service.
    """

    __tablename__ = "confession_votes"
    __table_args__ = (
        CheckConstraint(
            "vote_type IN ('upvote', 'downvote')",
            name="ck_confession_votes_vote_type",
        ),
        Index("ix_confession_votes_confession_id", "confession_id"),
        Index("ix_confession_votes_identifier", "confession_id", "vote_identifier"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_record_id)
    confession_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("confessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=True,
    )
    vote_identifier: Mapped[str | None] = mapped_column(Text, nullable=True)
    vote_type: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    confession: Mapped[Confession] = relationship("Confession", back_populates="votes")
