"""SQLAlchemy model for comments left on confessions."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from confession_board.db.session import Base
from confession_board.db.time import utcnow

from .confession import new_record_id

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .confession import Confession


class ConfessionComment(Base):
    """Append-only reply to a confession."""

    __tablename__ = "confession_comments"
    __table_args__ = (Index("ix_confession_comments_confession_id", "confession_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_record_id)
    confession_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("confessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    author_name: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
    )
    ip_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    device_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    confession: Mapped[Confession] = relationship("Confession", back_populates="comments")
