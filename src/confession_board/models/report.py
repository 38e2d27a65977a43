"""SQLAlchemy model for abuse reports filed against confessions."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from confession_board.db.session import Base
from confession_board.db.time import utcnow

from .confession import new_record_id

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .confession import Confession


class ConfessionReport(Base):
    """Abuse report awaiting moderator review.

    Reports are append-only for clients and are removed either when a
    moderator dismisses them or when the reported confession is deleted.
    """

    __tablename__ = "confession_reports"
    __table_args__ = (Index("ix_confession_reports_confession_id", "confession_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_record_id)
    confession_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("confessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    reporter_identifier: Mapped[str | None] = mapped_column(Text, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    device_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    confession: Mapped[Confession] = relationship("Confession", back_populates="reports")
