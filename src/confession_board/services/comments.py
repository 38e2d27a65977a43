"""Comment listing and creation."""

from __future__ import annotations

import logging

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from confession_board.models import ConfessionComment
from confession_board.services.confessions import get_confession
from confession_board.services.errors import StoreError
from confession_board.services.realtime import (
    TABLE_COMMENTS,
    ChangeEvent,
    ChangeFeed,
    ChangeType,
    get_change_feed,
)

logger = logging.getLogger(__name__)

DEFAULT_COMMENT_AUTHOR = "Anonymous"


class CommentService:
    """Append-only comments on confessions."""

    def __init__(self, change_feed: ChangeFeed | None = None) -> None:
        self.change_feed = change_feed or get_change_feed()

    def list_for(self, db: Session, confession_id: str) -> list[ConfessionComment]:
        """Return a confession's comments, newest first."""
        get_confession(db, confession_id)
        return (
            db.query(ConfessionComment)
            .filter(ConfessionComment.confession_id == confession_id)
            .order_by(desc(ConfessionComment.created_at), desc(ConfessionComment.id))
            .all()
        )

    def add(
        self,
        db: Session,
        confession_id: str,
        *,
        content: str,
        author_name: str | None = None,
        user_id: int | None = None,
        ip_address: str | None = None,
        device_info: str | None = None,
    ) -> ConfessionComment:
        """Store a comment on an existing confession."""
        get_confession(db, confession_id)
        comment = ConfessionComment(
            confession_id=confession_id,
            author_name=(author_name or "").strip() or DEFAULT_COMMENT_AUTHOR,
            content=content.strip(),
            user_id=user_id,
            ip_address=ip_address,
            device_info=device_info,
        )
        try:
            db.add(comment)
            db.commit()
            db.refresh(comment)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.warning("Could not store comment on %s: %s", confession_id, exc)
            raise StoreError("Could not store comment") from exc

        self.change_feed.publish(
            ChangeEvent(TABLE_COMMENTS, ChangeType.INSERT, comment.id, confession_id)
        )
        return comment


def get_comment_service() -> CommentService:
    """Return a comment service bound to the shared change feed."""
    return CommentService()
