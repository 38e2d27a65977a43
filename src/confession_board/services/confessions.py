"""Confession storage, lookup and feed assembly."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from sqlalchemy import desc, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from confession_board.core.settings import settings
from confession_board.models import Confession, ConfessionComment, ConfessionVote
from confession_board.services.aggregation import group_votes
from confession_board.services.errors import ConfessionNotFoundError, StoreError
from confession_board.services.ranking import (
    ScoredConfession,
    available_tags,
    filter_by_tags,
    normalize_tags,
    rank_scored,
    score_confessions,
)
from confession_board.services.realtime import (
    TABLE_CONFESSIONS,
    ChangeEvent,
    ChangeFeed,
    ChangeType,
    get_change_feed,
)
from confession_board.utils.text import slugify

logger = logging.getLogger(__name__)

ANONYMOUS_AUTHOR_PREFIX = "Anonymous User #"

# Static routes under /confessions that a slug must not shadow.
RESERVED_SLUGS = frozenset({"trending", "tags"})


def anonymous_author_name() -> str:
    """Return a placeholder pseudonym such as `Anonymous User #4821`."""
    return f"{ANONYMOUS_AUTHOR_PREFIX}{secrets.randbelow(10000)}"


def get_confession(db: Session, confession_id: str) -> Confession:
    """Return the confession with `confession_id`.

    Raises:
        ConfessionNotFoundError: If no such confession exists
    """
    confession = db.get(Confession, confession_id)
    if confession is None:
        raise ConfessionNotFoundError(confession_id)
    return confession


def get_confession_by_ref(db: Session, ref: str) -> Confession:
    """Return the confession whose id or slug equals `ref`."""
    confession = (
        db.query(Confession)
        .filter(or_(Confession.id == ref, Confession.slug == ref))
        .first()
    )
    if confession is None:
        raise ConfessionNotFoundError(ref)
    return confession


def list_confessions(db: Session) -> list[Confession]:
    """Return every confession, newest first."""
    return (
        db.query(Confession)
        .order_by(desc(Confession.created_at), desc(Confession.id))
        .all()
    )


def comment_counts(db: Session) -> dict[str, int]:
    """Return the number of comments per confession id."""
    rows = (
        db.query(ConfessionComment.confession_id, func.count(ConfessionComment.id))
        .group_by(ConfessionComment.confession_id)
        .all()
    )
    return {confession_id: count for confession_id, count in rows}


def unique_slug(db: Session, title: str) -> str:
    """Derive a slug from `title` that no other confession uses."""
    base = slugify(title) or "confession"
    slug = base
    suffix = 1
    while (
        slug in RESERVED_SLUGS
        or db.query(Confession.id).filter(Confession.slug == slug).first() is not None
    ):
        suffix += 1
        slug = f"{base}-{suffix}"
    return slug


@dataclass
class Feed:
    """A confession listing with counters and filter metadata."""

    items: list[ScoredConfession[Confession]]
    comment_counts: dict[str, int]
    available_tags: list[str]
    selected_tags: list[str]


class ConfessionService:
    """Create, list and delete confessions."""

    def __init__(self, change_feed: ChangeFeed | None = None) -> None:
        self.change_feed = change_feed or get_change_feed()

    def create(
        self,
        db: Session,
        *,
        title: str,
        content: str,
        author_name: str | None = None,
        tags: Iterable[str] | None = None,
        user_id: int | None = None,
        ip_address: str | None = None,
        device_info: str | None = None,
    ) -> Confession:
        """Persist a new confession and announce it on the change feed."""
        confession = Confession(
            author_name=(author_name or "").strip() or anonymous_author_name(),
            title=title.strip(),
            content=content.strip(),
            tags=normalize_tags(tags, limit=settings.max_tags),
            user_id=user_id,
            ip_address=ip_address,
            device_info=device_info,
        )
        try:
            confession.slug = unique_slug(db, confession.title)
            db.add(confession)
            db.commit()
            db.refresh(confession)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.warning("Could not store confession: %s", exc)
            raise StoreError("Could not store confession") from exc

        logger.info("Confession %s created", confession.id)
        self.change_feed.publish(
            ChangeEvent(TABLE_CONFESSIONS, ChangeType.INSERT, confession.id, confession.id)
        )
        return confession

    def delete_many(self, db: Session, confession_ids: Sequence[str]) -> int:
        """Delete confessions (and their votes, comments and reports).

        Unknown ids are skipped. Returns the number of confessions removed.
        """
        if not confession_ids:
            return 0
        try:
            confessions = (
                db.query(Confession).filter(Confession.id.in_(list(confession_ids))).all()
            )
            deleted_ids = [confession.id for confession in confessions]
            for confession in confessions:
                db.delete(confession)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.warning("Could not delete confessions %s: %s", list(confession_ids), exc)
            raise StoreError("Could not delete confessions") from exc

        for confession_id in deleted_ids:
            logger.info("Confession %s deleted", confession_id)
            self.change_feed.publish(
                ChangeEvent(TABLE_CONFESSIONS, ChangeType.DELETE, confession_id, confession_id)
            )
        return len(deleted_ids)

    def delete(self, db: Session, confession_id: str) -> None:
        """Delete a single confession.

        Raises:
            ConfessionNotFoundError: If no such confession exists
        """
        get_confession(db, confession_id)
        self.delete_many(db, [confession_id])

    def feed(
        self,
        db: Session,
        *,
        selected_tags: Iterable[str] = (),
        trending: bool = False,
    ) -> Feed:
        """Assemble the newest-first or trending listing.

        Everything is loaded and grouped in memory; tag filtering happens after
        ranking so `available_tags` always reflects the whole board.
        """
        confessions = list_confessions(db)
        votes_by_confession = group_votes(db.query(ConfessionVote).all())
        scored = score_confessions(confessions, votes_by_confession)
        if trending:
            scored = rank_scored(scored)

        selected = [tag for tag in (slugify(raw, max_length=32) for raw in selected_tags) if tag]
        ordered = [item.confession for item in scored]
        kept = {c.id for c in filter_by_tags(ordered, selected)}
        return Feed(
            items=[item for item in scored if item.confession.id in kept],
            comment_counts=comment_counts(db),
            available_tags=available_tags(confessions),
            selected_tags=selected,
        )


def get_confession_service() -> ConfessionService:
    """Return a confession service bound to the shared change feed."""
    return ConfessionService()
