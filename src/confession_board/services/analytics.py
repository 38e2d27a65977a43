"""Moderator dashboard statistics."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from confession_board.core.settings import settings
from confession_board.db.time import as_utc, utcnow
from confession_board.models import Confession, ConfessionComment, ConfessionVote
from confession_board.models.vote import VOTE_TYPE_DOWN, VOTE_TYPE_UP
from confession_board.services.aggregation import vote_distribution


@dataclass(frozen=True)
class NamedCount:
    name: str
    count: int


@dataclass
class AnalyticsSnapshot:
    """Aggregate numbers shown on the admin dashboard."""

    total_confessions: int = 0
    total_comments: int = 0
    total_votes: int = 0
    confessions_today: int = 0
    confessions_this_week: int = 0
    total_upvotes: int = 0
    total_downvotes: int = 0
    top_authors: list[NamedCount] = field(default_factory=list)
    daily_stats: list[NamedCount] = field(default_factory=list)
    vote_distribution: list[NamedCount] = field(default_factory=list)


def day_label(value: datetime) -> str:
    """Short chart label such as `Oct 7`."""
    return f"{value:%b} {value.day}"


def _count(db: Session, column, *criteria) -> int:  # noqa: ANN001 - SQLAlchemy column
    return db.query(func.count(column)).filter(*criteria).scalar() or 0


def top_authors(author_names: list[str], limit: int) -> list[NamedCount]:
    """Most prolific pseudonyms, highest count first.

    Ties keep the order in which the names were first seen.
    """
    counts = Counter(author_names)
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [NamedCount(name=name, count=count) for name, count in ranked[:limit]]


def daily_counts(timestamps: list[datetime]) -> list[NamedCount]:
    """Confessions per calendar day (UTC), oldest day first."""
    counts: dict[str, int] = {}
    for stamp in sorted(as_utc(value) for value in timestamps):
        label = day_label(stamp)
        counts[label] = counts.get(label, 0) + 1
    return [NamedCount(name=label, count=count) for label, count in counts.items()]


class AnalyticsService:
    """Compute dashboard statistics from the store."""

    def __init__(self, window_days: int | None = None, top_limit: int | None = None) -> None:
        self.window_days = window_days or settings.analytics_window_days
        self.top_limit = top_limit or settings.analytics_top_authors

    def snapshot(self, db: Session, now: datetime | None = None) -> AnalyticsSnapshot:
        """Gather every dashboard figure in one pass.

        `now` defaults to the current time and is injectable for tests.
        """
        current = as_utc(now or utcnow())
        start_of_day = current.replace(hour=0, minute=0, second=0, microsecond=0)
        window_start = current - timedelta(days=self.window_days)

        votes = db.query(ConfessionVote.confession_id, ConfessionVote.vote_type).all()
        distribution = vote_distribution(votes)
        recent = [
            row.created_at
            for row in db.query(Confession.created_at)
            .filter(Confession.created_at >= window_start)
            .order_by(Confession.created_at)
            .all()
        ]
        authors = [row.author_name for row in db.query(Confession.author_name).all()]

        return AnalyticsSnapshot(
            total_confessions=_count(db, Confession.id),
            total_comments=_count(db, ConfessionComment.id),
            total_votes=len(votes),
            confessions_today=_count(db, Confession.id, Confession.created_at >= start_of_day),
            confessions_this_week=len(recent),
            total_upvotes=distribution.get(VOTE_TYPE_UP, 0),
            total_downvotes=distribution.get(VOTE_TYPE_DOWN, 0),
            top_authors=top_authors(authors, self.top_limit),
            daily_stats=daily_counts(recent),
            vote_distribution=[
                NamedCount(name=vote_type, count=count)
                for vote_type, count in distribution.items()
            ],
        )


def get_analytics_service() -> AnalyticsService:
    """Return an analytics service using configured window sizes."""
    return AnalyticsService()
