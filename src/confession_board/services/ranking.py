"""Trending order and tag filtering for confession lists."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from confession_board.services.aggregation import EMPTY_COUNTS, VoteCounts, VoteLike, count_votes
from confession_board.utils.text import slugify


class ConfessionLike(Protocol):
    """Minimal shape of a confession record."""

    id: str
    tags: list[str] | None


C = TypeVar("C", bound=ConfessionLike)


@dataclass(frozen=True)
class ScoredConfession(Generic[C]):
    """A confession paired with its vote counters."""

    confession: C
    counts: VoteCounts

    @property
    def score(self) -> int:
        return self.counts.score


def score_confessions(
    confessions: Iterable[C],
    votes_by_confession: Mapping[str, Iterable[VoteLike]],
) -> list[ScoredConfession[C]]:
    """Attach counts to each confession, keeping the input order."""
    scored: list[ScoredConfession[C]] = []
    for confession in confessions:
        votes = votes_by_confession.get(confession.id)
        counts = count_votes(votes) if votes is not None else EMPTY_COUNTS
        scored.append(ScoredConfession(confession=confession, counts=counts))
    return scored


def rank_scored(scored: Iterable[ScoredConfession[C]]) -> list[ScoredConfession[C]]:
    """Order scored confessions by score, highest first.

    `sorted` is stable, so equal scores keep their input order. Inputs are
    fetched newest first, which makes ties list the newest confession first.
    """
    return sorted(scored, key=lambda item: item.score, reverse=True)


def rank(
    confessions: Iterable[C],
    votes_by_confession: Mapping[str, Iterable[VoteLike]],
) -> list[C]:
    """Return `confessions` in trending order (net score, descending)."""
    return [
        item.confession
        for item in rank_scored(score_confessions(confessions, votes_by_confession))
    ]


def _tags_of(confession: ConfessionLike) -> list[str]:
    return list(confession.tags or [])


def filter_by_tags(confessions: Sequence[C], selected_tags: Iterable[str]) -> list[C]:
    """Keep confessions carrying at least one of `selected_tags`.

    An empty selection means no filtering; the input comes back unchanged.
    """
    selected = set(selected_tags)
    if not selected:
        return list(confessions)
    return [c for c in confessions if selected.intersection(_tags_of(c))]


def available_tags(confessions: Iterable[ConfessionLike]) -> list[str]:
    """Return every distinct tag across `confessions`, sorted."""
    tags: set[str] = set()
    for confession in confessions:
        tags.update(_tags_of(confession))
    return sorted(tags)


def normalize_tags(raw_tags: Iterable[str] | None, *, limit: int) -> list[str]:
    """Clean user-supplied tags.

    Tags are slugified, blanks and duplicates dropped, and at most `limit`
    kept in the order given.
    """
    cleaned: list[str] = []
    for raw in raw_tags or []:
        if len(cleaned) >= limit:
            break
        tag = slugify(raw, max_length=32)
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned
