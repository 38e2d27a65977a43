"""Vote counting over an already-loaded vote set.

Everything here is pure: callers fetch votes from the store and pass them
in, and the helpers only group and count. The functions accept any object
exposing `confession_id` and `vote_type`, so ORM rows and plain value
objects work alike.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, TypeVar

from confession_board.models.vote import VOTE_TYPE_DOWN, VOTE_TYPE_UP


class VoteKind(str, Enum):
    """A voter's stance on a confession, stored as `vote_type`."""

    UP = VOTE_TYPE_UP
    DOWN = VOTE_TYPE_DOWN


class VoteState(str, Enum):
    """A voter's current vote on one confession."""

    UP = "up"
    DOWN = "down"
    NONE = "none"

    @classmethod
    def from_kind(cls, kind: VoteKind | None) -> VoteState:
        if kind is None:
            return cls.NONE
        return cls.UP if kind is VoteKind.UP else cls.DOWN


class VoteLike(Protocol):
    """Minimal shape of a vote record."""

    confession_id: str
    vote_type: str


V = TypeVar("V", bound=VoteLike)


@dataclass(frozen=True)
class VoteCounts:
    """Derived counters for one confession."""

    upvotes: int = 0
    downvotes: int = 0

    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes

    @property
    def total(self) -> int:
        return self.upvotes + self.downvotes


EMPTY_COUNTS = VoteCounts()


def count_votes(votes: Iterable[VoteLike]) -> VoteCounts:
    """Count up and down votes in `votes` regardless of confession."""
    upvotes = downvotes = 0
    for vote in votes:
        if vote.vote_type == VOTE_TYPE_UP:
            upvotes += 1
        elif vote.vote_type == VOTE_TYPE_DOWN:
            downvotes += 1
    return VoteCounts(upvotes=upvotes, downvotes=downvotes)


def aggregate(votes: Iterable[VoteLike], confession_id: str) -> VoteCounts:
    """Count up and down votes cast on `confession_id`.

    Votes for other confessions are ignored, so the whole loaded vote set can
    be passed in.
    """
    return count_votes(vote for vote in votes if vote.confession_id == confession_id)


def group_votes(votes: Iterable[V]) -> dict[str, list[V]]:
    """Group votes by the confession they reference."""
    grouped: dict[str, list[V]] = defaultdict(list)
    for vote in votes:
        grouped[vote.confession_id].append(vote)
    return dict(grouped)


def aggregate_all(votes: Iterable[VoteLike]) -> dict[str, VoteCounts]:
    """Return counts for every confession that has at least one vote."""
    return {
        confession_id: count_votes(group)
        for confession_id, group in group_votes(votes).items()
    }


def vote_distribution(votes: Iterable[VoteLike]) -> dict[str, int]:
    """Return the number of votes per `vote_type`, in first-seen order."""
    return dict(Counter(vote.vote_type for vote in votes))
