"""Vote state resolution.

Each voter holds at most one vote per confession. Clicking the same kind
again retracts the vote, clicking the other kind flips it in place, and a
first click creates it. The store has no unique constraint on the voter
columns, so the check happens here (read, then write, in one transaction).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from confession_board.models import ConfessionVote
from confession_board.services.aggregation import (
    VoteCounts,
    VoteKind,
    VoteState,
    aggregate,
)
from confession_board.services.confessions import get_confession
from confession_board.services.errors import InvalidVoteKindError, StoreError
from confession_board.services.identity import VoterIdentity
from confession_board.services.realtime import (
    TABLE_VOTES,
    ChangeEvent,
    ChangeFeed,
    ChangeType,
    get_change_feed,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoteOutcome:
    """Result of a vote action: the caller's new state plus fresh counters."""

    confession_id: str
    state: VoteState
    counts: VoteCounts

    @property
    def upvotes(self) -> int:
        return self.counts.upvotes

    @property
    def downvotes(self) -> int:
        return self.counts.downvotes

    @property
    def score(self) -> int:
        return self.counts.score


def _voter_filter(identity: VoterIdentity):  # noqa: ANN202 - SQLAlchemy expression
    if identity.user_id is not None:
        return ConfessionVote.user_id == identity.user_id
    return ConfessionVote.vote_identifier == identity.anonymous_id


def find_votes(db: Session, confession_id: str, identity: VoterIdentity) -> list[ConfessionVote]:
    """Return the identity's votes on a confession, oldest first.

    Normally zero or one row; more only if earlier writes raced.
    """
    return (
        db.query(ConfessionVote)
        .filter(ConfessionVote.confession_id == confession_id, _voter_filter(identity))
        .order_by(ConfessionVote.created_at, ConfessionVote.id)
        .all()
    )


def load_votes(db: Session, confession_id: str | None = None) -> list[ConfessionVote]:
    """Fetch the raw vote set, optionally for a single confession."""
    query = db.query(ConfessionVote)
    if confession_id is not None:
        query = query.filter(ConfessionVote.confession_id == confession_id)
    return query.all()


class VoteService:
    """Apply and inspect votes while keeping one vote per voter."""

    def __init__(self, change_feed: ChangeFeed | None = None) -> None:
        self.change_feed = change_feed or get_change_feed()

    def counts(self, db: Session, confession_id: str) -> VoteCounts:
        """Recompute counters for one confession from its stored votes."""
        return aggregate(load_votes(db, confession_id), confession_id)

    def current_state(self, db: Session, confession_id: str, identity: VoterIdentity) -> VoteState:
        """Return the identity's vote on a confession."""
        votes = find_votes(db, confession_id, identity)
        if not votes:
            return VoteState.NONE
        return VoteState.from_kind(VoteKind(votes[0].vote_type))

    def apply_vote(
        self,
        db: Session,
        confession_id: str,
        identity: VoterIdentity,
        requested_kind: VoteKind | str,
    ) -> VoteOutcome:
        """Toggle, flip or create the identity's vote on a confession.

        Args:
            db: Database session
            confession_id: Confession being voted on
            identity: Voter performing the action
            requested_kind: `upvote` or `downvote`

        Returns:
            The voter's new state and recomputed counters

        Raises:
            InvalidVoteKindError: If `requested_kind` is not a vote kind
            ConfessionNotFoundError: If the confession does not exist
            StoreError: If the write fails; nothing is committed
        """
        try:
            kind = VoteKind(requested_kind)
        except ValueError as exc:
            raise InvalidVoteKindError(requested_kind) from exc
        get_confession(db, confession_id)

        try:
            existing = find_votes(db, confession_id, identity)
            current = existing[0] if existing else None
            for duplicate in existing[1:]:
                db.delete(duplicate)

            if current is not None and current.vote_type == kind.value:
                db.delete(current)
                new_state = VoteState.NONE
                change = ChangeEvent(TABLE_VOTES, ChangeType.DELETE, current.id, confession_id)
            elif current is not None:
                current.vote_type = kind.value
                new_state = VoteState.from_kind(kind)
                change = ChangeEvent(TABLE_VOTES, ChangeType.UPDATE, current.id, confession_id)
            else:
                vote = ConfessionVote(
                    confession_id=confession_id,
                    user_id=identity.user_id,
                    vote_identifier=identity.anonymous_id,
                    vote_type=kind.value,
                )
                db.add(vote)
                db.flush()
                new_state = VoteState.from_kind(kind)
                change = ChangeEvent(TABLE_VOTES, ChangeType.INSERT, vote.id, confession_id)

            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.warning("Vote on %s failed: %s", confession_id, exc)
            raise StoreError("Could not record vote") from exc

        logger.debug(
            "Vote by %s on %s is now %s",
            identity.key,
            confession_id,
            new_state.value,
        )
        counts = self.counts(db, confession_id)
        self.change_feed.publish(change)
        return VoteOutcome(confession_id=confession_id, state=new_state, counts=counts)


def get_vote_service() -> VoteService:
    """Return a vote service bound to the shared change feed."""
    return VoteService()
