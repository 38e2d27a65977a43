# tests/services/test_vote_service.py
"""Tests for the one-vote-per-voter state machine."""

from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from confession_board.db.time import utcnow
from confession_board.models import ConfessionVote
from confession_board.services.aggregation import VoteKind, VoteState
from confession_board.services.errors import (
    ConfessionNotFoundError,
    InvalidVoteKindError,
    StoreError,
)
from confession_board.services.identity import VoterIdentity
from confession_board.services.realtime import TABLE_VOTES, ChangeType
from confession_board.services.votes import VoteService, find_votes

VISITOR = VoterIdentity.anonymous("anon_ab12")
OTHER = VoterIdentity.anonymous("anon_zz99")


@pytest.fixture()
def service(change_feed) -> VoteService:
    return VoteService(change_feed)


def test_first_vote_creates_a_row(db_session, confession, service, recorded_events) -> None:
    outcome = service.apply_vote(db_session, confession.id, VISITOR, "upvote")

    assert outcome.state is VoteState.UP
    assert (outcome.upvotes, outcome.downvotes, outcome.score) == (1, 0, 1)
    rows = find_votes(db_session, confession.id, VISITOR)
    assert [row.vote_type for row in rows] == ["upvote"]
    assert recorded_events[-1].table == TABLE_VOTES
    assert recorded_events[-1].event is ChangeType.INSERT
    assert recorded_events[-1].confession_id == confession.id


def test_same_vote_again_retracts_it(db_session, confession, service, recorded_events) -> None:
    service.apply_vote(db_session, confession.id, VISITOR, VoteKind.UP)

    outcome = service.apply_vote(db_session, confession.id, VISITOR, VoteKind.UP)

    assert outcome.state is VoteState.NONE
    assert outcome.score == 0
    assert find_votes(db_session, confession.id, VISITOR) == []
    assert recorded_events[-1].event is ChangeType.DELETE


def test_opposite_vote_flips_in_place(db_session, confession, service, recorded_events) -> None:
    first = service.apply_vote(db_session, confession.id, VISITOR, "upvote")
    original_id = find_votes(db_session, confession.id, VISITOR)[0].id

    outcome = service.apply_vote(db_session, confession.id, VISITOR, "downvote")

    assert first.score == 1
    assert outcome.state is VoteState.DOWN
    assert (outcome.upvotes, outcome.downvotes, outcome.score) == (0, 1, -1)
    rows = find_votes(db_session, confession.id, VISITOR)
    assert len(rows) == 1
    assert rows[0].id == original_id
    assert recorded_events[-1].event is ChangeType.UPDATE


def test_each_voter_keeps_their_own_vote(db_session, confession, service) -> None:
    service.apply_vote(db_session, confession.id, VISITOR, "upvote")
    outcome = service.apply_vote(db_session, confession.id, OTHER, "upvote")

    assert outcome.upvotes == 2
    assert service.current_state(db_session, confession.id, VISITOR) is VoteState.UP
    assert service.current_state(db_session, confession.id, OTHER) is VoteState.UP


def test_authenticated_and_anonymous_votes_are_separate(
    db_session, confession, service, regular_account
) -> None:
    member = VoterIdentity.for_user(regular_account.id)

    service.apply_vote(db_session, confession.id, member, "downvote")
    service.apply_vote(db_session, confession.id, VISITOR, "upvote")

    counts = service.counts(db_session, confession.id)
    assert (counts.upvotes, counts.downvotes) == (1, 1)
    assert service.current_state(db_session, confession.id, member) is VoteState.DOWN


def test_visitor_scenario_end_to_end(db_session, confession, service) -> None:
    """Up, up again, down, then up: counts follow the single active vote."""
    states = []
    scores = []
    for kind in ("upvote", "upvote", "downvote", "upvote"):
        outcome = service.apply_vote(db_session, confession.id, VISITOR, kind)
        states.append(outcome.state)
        scores.append(outcome.score)

    assert states == [VoteState.UP, VoteState.NONE, VoteState.DOWN, VoteState.UP]
    assert scores == [1, 0, -1, 1]
    assert db_session.query(ConfessionVote).count() == 1


def test_duplicate_rows_collapse_to_one(db_session, confession, service, add_vote) -> None:
    """Legacy duplicates are removed; the oldest row decides the current vote."""
    earlier = utcnow() - timedelta(minutes=5)
    add_vote(confession.id, "upvote", identifier=VISITOR.anonymous_id, created_at=earlier)
    add_vote(confession.id, "upvote", identifier=VISITOR.anonymous_id)

    outcome = service.apply_vote(db_session, confession.id, VISITOR, "downvote")

    assert outcome.state is VoteState.DOWN
    assert (outcome.upvotes, outcome.downvotes) == (0, 1)
    assert len(find_votes(db_session, confession.id, VISITOR)) == 1


def test_unknown_confession_is_rejected(db_session, service) -> None:
    with pytest.raises(ConfessionNotFoundError):
        service.apply_vote(db_session, "missing", VISITOR, "upvote")


def test_invalid_vote_kind_is_rejected(db_session, confession, service) -> None:
    with pytest.raises(InvalidVoteKindError):
        service.apply_vote(db_session, confession.id, VISITOR, "sideways")
    assert find_votes(db_session, confession.id, VISITOR) == []


def test_store_failure_rolls_back(db_session, confession, service, monkeypatch) -> None:
    def broken_commit() -> None:
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(db_session, "commit", broken_commit)

    with pytest.raises(StoreError):
        service.apply_vote(db_session, confession.id, VISITOR, "upvote")

    assert find_votes(db_session, confession.id, VISITOR) == []


def test_current_state_defaults_to_none(db_session, confession, service) -> None:
    assert service.current_state(db_session, confession.id, VISITOR) is VoteState.NONE


def test_up_down_down_ends_with_no_vote(db_session, confession, service) -> None:
    """Upvote, switch to downvote, then take the downvote back."""
    outcomes = [
        service.apply_vote(db_session, confession.id, VISITOR, kind)
        for kind in ("upvote", "downvote", "downvote")
    ]

    assert [(o.upvotes, o.downvotes, o.state) for o in outcomes] == [
        (1, 0, VoteState.UP),
        (0, 1, VoteState.DOWN),
        (0, 0, VoteState.NONE),
    ]
    assert find_votes(db_session, confession.id, VISITOR) == []
