"""Vote-related endpoints for the Confession Board API."""

from fastapi import APIRouter, HTTPException, status

from confession_board.api.v1.dependencies import (
    SessionDep,
    VoterIdentityDep,
    VoteServiceDep,
)
from confession_board.schemas.vote import IdentityResponse, VoteCreate, VoteSummary
from confession_board.services.confessions import get_confession
from confession_board.services.errors import ConfessionNotFoundError

router = APIRouter(prefix="/votes", tags=["votes"])


@router.get("/identity", response_model=IdentityResponse)
async def get_identity(identity: VoterIdentityDep) -> IdentityResponse:
    """Return the identity votes are attributed to, minting one if needed."""
    return IdentityResponse(identity=identity.key, authenticated=identity.is_authenticated)


@router.post("/", response_model=VoteSummary)
async def cast_vote(
    vote_data: VoteCreate,
    db: SessionDep,
    vote_service: VoteServiceDep,
    identity: VoterIdentityDep,
) -> VoteSummary:
    """Cast, switch or retract a vote.

    Repeating the current vote removes it; the opposite vote replaces it.
    """
    try:
        outcome = vote_service.apply_vote(
            db, vote_data.confession_id, identity, vote_data.vote_type
        )
    except ConfessionNotFoundError as err:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Confession not found",
        ) from err

    return VoteSummary(
        confession_id=outcome.confession_id,
        upvotes=outcome.upvotes,
        downvotes=outcome.downvotes,
        score=outcome.score,
        my_vote=outcome.state,
    )


@router.get("/{confession_id}", response_model=VoteSummary)
async def get_votes(
    confession_id: str,
    db: SessionDep,
    vote_service: VoteServiceDep,
    identity: VoterIdentityDep,
) -> VoteSummary:
    """Return a confession's counters and the caller's current vote."""
    try:
        get_confession(db, confession_id)
    except ConfessionNotFoundError as err:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Confession not found",
        ) from err

    counts = vote_service.counts(db, confession_id)
    return VoteSummary(
        confession_id=confession_id,
        upvotes=counts.upvotes,
        downvotes=counts.downvotes,
        score=counts.score,
        my_vote=vote_service.current_state(db, confession_id, identity),
    )
