"""Vote-related Pydantic schemas."""

from pydantic import BaseModel, Field

from confession_board.services.aggregation import VoteKind, VoteState


class VoteCreate(BaseModel):
    """Schema for casting, switching or retracting a vote."""

    confession_id: str
    vote_type: VoteKind = Field(..., description="'upvote' or 'downvote'")


class VoteSummary(BaseModel):
    """Counters for one confession plus the caller's state."""

    confession_id: str
    upvotes: int
    downvotes: int
    score: int
    my_vote: VoteState


class IdentityResponse(BaseModel):
    """The identity the server will attribute votes and reports to."""

    identity: str
    authenticated: bool
