"""Admin dashboard Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class BulkDeleteRequest(BaseModel):
    """Confession ids selected for deletion."""

    ids: list[str] = Field(..., min_length=1)


class BulkDeleteResponse(BaseModel):
    deleted: int


class NamedCountResponse(BaseModel):
    name: str
    count: int

    model_config = ConfigDict(from_attributes=True)


class AnalyticsResponse(BaseModel):
    """Dashboard statistics."""

    total_confessions: int
    total_comments: int
    total_votes: int
    confessions_today: int
    confessions_this_week: int
    total_upvotes: int
    total_downvotes: int
    top_authors: list[NamedCountResponse]
    daily_stats: list[NamedCountResponse]
    vote_distribution: list[NamedCountResponse]

    model_config = ConfigDict(from_attributes=True)
