"""Confession-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from confession_board.core.settings import settings
from confession_board.services.aggregation import VoteState

from .common import optional_text, require_text


class ConfessionCreate(BaseModel):
    """Schema for posting a new confession."""

    author_name: str | None = Field(
        None,
        max_length=settings.author_name_max_length,
        description="Pseudonym; a random placeholder is used when blank",
    )
    title: str = Field(..., min_length=1, max_length=settings.title_max_length)
    content: str = Field(..., min_length=1, max_length=settings.content_max_length)
    tags: list[str] = Field(default_factory=list, description="Free-text labels")

    @field_validator("title", "content")
    @classmethod
    def strip_required_text(cls, value: str) -> str:
        return require_text(value)

    @field_validator("author_name")
    @classmethod
    def strip_optional_text(cls, value: str | None) -> str | None:
        return optional_text(value)


class ConfessionResponse(BaseModel):
    """Public view of a confession with its counters."""

    id: str
    author_name: str
    title: str
    content: str
    tags: list[str] = Field(default_factory=list)
    slug: str | None = None
    created_at: datetime
    upvotes: int = 0
    downvotes: int = 0
    score: int = 0
    comment_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class ConfessionDetailResponse(ConfessionResponse):
    """Confession detail including the caller's own vote."""

    my_vote: VoteState = VoteState.NONE


class ConfessionFeedResponse(BaseModel):
    """A confession listing plus tag filter metadata."""

    items: list[ConfessionResponse]
    available_tags: list[str]
    selected_tags: list[str]


class AdminConfessionResponse(ConfessionResponse):
    """Moderator view of a confession including request metadata."""

    ip_address: str | None = None
    device_info: str | None = None


class SharePayload(BaseModel):
    """Data handed to a client's share sheet or clipboard."""

    title: str
    text: str
    url: str
