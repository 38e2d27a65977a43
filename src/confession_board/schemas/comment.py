"""Comment-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from confession_board.core.settings import settings

from .common import optional_text, require_text


class CommentCreate(BaseModel):
    """Schema for adding a comment."""

    author_name: str | None = Field(None, max_length=settings.author_name_max_length)
    content: str = Field(..., min_length=1, max_length=settings.comment_max_length)

    @field_validator("content")
    @classmethod
    def strip_required_text(cls, value: str) -> str:
        return require_text(value)

    @field_validator("author_name")
    @classmethod
    def strip_optional_text(cls, value: str | None) -> str | None:
        return optional_text(value)


class CommentResponse(BaseModel):
    """Public view of a comment."""

    id: str
    confession_id: str
    author_name: str
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
