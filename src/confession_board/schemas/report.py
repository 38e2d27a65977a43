"""Report-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from confession_board.core.settings import settings

from .common import require_text


class ReportCreate(BaseModel):
    """Schema for reporting a confession."""

    reason: str = Field(..., min_length=1, max_length=settings.report_reason_max_length)

    @field_validator("reason")
    @classmethod
    def strip_required_text(cls, value: str) -> str:
        return require_text(value)


class ReportReceipt(BaseModel):
    """Acknowledgement returned to the reporter."""

    id: str
    confession_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AdminReportResponse(BaseModel):
    """Moderator view of a report."""

    id: str
    confession_id: str
    confession_title: str | None = None
    confession_author: str | None = None
    reason: str
    reporter_identifier: str | None = None
    ip_address: str | None = None
    device_info: str | None = None
    created_at: datetime
