"""Moderator endpoints: confession removal, report review, analytics and exports.

Every route requires a bearer token for an account holding the admin role.
"""

from __future__ import annotations

from enum import Enum

from fastapi import APIRouter, HTTPException, Response, status

from confession_board.api.v1.dependencies import (
    AnalyticsServiceDep,
    ConfessionServiceDep,
    CurrentAdminDep,
    ReportServiceDep,
    SessionDep,
)
from confession_board.schemas.admin import (
    AnalyticsResponse,
    BulkDeleteRequest,
    BulkDeleteResponse,
)
from confession_board.schemas.confession import AdminConfessionResponse
from confession_board.schemas.report import AdminReportResponse
from confession_board.services.aggregation import group_votes
from confession_board.services.confessions import comment_counts, list_confessions
from confession_board.services.errors import ConfessionNotFoundError, ReportNotFoundError
from confession_board.services.export import (
    ANALYTICS_COLUMNS,
    CONFESSION_COLUMNS,
    REPORT_COLUMNS,
    export_filename,
    format_analytics,
    format_confessions,
    format_reports,
    to_csv,
)
from confession_board.services.ranking import score_confessions
from confession_board.services.reports import ReportView
from confession_board.services.votes import load_votes

router = APIRouter(prefix="/admin", tags=["admin"])


class ExportKind(str, Enum):
    CONFESSIONS = "confessions"
    REPORTS = "reports"
    ANALYTICS = "analytics"


def _report_response(view: ReportView) -> AdminReportResponse:
    report = view.report
    return AdminReportResponse(
        id=report.id,
        confession_id=report.confession_id,
        confession_title=view.confession_title,
        confession_author=view.confession_author,
        reason=report.reason,
        reporter_identifier=report.reporter_identifier,
        ip_address=report.ip_address,
        device_info=report.device_info,
        created_at=report.created_at,
    )


@router.get("/confessions", response_model=list[AdminConfessionResponse])
async def list_all_confessions(
    db: SessionDep,
    _admin: CurrentAdminDep,
) -> list[AdminConfessionResponse]:
    """List every confession newest first, including request metadata."""
    confessions = list_confessions(db)
    comments = comment_counts(db)
    scored = score_confessions(confessions, group_votes(load_votes(db)))
    return [
        AdminConfessionResponse(
            id=item.confession.id,
            author_name=item.confession.author_name,
            title=item.confession.title,
            content=item.confession.content,
            tags=list(item.confession.tags or []),
            slug=item.confession.slug,
            created_at=item.confession.created_at,
            upvotes=item.counts.upvotes,
            downvotes=item.counts.downvotes,
            score=item.score,
            comment_count=comments.get(item.confession.id, 0),
            ip_address=item.confession.ip_address,
            device_info=item.confession.device_info,
        )
        for item in scored
    ]


@router.delete("/confessions/{confession_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_confession(
    confession_id: str,
    db: SessionDep,
    confession_service: ConfessionServiceDep,
    _admin: CurrentAdminDep,
) -> Response:
    """Delete a confession along with its votes, comments and reports."""
    try:
        confession_service.delete(db, confession_id)
    except ConfessionNotFoundError as err:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Confession not found",
        ) from err
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/confessions/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete_confessions(
    payload: BulkDeleteRequest,
    db: SessionDep,
    confession_service: ConfessionServiceDep,
    _admin: CurrentAdminDep,
) -> BulkDeleteResponse:
    """Delete several confessions at once; unknown ids are ignored."""
    deleted = confession_service.delete_many(db, payload.ids)
    return BulkDeleteResponse(deleted=deleted)


@router.get("/reports", response_model=list[AdminReportResponse])
async def list_reports(
    db: SessionDep,
    report_service: ReportServiceDep,
    _admin: CurrentAdminDep,
) -> list[AdminReportResponse]:
    """List reports newest first with the reported confession's title and author."""
    return [_report_response(view) for view in report_service.list_all(db)]


@router.delete("/reports/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
async def dismiss_report(
    report_id: str,
    db: SessionDep,
    report_service: ReportServiceDep,
    _admin: CurrentAdminDep,
) -> Response:
    """Dismiss a report, leaving the confession in place."""
    try:
        report_service.dismiss(db, report_id)
    except ReportNotFoundError as err:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Report not found",
        ) from err
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    db: SessionDep,
    analytics_service: AnalyticsServiceDep,
    _admin: CurrentAdminDep,
) -> AnalyticsResponse:
    """Dashboard statistics."""
    return AnalyticsResponse.model_validate(analytics_service.snapshot(db))


@router.get("/export/{kind}")
async def export_csv(
    kind: ExportKind,
    db: SessionDep,
    report_service: ReportServiceDep,
    analytics_service: AnalyticsServiceDep,
    _admin: CurrentAdminDep,
) -> Response:
    """Download confessions, reports or analytics as CSV."""
    if kind is ExportKind.CONFESSIONS:
        body = to_csv(format_confessions(list_confessions(db)), CONFESSION_COLUMNS)
    elif kind is ExportKind.REPORTS:
        body = to_csv(format_reports(report_service.list_all(db)), REPORT_COLUMNS)
    else:
        body = to_csv(format_analytics(analytics_service.snapshot(db)), ANALYTICS_COLUMNS)

    filename = export_filename(kind.value)
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
