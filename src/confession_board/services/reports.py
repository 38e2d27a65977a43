"""Abuse reports: filing by visitors, review and dismissal by moderators."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from confession_board.models import ConfessionReport
from confession_board.services.confessions import get_confession
from confession_board.services.errors import ReportNotFoundError, StoreError
from confession_board.services.realtime import (
    TABLE_REPORTS,
    ChangeEvent,
    ChangeFeed,
    ChangeType,
    get_change_feed,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportView:
    """A report joined with the title and author of what it reports."""

    report: ConfessionReport
    confession_title: str | None
    confession_author: str | None


class ReportService:
    """File, list and dismiss reports."""

    def __init__(self, change_feed: ChangeFeed | None = None) -> None:
        self.change_feed = change_feed or get_change_feed()

    def file(
        self,
        db: Session,
        confession_id: str,
        *,
        reason: str,
        reporter_identifier: str | None,
        ip_address: str | None = None,
        device_info: str | None = None,
    ) -> ConfessionReport:
        """Record a report against an existing confession.

        Raises:
            ValueError: If `reason` is blank
            ConfessionNotFoundError: If the confession does not exist
            StoreError: If the write fails
        """
        cleaned = reason.strip()
        if not cleaned:
            raise ValueError("Please provide a reason for reporting")
        get_confession(db, confession_id)

        report = ConfessionReport(
            confession_id=confession_id,
            reason=cleaned,
            reporter_identifier=reporter_identifier,
            ip_address=ip_address,
            device_info=device_info,
        )
        try:
            db.add(report)
            db.commit()
            db.refresh(report)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.warning("Could not store report on %s: %s", confession_id, exc)
            raise StoreError("Could not store report") from exc

        logger.info("Report %s filed against confession %s", report.id, confession_id)
        self.change_feed.publish(
            ChangeEvent(TABLE_REPORTS, ChangeType.INSERT, report.id, confession_id)
        )
        return report

    def list_all(self, db: Session) -> list[ReportView]:
        """Return every report, newest first, with confession details."""
        reports = (
            db.query(ConfessionReport)
            .options(joinedload(ConfessionReport.confession))
            .order_by(desc(ConfessionReport.created_at), desc(ConfessionReport.id))
            .all()
        )
        return [
            ReportView(
                report=report,
                confession_title=report.confession.title if report.confession else None,
                confession_author=report.confession.author_name if report.confession else None,
            )
            for report in reports
        ]

    def dismiss(self, db: Session, report_id: str) -> None:
        """Delete a report without touching the confession.

        Raises:
            ReportNotFoundError: If no such report exists
        """
        report = db.get(ConfessionReport, report_id)
        if report is None:
            raise ReportNotFoundError(report_id)
        confession_id = report.confession_id
        try:
            db.delete(report)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.warning("Could not dismiss report %s: %s", report_id, exc)
            raise StoreError("Could not dismiss report") from exc

        logger.info("Report %s dismissed", report_id)
        self.change_feed.publish(
            ChangeEvent(TABLE_REPORTS, ChangeType.DELETE, report_id, confession_id)
        )


def get_report_service() -> ReportService:
    """Return a report service bound to the shared change feed."""
    return ReportService()
