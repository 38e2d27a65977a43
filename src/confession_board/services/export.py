"""CSV exports for moderators."""

from __future__ import annotations

import csv
import io
import time
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime

from confession_board.db.time import as_utc
from confession_board.models import Confession
from confession_board.services.analytics import AnalyticsSnapshot
from confession_board.services.reports import ReportView

MISSING = "N/A"

CONFESSION_COLUMNS = (
    "ID",
    "Author",
    "Title",
    "Content",
    "Tags",
    "Created At",
    "IP Address",
    "Device Info",
)
REPORT_COLUMNS = (
    "Report ID",
    "Confession ID",
    "Confession Title",
    "Reason",
    "Reported At",
    "IP Address",
    "Device Info",
)
ANALYTICS_COLUMNS = ("Metric", "Value")


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return MISSING
    return as_utc(value).strftime("%Y-%m-%d %H:%M:%S UTC")


def format_confessions(confessions: Iterable[Confession]) -> list[dict[str, str]]:
    return [
        {
            "ID": c.id,
            "Author": c.author_name,
            "Title": c.title,
            "Content": c.content,
            "Tags": ", ".join(c.tags or []),
            "Created At": format_timestamp(c.created_at),
            "IP Address": c.ip_address or MISSING,
            "Device Info": c.device_info or MISSING,
        }
        for c in confessions
    ]


def format_reports(reports: Iterable[ReportView]) -> list[dict[str, str]]:
    return [
        {
            "Report ID": view.report.id,
            "Confession ID": view.report.confession_id,
            "Confession Title": view.confession_title or MISSING,
            "Reason": view.report.reason,
            "Reported At": format_timestamp(view.report.created_at),
            "IP Address": view.report.ip_address or MISSING,
            "Device Info": view.report.device_info or MISSING,
        }
        for view in reports
    ]


def format_analytics(snapshot: AnalyticsSnapshot) -> list[dict[str, object]]:
    return [
        {"Metric": "Total Confessions", "Value": snapshot.total_confessions},
        {"Metric": "Confessions This Week", "Value": snapshot.confessions_this_week},
        {"Metric": "Confessions Today", "Value": snapshot.confessions_today},
        {"Metric": "Total Upvotes", "Value": snapshot.total_upvotes},
        {"Metric": "Total Downvotes", "Value": snapshot.total_downvotes},
    ]


def to_csv(rows: Iterable[Mapping[str, object]], columns: Sequence[str]) -> str:
    """Serialize `rows` with a header line, quoting only where needed."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(columns), lineterminator="\r\n")
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue()


def export_filename(kind: str, now_ms: int | None = None) -> str:
    """Download name such as `confessions-1760720000000.csv`."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{kind}-{stamp}.csv"
