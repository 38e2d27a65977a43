"""Exceptions raised by the service layer.

Endpoints translate these into HTTP responses; services never raise
`HTTPException` themselves.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for service-layer failures."""


class ConfessionNotFoundError(ServiceError, LookupError):
    """Raised when a confession id or slug has no matching record."""

    def __init__(self, confession_ref: str) -> None:
        super().__init__(f"Confession not found: {confession_ref}")
        self.confession_ref = confession_ref


class ReportNotFoundError(ServiceError, LookupError):
    """Raised when a report id has no matching record."""

    def __init__(self, report_id: str) -> None:
        super().__init__(f"Report not found: {report_id}")
        self.report_id = report_id


class StoreError(ServiceError, RuntimeError):
    """Raised when a database read or write fails.

    The session has already been rolled back when this is raised.
    """


class AuthenticationError(ServiceError):
    """Raised when credentials do not match an account."""


class InvalidVoteKindError(ServiceError, ValueError):
    """Raised when a vote kind is neither `upvote` nor `downvote`."""

    def __init__(self, vote_kind: object) -> None:
        super().__init__(f"Invalid vote type: {vote_kind!r}")
        self.vote_kind = vote_kind
