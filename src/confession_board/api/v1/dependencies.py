"""Shared API dependencies for authentication and common functionality."""

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from confession_board.core.security import TokenError, decode_access_token
from confession_board.db.session import get_db
from confession_board.models import Account
from confession_board.services.accounts import get_account, is_admin
from confession_board.services.analytics import AnalyticsService, get_analytics_service
from confession_board.services.comments import CommentService, get_comment_service
from confession_board.services.confessions import ConfessionService, get_confession_service
from confession_board.services.device_info import describe_user_agent
from confession_board.services.identity import (
    AnonymousIdentityResolver,
    CookieIdentityStorage,
    VoterIdentity,
)
from confession_board.services.realtime import ChangeFeed, get_change_feed
from confession_board.services.reports import ReportService, get_report_service
from confession_board.services.votes import VoteService, get_vote_service

logger = logging.getLogger(__name__)

# HTTP Bearer scheme for JWT authentication; optional so anonymous callers pass through
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
BearerDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def _unauthorized(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_optional_user(credentials: BearerDep, db: SessionDep) -> Account | None:
    """Return the signed-in account, or None for anonymous callers.

    A token that is present but invalid is still rejected.
    """
    if credentials is None:
        return None
    try:
        account_id = decode_access_token(credentials.credentials)
    except TokenError as err:
        raise _unauthorized() from err

    account = get_account(db, account_id)
    if account is None:
        raise _unauthorized("User not found")
    return account


OptionalUserDep = Annotated[Account | None, Depends(get_optional_user)]


def get_current_user(account: OptionalUserDep) -> Account:
    """Get the current authenticated account from the bearer token.

    Raises:
        HTTPException: If no token was sent or it is invalid
    """
    if account is None:
        raise _unauthorized("Not authenticated")
    return account


CurrentUserDep = Annotated[Account, Depends(get_current_user)]


def get_current_admin(account: CurrentUserDep, db: SessionDep) -> Account:
    """Require an account holding the admin role.

    Raises:
        HTTPException: 403 if the account is not an admin
    """
    if not is_admin(db, account.id):
        logger.warning("Account %s denied admin access", account.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have admin privileges",
        )
    return account


CurrentAdminDep = Annotated[Account, Depends(get_current_admin)]


def get_voter_identity(
    request: Request,
    response: Response,
    account: OptionalUserDep,
) -> VoterIdentity:
    """Resolve who is voting or reporting.

    Signed-in callers are identified by account; everyone else by the
    anonymous token from their cookie or header, minted on first use.
    """
    if account is not None:
        return VoterIdentity.for_user(account.id)
    resolver = AnonymousIdentityResolver(CookieIdentityStorage(request, response))
    return VoterIdentity.anonymous(resolver.get_or_create_identity())


VoterIdentityDep = Annotated[VoterIdentity, Depends(get_voter_identity)]


@dataclass(frozen=True)
class ClientInfo:
    """Request metadata stored alongside user content."""

    ip_address: str | None
    device_info: str


def get_client_info(request: Request) -> ClientInfo:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        ip_address: str | None = forwarded.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None
    return ClientInfo(
        ip_address=ip_address,
        device_info=describe_user_agent(request.headers.get("User-Agent")),
    )


ClientInfoDep = Annotated[ClientInfo, Depends(get_client_info)]


def get_vote_service_dep() -> VoteService:
    """Return the shared vote service."""
    return get_vote_service()


def get_confession_service_dep() -> ConfessionService:
    """Return the shared confession service."""
    return get_confession_service()


def get_comment_service_dep() -> CommentService:
    return get_comment_service()


def get_report_service_dep() -> ReportService:
    return get_report_service()


def get_analytics_service_dep() -> AnalyticsService:
    return get_analytics_service()


def get_change_feed_dep() -> ChangeFeed:
    return get_change_feed()


VoteServiceDep = Annotated[VoteService, Depends(get_vote_service_dep)]
ConfessionServiceDep = Annotated[ConfessionService, Depends(get_confession_service_dep)]
CommentServiceDep = Annotated[CommentService, Depends(get_comment_service_dep)]
ReportServiceDep = Annotated[ReportService, Depends(get_report_service_dep)]
AnalyticsServiceDep = Annotated[AnalyticsService, Depends(get_analytics_service_dep)]
ChangeFeedDep = Annotated[ChangeFeed, Depends(get_change_feed_dep)]
