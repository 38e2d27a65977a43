"""Confession, comment and report endpoints for the Confession Board API."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from confession_board.api.v1.dependencies import (
    ClientInfoDep,
    CommentServiceDep,
    ConfessionServiceDep,
    OptionalUserDep,
    ReportServiceDep,
    SessionDep,
    VoteServiceDep,
    VoterIdentityDep,
)
from confession_board.core.settings import settings
from confession_board.models import Confession
from confession_board.schemas.comment import CommentCreate, CommentResponse
from confession_board.schemas.confession import (
    ConfessionCreate,
    ConfessionDetailResponse,
    ConfessionFeedResponse,
    ConfessionResponse,
    SharePayload,
)
from confession_board.schemas.report import ReportCreate, ReportReceipt
from confession_board.services.aggregation import VoteCounts
from confession_board.services.confessions import Feed, get_confession_by_ref
from confession_board.services.confessions import list_confessions as load_confessions
from confession_board.services.errors import ConfessionNotFoundError
from confession_board.services.ranking import available_tags

router = APIRouter(prefix="/confessions", tags=["confessions"])

TagsQuery = Annotated[
    list[str] | None,
    Query(description="Only return confessions carrying at least one of these tags"),
]


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Confession not found")


def _confession_response(
    confession: Confession,
    counts: VoteCounts,
    comment_count: int = 0,
) -> ConfessionResponse:
    return ConfessionResponse(
        id=confession.id,
        author_name=confession.author_name,
        title=confession.title,
        content=confession.content,
        tags=list(confession.tags or []),
        slug=confession.slug,
        created_at=confession.created_at,
        upvotes=counts.upvotes,
        downvotes=counts.downvotes,
        score=counts.score,
        comment_count=comment_count,
    )


def _feed_response(feed: Feed) -> ConfessionFeedResponse:
    return ConfessionFeedResponse(
        items=[
            _confession_response(
                item.confession,
                item.counts,
                feed.comment_counts.get(item.confession.id, 0),
            )
            for item in feed.items
        ],
        available_tags=feed.available_tags,
        selected_tags=feed.selected_tags,
    )


@router.post("/", response_model=ConfessionResponse, status_code=status.HTTP_201_CREATED)
async def create_confession(
    payload: ConfessionCreate,
    db: SessionDep,
    confession_service: ConfessionServiceDep,
    client: ClientInfoDep,
    account: OptionalUserDep,
) -> ConfessionResponse:
    """Post a confession. No sign-in is required."""
    confession = confession_service.create(
        db,
        title=payload.title,
        content=payload.content,
        author_name=payload.author_name,
        tags=payload.tags,
        user_id=account.id if account else None,
        ip_address=client.ip_address,
        device_info=client.device_info,
    )
    return _confession_response(confession, VoteCounts())


@router.get("/", response_model=ConfessionFeedResponse)
async def list_confessions(
    db: SessionDep,
    confession_service: ConfessionServiceDep,
    tags: TagsQuery = None,
) -> ConfessionFeedResponse:
    """List confessions newest first, optionally filtered by tag."""
    return _feed_response(confession_service.feed(db, selected_tags=tags or []))


@router.get("/trending", response_model=ConfessionFeedResponse)
async def list_trending(
    db: SessionDep,
    confession_service: ConfessionServiceDep,
    tags: TagsQuery = None,
) -> ConfessionFeedResponse:
    """List confessions by net score; equal scores stay newest first."""
    return _feed_response(confession_service.feed(db, selected_tags=tags or [], trending=True))


@router.get("/tags", response_model=list[str])
async def list_tags(db: SessionDep) -> list[str]:
    """Return every tag in use, sorted."""
    return available_tags(load_confessions(db))


@router.get("/{confession_ref}", response_model=ConfessionDetailResponse)
async def get_confession(
    confession_ref: str,
    db: SessionDep,
    vote_service: VoteServiceDep,
    identity: VoterIdentityDep,
) -> ConfessionDetailResponse:
    """Get a confession by id or slug, with the caller's vote."""
    try:
        confession = get_confession_by_ref(db, confession_ref)
    except ConfessionNotFoundError as err:
        raise _not_found() from err

    counts = vote_service.counts(db, confession.id)
    base = _confession_response(confession, counts, len(confession.comments))
    return ConfessionDetailResponse(
        **base.model_dump(),
        my_vote=vote_service.current_state(db, confession.id, identity),
    )


@router.get("/{confession_ref}/share", response_model=SharePayload)
async def share_confession(confession_ref: str, db: SessionDep) -> SharePayload:
    """Build the text a client shares or copies to the clipboard."""
    try:
        confession = get_confession_by_ref(db, confession_ref)
    except ConfessionNotFoundError as err:
        raise _not_found() from err

    url = f"{settings.public_base_url.rstrip('/')}/confession/{confession.slug or confession.id}"
    return SharePayload(
        title=confession.title,
        text=f"{confession.title}\n\n{confession.content}",
        url=url,
    )


@router.get("/{confession_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    confession_id: str,
    db: SessionDep,
    comment_service: CommentServiceDep,
) -> list[CommentResponse]:
    """List a confession's comments, newest first."""
    try:
        comments = comment_service.list_for(db, confession_id)
    except ConfessionNotFoundError as err:
        raise _not_found() from err
    return [CommentResponse.model_validate(comment) for comment in comments]


@router.post(
    "/{confession_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    confession_id: str,
    payload: CommentCreate,
    db: SessionDep,
    comment_service: CommentServiceDep,
    client: ClientInfoDep,
    account: OptionalUserDep,
) -> CommentResponse:
    """Comment on a confession under a pseudonym."""
    try:
        comment = comment_service.add(
            db,
            confession_id,
            content=payload.content,
            author_name=payload.author_name,
            user_id=account.id if account else None,
            ip_address=client.ip_address,
            device_info=client.device_info,
        )
    except ConfessionNotFoundError as err:
        raise _not_found() from err
    return CommentResponse.model_validate(comment)


@router.post(
    "/{confession_id}/reports",
    response_model=ReportReceipt,
    status_code=status.HTTP_201_CREATED,
)
async def report_confession(
    confession_id: str,
    payload: ReportCreate,
    db: SessionDep,
    report_service: ReportServiceDep,
    identity: VoterIdentityDep,
    client: ClientInfoDep,
) -> ReportReceipt:
    """Report a confession to the moderators."""
    try:
        report = report_service.file(
            db,
            confession_id,
            reason=payload.reason,
            reporter_identifier=identity.key,
            ip_address=client.ip_address,
            device_info=client.device_info,
        )
    except ConfessionNotFoundError as err:
        raise _not_found() from err
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(err),
        ) from err
    return ReportReceipt.model_validate(report)
