"""System endpoints for the Confession Board API."""

from __future__ import annotations

from fastapi import APIRouter

from confession_board.core.settings import settings
from confession_board.services.aggregation import VoteKind
from confession_board.services.realtime import KNOWN_TABLES

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings; clients use the limits to
    validate forms before submitting.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "public_base_url": settings.public_base_url,
            "debug": settings.debug,
        },
        "limits": {
            "author_name_max_length": settings.author_name_max_length,
            "title_max_length": settings.title_max_length,
            "content_max_length": settings.content_max_length,
            "comment_max_length": settings.comment_max_length,
            "report_reason_max_length": settings.report_reason_max_length,
            "max_tags": settings.max_tags,
        },
        "votes": {
            "types": [kind.value for kind in VoteKind],
            "identity_cookie": settings.identity_cookie_name,
            "identity_header": settings.identity_header_name,
        },
        "realtime": {
            "tables": sorted(KNOWN_TABLES),
        },
    }
