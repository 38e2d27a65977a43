"""Version 1 API endpoints."""

from .endpoints import (
    admin_router,
    auth_router,
    confessions_router,
    realtime_router,
    system_router,
    votes_router,
)

__all__ = [
    "auth_router",
    "confessions_router",
    "votes_router",
    "admin_router",
    "realtime_router",
    "system_router",
]
