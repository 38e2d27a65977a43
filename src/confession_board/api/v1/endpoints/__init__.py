"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .auth import router as auth_router
from .confessions import router as confessions_router
from .realtime import router as realtime_router
from .system import router as system_router
from .votes import router as votes_router

__all__ = [
    "auth_router",
    "confessions_router",
    "votes_router",
    "admin_router",
    "realtime_router",
    "system_router",
]
