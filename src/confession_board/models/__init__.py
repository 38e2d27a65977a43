"""SQLAlchemy models for the Confession Board application."""

from .account import Account, UserRole
from .comment import ConfessionComment
from .confession import Confession
from .report import ConfessionReport
from .vote import ConfessionVote

__all__ = [
    "Account", "UserRole",
    "Confession",
    "ConfessionComment",
    "ConfessionReport",
    "ConfessionVote",
]
