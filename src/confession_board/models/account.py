"""SQLAlchemy models for signed-in accounts and their roles."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from confession_board.db.session import Base
from confession_board.db.time import utcnow

ROLE_ADMIN = "admin"
ROLE_USER = "user"


class Account(Base):
    """Email/password account used by moderators."""

    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    roles: Mapped[list[UserRole]] = relationship(
        "UserRole",
        back_populates="account",
        cascade="all, delete-orphan",
    )

    @property
    def role_names(self) -> list[str]:
        """Return the account's role names in a stable order."""
        return sorted(role.role for role in self.roles)

    def has_role(self, role: str) -> bool:
        """Return True if the account holds `role`."""
        return any(assignment.role == role for assignment in self.roles)


class UserRole(Base):
    """Role assignment looked up to gate moderation features."""

    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    # "admin" or "user".
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    account: Mapped[Account] = relationship("Account", back_populates="roles")
