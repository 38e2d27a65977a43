"""Moderator accounts and role checks."""

from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from confession_board.core.security import hash_password, verify_password
from confession_board.models import Account, UserRole
from confession_board.models.account import ROLE_ADMIN, ROLE_USER
from confession_board.services.errors import AuthenticationError, StoreError

logger = logging.getLogger(__name__)

VALID_ROLES = frozenset({ROLE_ADMIN, ROLE_USER})


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_account(db: Session, account_id: int) -> Account | None:
    return db.get(Account, account_id)


def get_account_by_email(db: Session, email: str) -> Account | None:
    return (
        db.query(Account)
        .filter(func.lower(Account.email) == normalize_email(email))
        .first()
    )


def has_role(db: Session, account_id: int, role: str) -> bool:
    """Return True if a role assignment exists for the account."""
    return (
        db.query(UserRole.id)
        .filter(UserRole.user_id == account_id, UserRole.role == role)
        .first()
        is not None
    )


def is_admin(db: Session, account_id: int) -> bool:
    return has_role(db, account_id, ROLE_ADMIN)


def authenticate(db: Session, email: str, password: str) -> Account:
    """Return the account matching the credentials.

    Raises:
        AuthenticationError: If the email is unknown or the password is wrong
    """
    account = get_account_by_email(db, email)
    if account is None or not verify_password(password, account.password_hash):
        raise AuthenticationError("Invalid login credentials")
    return account


def grant_role(db: Session, account: Account, role: str) -> bool:
    """Give `account` the role unless it already has it.

    Returns True when a new assignment was created.
    """
    if role not in VALID_ROLES:
        raise ValueError(f"Unknown role: {role}")
    if account.has_role(role):
        return False
    account.roles.append(UserRole(role=role))
    return True


def create_or_update_account(
    db: Session,
    email: str,
    password: str,
    roles: list[str] | None = None,
) -> tuple[Account, bool]:
    """Create an account, or reset the password of an existing one.

    Returns the account and whether it was newly created.
    """
    account = get_account_by_email(db, email)
    created = account is None
    try:
        if account is None:
            account = Account(email=normalize_email(email), password_hash=hash_password(password))
            db.add(account)
        else:
            account.password_hash = hash_password(password)
        for role in roles or [ROLE_USER]:
            grant_role(db, account, role)
        db.commit()
        db.refresh(account)
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError("Could not save account") from exc

    logger.info("Account %s %s with roles %s", account.email, "created" if created else "updated",
                account.role_names)
    return account, created
