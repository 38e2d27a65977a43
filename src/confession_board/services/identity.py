"""Voter identity resolution.

Anonymous visitors are identified by a random token that lives in client
storage (a cookie for browsers, a header for other clients). Signed-in
accounts are identified by their account id instead. Both forms are wrapped
in `VoterIdentity`, which the vote and report services use as the
uniqueness key for one-vote-per-voter enforcement.
"""

from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass
from typing import Protocol

from fastapi import Request, Response

from confession_board.core.settings import settings

logger = logging.getLogger(__name__)

ANONYMOUS_PREFIX = "anon_"
ANONYMOUS_TOKEN_LENGTH = 13
_ALPHABET = string.ascii_lowercase + string.digits


class IdentityStorage(Protocol):
    """Client-scoped key/value storage that survives page reloads."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryIdentityStorage:
    """Dictionary-backed storage, useful for scripts and tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class CookieIdentityStorage:
    """Storage backed by the request cookie jar and the outgoing response.

    Non-browser clients may send the identity in a header instead. A
    well-formed header takes precedence over the cookie; a malformed one is
    ignored.
    """

    def __init__(self, request: Request, response: Response) -> None:
        self._request = request
        self._response = response

    def get(self, key: str) -> str | None:
        header_value = (self._request.headers.get(settings.identity_header_name) or "").strip()
        if is_anonymous_id(header_value):
            return header_value
        return self._request.cookies.get(key)

    def set(self, key: str, value: str) -> None:
        self._response.set_cookie(
            key,
            value,
            max_age=settings.identity_cookie_max_age,
            httponly=False,
            samesite="lax",
        )
        self._response.headers[settings.identity_header_name] = value


def generate_anonymous_id() -> str:
    """Return a new `anon_<random-alnum>` token."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(ANONYMOUS_TOKEN_LENGTH))
    return f"{ANONYMOUS_PREFIX}{suffix}"


def is_anonymous_id(value: str | None) -> bool:
    """Return True if `value` looks like an anonymous identity token."""
    if not value or not value.startswith(ANONYMOUS_PREFIX):
        return False
    suffix = value[len(ANONYMOUS_PREFIX):]
    return bool(suffix) and len(suffix) <= 64 and all(ch in _ALPHABET for ch in suffix)


class AnonymousIdentityResolver:
    """Produce a stable per-client identifier from client storage."""

    def __init__(self, storage: IdentityStorage, key: str | None = None) -> None:
        self.storage = storage
        self.key = key or settings.identity_cookie_name

    def get_or_create_identity(self) -> str:
        """Return the stored identity, minting and persisting one if absent.

        Stored values that are not well-formed tokens are replaced. When the
        storage refuses the write the fresh token is still returned, so the
        next call yields yet another identity.
        """
        existing = self.storage.get(self.key)
        if is_anonymous_id(existing):
            return existing  # type: ignore[return-value]

        identity = generate_anonymous_id()
        try:
            self.storage.set(self.key, identity)
        except (OSError, RuntimeError, ValueError) as exc:
            logger.warning("Could not persist anonymous identity: %s", exc)
        return identity


@dataclass(frozen=True)
class VoterIdentity:
    """Either an authenticated account id or an anonymous token."""

    user_id: int | None = None
    anonymous_id: str | None = None

    def __post_init__(self) -> None:
        if (self.user_id is None) == (self.anonymous_id is None):
            raise ValueError("VoterIdentity needs exactly one of user_id or anonymous_id")

    @classmethod
    def for_user(cls, user_id: int) -> VoterIdentity:
        return cls(user_id=user_id)

    @classmethod
    def anonymous(cls, token: str) -> VoterIdentity:
        return cls(anonymous_id=token)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def key(self) -> str:
        """Stable string form, used as the reporter identifier."""
        if self.user_id is not None:
            return f"user:{self.user_id}"
        return self.anonymous_id  # type: ignore[return-value]
