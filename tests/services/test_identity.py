# tests/services/test_identity.py
"""Tests for anonymous and authenticated voter identities."""

import re

import pytest

from confession_board.services.identity import (
    AnonymousIdentityResolver,
    MemoryIdentityStorage,
    VoterIdentity,
    generate_anonymous_id,
    is_anonymous_id,
)

TOKEN_PATTERN = re.compile(r"^anon_[a-z0-9]{13}$")


class ReadOnlyStorage:
    """Storage that refuses every write, like a browser with storage disabled."""

    def __init__(self) -> None:
        self.writes = 0

    def get(self, key: str) -> str | None:
        return None

    def set(self, key: str, value: str) -> None:
        self.writes += 1
        raise OSError("storage is read-only")


def test_generated_tokens_have_expected_shape() -> None:
    token = generate_anonymous_id()
    assert TOKEN_PATTERN.match(token)
    assert generate_anonymous_id() != token


def test_is_anonymous_id() -> None:
    assert is_anonymous_id("anon_ab12")
    assert not is_anonymous_id(None)
    assert not is_anonymous_id("")
    assert not is_anonymous_id("anon_")
    assert not is_anonymous_id("user_ab12")
    assert not is_anonymous_id("anon_AB-12")


def test_existing_identity_is_returned_unchanged() -> None:
    storage = MemoryIdentityStorage({"vote_identifier": "anon_ab12"})
    resolver = AnonymousIdentityResolver(storage, key="vote_identifier")

    assert resolver.get_or_create_identity() == "anon_ab12"
    assert resolver.get_or_create_identity() == "anon_ab12"


def test_missing_identity_is_minted_and_persisted() -> None:
    storage = MemoryIdentityStorage()
    resolver = AnonymousIdentityResolver(storage, key="vote_identifier")

    first = resolver.get_or_create_identity()

    assert TOKEN_PATTERN.match(first)
    assert storage.get("vote_identifier") == first
    assert resolver.get_or_create_identity() == first


def test_malformed_identity_is_replaced() -> None:
    storage = MemoryIdentityStorage({"vote_identifier": "<script>"})
    resolver = AnonymousIdentityResolver(storage, key="vote_identifier")

    identity = resolver.get_or_create_identity()

    assert TOKEN_PATTERN.match(identity)
    assert storage.get("vote_identifier") == identity


def test_failed_write_still_returns_a_token() -> None:
    """Without writable storage every call yields a fresh identity."""
    storage = ReadOnlyStorage()
    resolver = AnonymousIdentityResolver(storage, key="vote_identifier")

    first = resolver.get_or_create_identity()
    second = resolver.get_or_create_identity()

    assert TOKEN_PATTERN.match(first)
    assert TOKEN_PATTERN.match(second)
    assert first != second
    assert storage.writes == 2


def test_voter_identity_requires_exactly_one_form() -> None:
    with pytest.raises(ValueError):
        VoterIdentity()
    with pytest.raises(ValueError):
        VoterIdentity(user_id=1, anonymous_id="anon_x")


def test_voter_identity_keys() -> None:
    member = VoterIdentity.for_user(7)
    visitor = VoterIdentity.anonymous("anon_ab12")

    assert member.is_authenticated
    assert member.key == "user:7"
    assert not visitor.is_authenticated
    assert visitor.key == "anon_ab12"
