# tests/v1/test_auth.py
"""Tests for sign-in and bearer token handling."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from jose import jwt

from confession_board.core.security import (
    TokenError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from confession_board.core.settings import settings


def test_password_hashing_round_trip() -> None:
    hashed = hash_password("hunter2")
    assert hashed != "hunter2"
    assert verify_password("hunter2", hashed)
    assert not verify_password("hunter3", hashed)
    assert not verify_password("hunter2", "not-a-bcrypt-hash")


def test_token_decoding() -> None:
    assert decode_access_token(create_access_token(42)) == 42
    with pytest.raises(TokenError):
        decode_access_token("garbage")


def test_expired_token_rejected() -> None:
    expired = jwt.encode(
        {"sub": "1", "exp": datetime.now(UTC) - timedelta(minutes=1)},
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(TokenError):
        decode_access_token(expired)


def test_login_success(client: TestClient, admin_account, admin_password) -> None:
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "ADMIN@example.com", "password": admin_password},
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["roles"] == ["admin"]
    assert decode_access_token(body["access_token"]) == admin_account.id


def test_login_wrong_password(client: TestClient, admin_account) -> None:
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "admin@example.com", "password": "wrong"},
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Invalid login credentials"


def test_me_requires_token(client: TestClient) -> None:
    response = client.get("/api/v1/auth/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_me_returns_account(client: TestClient, admin_headers) -> None:
    response = client.get("/api/v1/auth/me", headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["email"] == "admin@example.com"
    assert response.json()["roles"] == ["admin"]


def test_invalid_token_is_rejected_even_on_public_routes(client: TestClient) -> None:
    response = client.get(
        "/api/v1/votes/identity",
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_token_for_deleted_account(client: TestClient) -> None:
    headers = {"Authorization": f"Bearer {create_access_token(99999)}"}
    response = client.get("/api/v1/auth/me", headers=headers)

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "User not found"
