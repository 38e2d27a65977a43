# tests/v1/test_dependencies.py
"""Tests for API dependencies module."""

import pytest
from fastapi import HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from starlette.requests import Request

from confession_board.api.v1.dependencies import (
    get_client_info,
    get_current_admin,
    get_current_user,
    get_optional_user,
)
from confession_board.core.security import create_access_token


def _request(headers: dict[str, str], client: tuple[str, int] | None = ("192.0.2.1", 5000)) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
        "client": client,
    }
    return Request(scope)


class TestOptionalUser:
    """Test the get_optional_user dependency function."""

    def test_no_credentials_means_anonymous(self, db_session):
        assert get_optional_user(None, db_session) is None

    def test_valid_token(self, db_session, admin_account):
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer",
            credentials=create_access_token(admin_account.id),
        )
        assert get_optional_user(credentials, db_session).id == admin_account.id

    def test_invalid_token(self, db_session):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="invalid_token")

        with pytest.raises(HTTPException) as exc_info:
            get_optional_user(credentials, db_session)

        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED
        assert "Could not validate credentials" in exc_info.value.detail


class TestRoleChecks:
    def test_current_user_required(self):
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(None)
        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED

    def test_admin_passes(self, db_session, admin_account):
        assert get_current_admin(admin_account, db_session) is admin_account

    def test_non_admin_forbidden(self, db_session, regular_account):
        with pytest.raises(HTTPException) as exc_info:
            get_current_admin(regular_account, db_session)
        assert exc_info.value.status_code == status.HTTP_403_FORBIDDEN


class TestClientInfo:
    def test_forwarded_for_takes_first_hop(self):
        info = get_client_info(_request({"X-Forwarded-For": "203.0.113.7, 10.0.0.2"}))
        assert info.ip_address == "203.0.113.7"

    def test_falls_back_to_peer_address(self):
        info = get_client_info(_request({"User-Agent": "Mozilla/5.0 (Windows NT 10.0) Firefox/1"}))
        assert info.ip_address == "192.0.2.1"
        assert info.device_info == "Firefox on Windows"

    def test_no_peer(self):
        info = get_client_info(_request({}, client=None))
        assert info.ip_address is None
        assert info.device_info == "Unknown Browser on Unknown OS"
