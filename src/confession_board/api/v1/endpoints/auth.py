"""Authentication endpoints for the Confession Board API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from confession_board.api.v1.dependencies import CurrentUserDep, SessionDep
from confession_board.core.security import create_access_token
from confession_board.schemas.auth import AccountResponse, LoginRequest, LoginResponse
from confession_board.services.accounts import authenticate
from confession_board.services.errors import AuthenticationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(credentials: LoginRequest, db: SessionDep) -> LoginResponse:
    """Exchange email and password for a bearer token."""
    try:
        account = authenticate(db, credentials.email, credentials.password)
    except AuthenticationError as err:
        logger.info("Failed sign-in attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(err),
            headers={"WWW-Authenticate": "Bearer"},
        ) from err

    logger.info("Account %s signed in with roles %s", account.id, account.role_names)
    token = create_access_token(account.id)
    return LoginResponse(access_token=token, roles=account.role_names)


@router.get("/me", response_model=AccountResponse)
async def get_me(current_user: CurrentUserDep) -> AccountResponse:
    """Return the signed-in account and its roles."""
    return AccountResponse(
        id=current_user.id,
        email=current_user.email,
        roles=current_user.role_names,
    )
