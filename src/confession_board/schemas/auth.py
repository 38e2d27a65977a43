"""Authentication-related Pydantic schemas."""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Email and password sign-in."""

    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Bearer token issued after a successful sign-in."""

    access_token: str
    token_type: str = "bearer"
    roles: list[str]


class AccountResponse(BaseModel):
    """The signed-in account."""

    id: int
    email: str
    roles: list[str]
