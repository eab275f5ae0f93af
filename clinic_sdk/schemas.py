"""Request and response payload schemas for the auth endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SignInRequest(BaseModel):
    """Password sign-in request payload."""

    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1, max_length=256)


class TokenPairResponse(BaseModel):
    """Access/refresh token response payload; the refresh token is optional."""

    access_token: str = Field(min_length=1)
    refresh_token: str | None = None
