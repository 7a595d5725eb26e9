"""Schemas for account endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Credentials submitted to log in. Either username or email is required."""

    username: Optional[str] = Field(None, description="Account username.")
    email: Optional[str] = Field(None, description="Account email address.")
    password: Optional[str] = Field(None, description="Plaintext password.")


class RefreshTokenRequest(BaseModel):
    """Optional body for clients that cannot send the refresh cookie."""

    model_config = ConfigDict(populate_by_name=True)

    refresh_token: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("refresh_token", "refreshToken"),
        description="Refresh token previously issued by login or refresh.",
    )


__all__ = ["LoginRequest", "RefreshTokenRequest"]
