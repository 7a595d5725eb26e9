"""
Authentication dependency resolving the caller from an access token.
"""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.errors import InvalidTokenError, UnauthorizedError
from app.services import TokenIssuer
from app.services.auth import ACCESS_COOKIE

from .clients import get_token_issuer

# Security scheme for Bearer tokens; cookies are accepted as well.
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    token_issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)
    ],
    access_cookie: Annotated[Optional[str], Cookie(alias=ACCESS_COOKIE)] = None,
) -> str:
    """
    Return the user id carried by a valid access token.

    The ``accessToken`` cookie wins over an ``Authorization: Bearer`` header.

    Raises:
        UnauthorizedError: if no token was sent or it fails verification.
    """
    token = access_cookie or (credentials.credentials if credentials else None)
    if not token:
        raise UnauthorizedError("Unauthorized request.")
    try:
        claims = token_issuer.verify_access_token(token)
    except InvalidTokenError as exc:
        raise UnauthorizedError("Invalid access token.") from exc
    return claims.user_id


__all__ = ["bearer_scheme", "get_current_user_id"]
