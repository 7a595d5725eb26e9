"""Mint and verify the signed access/refresh tokens handed to clients."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt

from app.core.config import SecuritySettings
from app.core.errors import InvalidTokenError
from app.models.user import UserRecord

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True, slots=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Verified claims of a token."""

    user_id: str
    token_type: str
    jti: str
    expires_at: datetime
    extra: Dict[str, Any] = field(default_factory=dict)


class TokenIssuer:
    """Sign tokens with separate secrets and lifetimes per token kind.

    Access tokens carry the public identity (username, email, full name) so
    downstream handlers can use them without a store lookup. Refresh tokens
    carry only the user id. Every token gets a random ``jti`` so two tokens
    minted for the same user within the same second never collide.
    """

    def __init__(self, settings: SecuritySettings) -> None:
        self._settings = settings
        self._algorithm = settings.jwt_algorithm
        self._secrets = {
            ACCESS: settings.access_token_secret,
            REFRESH: settings.refresh_token_secret,
        }
        self._lifetimes = {
            ACCESS: timedelta(minutes=settings.access_token_expire_minutes),
            REFRESH: timedelta(days=settings.refresh_token_expire_days),
        }

    @property
    def access_token_lifetime(self) -> timedelta:
        return self._lifetimes[ACCESS]

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return self._lifetimes[REFRESH]

    def issue_access_token(self, user: UserRecord) -> str:
        """Short-lived token authorizing individual requests."""
        return self._encode(
            ACCESS,
            user.id,
            {
                "username": user.username,
                "email": user.email,
                "full_name": user.full_name,
            },
        )

    def issue_refresh_token(self, user: UserRecord) -> str:
        """Long-lived token used only to mint a new pair."""
        return self._encode(REFRESH, user.id, {})

    def issue_pair(self, user: UserRecord) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access_token(user),
            refresh_token=self.issue_refresh_token(user),
        )

    def verify_access_token(self, token: str) -> TokenClaims:
        return self._decode(ACCESS, token)

    def verify_refresh_token(self, token: str) -> TokenClaims:
        """Check signature, structure and expiry. Does not consult storage."""
        return self._decode(REFRESH, token)

    def _encode(self, token_type: str, user_id: str, extra: Dict[str, Any]) -> str:
        issued_at = datetime.now(timezone.utc)
        claims = {
            **extra,
            "sub": user_id,
            "type": token_type,
            "jti": uuid.uuid4().hex,
            "iat": issued_at,
            "exp": issued_at + self._lifetimes[token_type],
        }
        return jwt.encode(claims, self._secrets[token_type], algorithm=self._algorithm)

    def _decode(self, token_type: str, token: str) -> TokenClaims:
        if not token or not isinstance(token, str):
            raise InvalidTokenError("Token is empty.")
        try:
            payload = jwt.decode(
                token,
                self._secrets[token_type],
                algorithms=[self._algorithm],
                options={"require_exp": True, "require_sub": True},
            )
        except JWTError as exc:
            raise InvalidTokenError(str(exc)) from exc

        if payload.get("type") != token_type:
            raise InvalidTokenError(f"Expected a {token_type} token.")
        user_id = payload.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidTokenError("Token subject is missing.")

        standard = {"sub", "type", "jti", "iat", "exp"}
        return TokenClaims(
            user_id=user_id,
            token_type=token_type,
            jti=str(payload.get("jti", "")),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
            extra={key: value for key, value in payload.items() if key not in standard},
        )


__all__ = ["TokenClaims", "TokenIssuer", "TokenPair"]
