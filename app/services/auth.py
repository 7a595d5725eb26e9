"""
Account lifecycle: registration, login, refresh-token rotation and logout.

Every public operation returns an ``AuthResult``. Failures are carried as
values with a status code; nothing raised by the stores, the asset host or
the token library crosses this boundary. Cookie side effects are described
by ``CookieDirective`` entries that the HTTP layer applies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Literal, Mapping, Optional, Protocol

from app.core.errors import (
    AccountServiceError,
    AssetUploadError,
    ConflictError,
    InternalError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from app.models.user import UserRecord
from app.services.identity_store import IdentityStore
from app.services.session_store import SessionStore
from app.services.token_issuer import TokenIssuer, TokenPair

logger = logging.getLogger(__name__)

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

_REGISTRATION_FIELDS = ("username", "email", "full_name", "password")


class AssetHost(Protocol):
    async def upload(self, local_path: str | Path) -> dict: ...


@dataclass(frozen=True, slots=True)
class CookieDirective:
    """Set (``value`` given) or delete (``value is None``) a client cookie."""

    name: str
    value: Optional[str]
    max_age: Optional[int] = None
    httponly: bool = True
    secure: bool = True
    samesite: Literal["lax", "strict", "none"] = "lax"

    @property
    def delete(self) -> bool:
        return self.value is None


@dataclass(slots=True)
class AuthResult:
    """Outcome of an account operation, ready to be rendered by a transport."""

    status_code: int
    message: str
    data: Any = None
    error: Optional[AccountServiceError] = None
    cookies: list[CookieDirective] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, error: AccountServiceError) -> "AuthResult":
        return cls(status_code=int(error.status_code), message=error.message, error=error)

    def to_body(self) -> dict[str, Any]:
        if self.error is not None:
            return self.error.to_dict()
        return {
            "status_code": self.status_code,
            "data": self.data,
            "message": self.message,
            "success": True,
        }


class AuthService:
    """Orchestrate identity, token issuance and session rotation."""

    def __init__(
        self,
        *,
        identity_store: IdentityStore,
        session_store: SessionStore,
        token_issuer: TokenIssuer,
        asset_host: AssetHost,
        cookie_secure: bool = True,
        cookie_samesite: Literal["lax", "strict", "none"] = "lax",
    ) -> None:
        self._identities = identity_store
        self._sessions = session_store
        self._tokens = token_issuer
        self._assets = asset_host
        self._cookie_secure = cookie_secure
        self._cookie_samesite = cookie_samesite

    async def register(
        self,
        fields: Mapping[str, Optional[str]],
        files: Mapping[str, Optional[str | Path]],
    ) -> AuthResult:
        """Create a user from text ``fields`` and ``avatar``/``cover_image`` files."""
        return await self._guard("register", lambda: self._register(fields, files))

    async def login(
        self,
        identifier: Optional[str],
        password: Optional[str],
        *,
        email: Optional[str] = None,
    ) -> AuthResult:
        """Authenticate and start a new session.

        ``identifier`` may be a username or an email. When the caller sends
        both, pass the email separately; the user matching either wins.
        """
        return await self._guard("login", lambda: self._login(identifier, password, email))

    async def refresh(self, presented_token: Optional[str]) -> AuthResult:
        """Rotate the session: exchange the current refresh token for a new pair."""
        return await self._guard("refresh", lambda: self._refresh(presented_token))

    async def logout(self, caller_id: str) -> AuthResult:
        """Clear the caller's session. Safe to repeat."""
        return await self._guard("logout", lambda: self._logout(caller_id))

    async def current_user(self, caller_id: str) -> AuthResult:
        return await self._guard("current_user", lambda: self._current_user(caller_id))

    async def _guard(
        self, action: str, operation: Callable[[], Awaitable[AuthResult]]
    ) -> AuthResult:
        try:
            return await operation()
        except AccountServiceError as exc:
            logger.info(
                "Account operation rejected",
                extra={"action": action, "error_type": exc.error_type},
            )
            return AuthResult.failure(exc)
        except Exception:
            logger.exception("Unexpected failure during %s", action)
            return AuthResult.failure(InternalError("An unexpected error occurred."))

    async def _register(
        self,
        fields: Mapping[str, Optional[str]],
        files: Mapping[str, Optional[str | Path]],
    ) -> AuthResult:
        cleaned = {name: (fields.get(name) or "").strip() for name in _REGISTRATION_FIELDS}
        if any(not value for value in cleaned.values()):
            raise ValidationError("All fields are required.")

        existing = await self._identities.find_by_identifier(
            username=cleaned["username"], email=cleaned["email"]
        )
        if existing is not None:
            raise ConflictError("User with email or username already exists.")

        avatar_path = files.get("avatar")
        if not avatar_path:
            raise ValidationError("Avatar file is required.")

        try:
            avatar = await self._assets.upload(avatar_path)
        except AssetUploadError as exc:
            raise ValidationError("Avatar file is required.") from exc
        if not avatar or not avatar.get("url"):
            raise ValidationError("Avatar file is required.")

        cover_url = ""
        cover_path = files.get("cover_image")
        if cover_path:
            try:
                cover = await self._assets.upload(cover_path)
                cover_url = (cover or {}).get("url") or ""
            except AssetUploadError:
                logger.warning("Cover image upload failed; continuing without it")

        try:
            created = await self._identities.create(
                {
                    "username": cleaned["username"].lower(),
                    "email": cleaned["email"],
                    "full_name": cleaned["full_name"],
                    "password": fields.get("password"),
                    "avatar": avatar["url"],
                    "cover_image": cover_url,
                }
            )
        except ConflictError:
            orphaned = [url for url in (avatar["url"], cover_url) if url]
            logger.warning(
                "Registration lost a uniqueness race; uploaded assets are orphaned: %s",
                ", ".join(orphaned),
            )
            raise

        stored = await self._identities.find_by_id(created.id)
        if stored is None:
            raise InternalError("Something went wrong while registering the user.")

        logger.info("User registered", extra={"user_id": stored.id})
        return AuthResult(
            status_code=201,
            message="User registered successfully.",
            data=stored.public_profile(),
        )

    async def _login(
        self, identifier: Optional[str], password: Optional[str], email: Optional[str]
    ) -> AuthResult:
        identifier = (identifier or "").strip()
        email = (email or "").strip()
        if not identifier and not email:
            raise ValidationError("Username or email is required.")
        if not password:
            raise ValidationError("Password is required.")

        user = await self._identities.find_by_identifier(
            username=identifier or email, email=email or identifier
        )
        if user is None:
            raise NotFoundError("User does not exist.")

        if not await self._identities.verify_password(user, password):
            raise InvalidCredentialsError()

        pair = await self._start_session(user)
        logger.info("User logged in", extra={"user_id": user.id})
        return AuthResult(
            status_code=200,
            message="User logged in successfully.",
            data={
                "user": user.public_profile(),
                "access_token": pair.access_token,
                "refresh_token": pair.refresh_token,
            },
            cookies=self._session_cookies(pair),
        )

    async def _refresh(self, presented_token: Optional[str]) -> AuthResult:
        if not presented_token:
            raise UnauthorizedError("Unauthorized request.")

        try:
            claims = self._tokens.verify_refresh_token(presented_token)
        except InvalidTokenError as exc:
            raise UnauthorizedError("Invalid refresh token.") from exc

        user = await self._identities.find_by_id(claims.user_id)
        if user is None:
            raise UnauthorizedError("Invalid refresh token.")

        if not self._sessions.matches(user, presented_token):
            logger.warning("Stale refresh token presented", extra={"user_id": user.id})
            raise UnauthorizedError("Refresh token is expired or already used.")

        pair = await self._start_session(user)
        logger.info("Session rotated", extra={"user_id": user.id})
        return AuthResult(
            status_code=200,
            message="Access token refreshed.",
            data={
                "access_token": pair.access_token,
                "refresh_token": pair.refresh_token,
            },
            cookies=self._session_cookies(pair),
        )

    async def _logout(self, caller_id: str) -> AuthResult:
        cleared = await self._sessions.clear(caller_id)
        if cleared is None:
            logger.info("Logout for unknown user treated as no-op", extra={"user_id": caller_id})
        else:
            logger.info("User logged out", extra={"user_id": caller_id})
        return AuthResult(
            status_code=200,
            message="User logged out.",
            data={},
            cookies=[
                self._cookie(ACCESS_COOKIE, None),
                self._cookie(REFRESH_COOKIE, None),
            ],
        )

    async def _current_user(self, caller_id: str) -> AuthResult:
        user = await self._identities.find_by_id(caller_id)
        if user is None:
            raise NotFoundError("User does not exist.")
        return AuthResult(
            status_code=200,
            message="Current user fetched successfully.",
            data=user.public_profile(),
        )

    async def _start_session(self, user: UserRecord) -> TokenPair:
        """Issue a pair and persist its refresh token before returning it."""
        pair = self._tokens.issue_pair(user)
        saved = await self._sessions.save(user.id, pair.refresh_token)
        if saved is None:
            raise InternalError(
                "Something went wrong while generating refresh and access token."
            )
        return pair

    def _session_cookies(self, pair: TokenPair) -> list[CookieDirective]:
        return [
            self._cookie(
                ACCESS_COOKIE,
                pair.access_token,
                int(self._tokens.access_token_lifetime.total_seconds()),
            ),
            self._cookie(
                REFRESH_COOKIE,
                pair.refresh_token,
                int(self._tokens.refresh_token_lifetime.total_seconds()),
            ),
        ]

    def _cookie(
        self, name: str, value: Optional[str], max_age: Optional[int] = None
    ) -> CookieDirective:
        return CookieDirective(
            name=name,
            value=value,
            max_age=max_age,
            secure=self._cookie_secure,
            samesite=self._cookie_samesite,
        )


__all__ = [
    "ACCESS_COOKIE",
    "REFRESH_COOKIE",
    "AssetHost",
    "AuthResult",
    "AuthService",
    "CookieDirective",
]
