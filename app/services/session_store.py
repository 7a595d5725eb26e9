"""The single current refresh token kept on each user record."""

from __future__ import annotations

import hmac
import logging
from typing import Optional

from app.models.user import UserRecord
from app.services.identity_store import IdentityStore
from app.services.token_cipher import RefreshTokenCipher

logger = logging.getLogger(__name__)


class SessionStore:
    """Optimistic single-value register over ``UserRecord.refresh_token``.

    Saving overwrites whatever token was stored before, so only the most
    recently issued refresh token ever matches. The token is sealed at rest.
    """

    def __init__(self, identity_store: IdentityStore, cipher: RefreshTokenCipher) -> None:
        self._identities = identity_store
        self._cipher = cipher

    async def save(self, user_id: str, refresh_token: str) -> Optional[UserRecord]:
        """Overwrite the stored token; completes only once the write is durable."""
        return await self._identities.update(
            user_id, {"refresh_token": self._cipher.seal(refresh_token)}
        )

    async def clear(self, user_id: str) -> Optional[UserRecord]:
        return await self._identities.update(user_id, {"refresh_token": None})

    def current(self, user: UserRecord) -> Optional[str]:
        """Plaintext of the stored token, or ``None`` if absent or unreadable."""
        if not user.refresh_token:
            return None
        token = self._cipher.open(user.refresh_token)
        if token is None:
            logger.warning("Stored refresh token could not be decrypted for user %s", user.id)
        return token

    def matches(self, user: UserRecord, presented: str) -> bool:
        """Exact-value comparison against the stored token."""
        stored = self.current(user)
        if not stored or not presented:
            return False
        return hmac.compare_digest(stored.encode("utf-8"), presented.encode("utf-8"))


__all__ = ["SessionStore"]
