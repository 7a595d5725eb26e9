"""Encryption at rest for the refresh token kept on each user record."""

from __future__ import annotations

import base64
import hashlib
from typing import Iterable, Optional

from cryptography.fernet import Fernet, InvalidToken, MultiFernet


def _derive_key(secret: str) -> bytes:
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest)


class RefreshTokenCipher:
    """Seal refresh tokens with the current secret, open with any known one.

    The first secret encrypts; the rest are retired secrets still accepted
    for decryption so a key rotation does not log everyone out.
    """

    def __init__(self, secrets: Iterable[str]) -> None:
        keys = [Fernet(_derive_key(secret)) for secret in secrets if secret]
        if not keys:
            raise ValueError("At least one token encryption secret must be provided.")
        self._fernet = MultiFernet(keys)

    def seal(self, token: str) -> str:
        return self._fernet.encrypt(token.encode("utf-8")).decode("utf-8")

    def open(self, sealed: str) -> Optional[str]:
        """Plaintext token, or ``None`` when no known secret can decrypt it."""
        try:
            return self._fernet.decrypt(sealed.encode("utf-8")).decode("utf-8")
        except InvalidToken:
            return None


__all__ = ["RefreshTokenCipher"]
