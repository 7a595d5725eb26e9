"""Service layer exports."""

from .auth import AuthResult, AuthService, CookieDirective
from .identity_store import IdentityStore, RecordStore
from .session_store import SessionStore
from .token_cipher import RefreshTokenCipher
from .token_issuer import TokenClaims, TokenIssuer, TokenPair

__all__ = [
    "AuthResult",
    "AuthService",
    "CookieDirective",
    "IdentityStore",
    "RecordStore",
    "RefreshTokenCipher",
    "SessionStore",
    "TokenClaims",
    "TokenIssuer",
    "TokenPair",
]
