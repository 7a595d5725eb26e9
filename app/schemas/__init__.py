"""Public schema exports."""

from .auth import LoginRequest, RefreshTokenRequest

__all__ = [
    "LoginRequest",
    "RefreshTokenRequest",
]
