"""
Error taxonomy for the account service.

Every failure that can reach a caller is one of the ``AccountServiceError``
kinds below, each bound to an HTTP-style status code::

    AccountServiceError (500)
    ├── ValidationError (400)
    ├── UnauthorizedError (401)
    │   └── InvalidCredentialsError (401)
    ├── NotFoundError (404)
    ├── ConflictError (409)
    └── InternalError (500)

``InvalidTokenError`` and ``AssetUploadError`` are raised by collaborators
and translated by ``AuthService`` before anything leaves the service.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Optional


class AccountServiceError(Exception):
    """Base class for errors reported to API callers."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @property
    def error_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        """Structured error body used by the response envelope."""
        return {
            "status_code": int(self.status_code),
            "error_type": self.error_type,
            "message": self.message,
            "details": self.details,
            "success": False,
        }


class ValidationError(AccountServiceError):
    """Bad or missing input."""

    status_code = HTTPStatus.BAD_REQUEST


class UnauthorizedError(AccountServiceError):
    """Missing, invalid, stale or reused token, or bad password."""

    status_code = HTTPStatus.UNAUTHORIZED


class InvalidCredentialsError(UnauthorizedError):
    """Password did not match the stored hash."""

    def __init__(self, message: str = "Password incorrect.") -> None:
        super().__init__(message)


class NotFoundError(AccountServiceError):
    status_code = HTTPStatus.NOT_FOUND


class ConflictError(AccountServiceError):
    status_code = HTTPStatus.CONFLICT


class InternalError(AccountServiceError):
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR


class InvalidTokenError(Exception):
    """Raised when a token fails signature, structure or expiry checks."""


class AssetUploadError(Exception):
    """Raised when the asset host cannot store a file."""


class ItemExistsError(Exception):
    """Raised by record stores when a conditional put finds an existing item."""


__all__ = [
    "AccountServiceError",
    "AssetUploadError",
    "ConflictError",
    "InternalError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "ItemExistsError",
    "NotFoundError",
    "UnauthorizedError",
    "ValidationError",
]
