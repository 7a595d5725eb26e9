"""
Domain model for persisted user identities.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class UserRecord(BaseModel):
    """Represents the identity document stored under ``user#<id>/profile``."""

    id: str
    username: str
    email: str
    full_name: str
    password_hash: str
    avatar: str
    cover_image: str = ""
    refresh_token: Optional[str] = Field(
        None, description="The single refresh token currently valid for this user."
    )
    created_at: str = Field(default_factory=_utcnow_iso)
    updated_at: str = Field(default_factory=_utcnow_iso)

    def public_profile(self) -> dict[str, Any]:
        """Profile safe to return to clients: no password hash, no session."""
        return self.model_dump(exclude={"password_hash", "refresh_token"})


__all__ = ["UserRecord"]
