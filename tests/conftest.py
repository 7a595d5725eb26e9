"""Pytest configuration shared across the suite."""

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from pathlib import Path

import pytest
from argon2 import PasswordHasher

from app.clients import SQLiteStore
from app.core.config import SecuritySettings
from app.services import (
    AuthService,
    IdentityStore,
    RefreshTokenCipher,
    SessionStore,
    TokenIssuer,
)


class StubAssetHost:
    """Records uploads and returns fake public URLs."""

    def __init__(self, *, fail_for: tuple[str, ...] = ()) -> None:
        self.uploads: list[Path] = []
        self.fail_for = fail_for

    async def upload(self, local_path):
        from app.core.errors import AssetUploadError

        path = Path(local_path)
        if path.name in self.fail_for:
            raise AssetUploadError(f"upload of {path.name} rejected")
        self.uploads.append(path)
        return {"url": f"https://assets.example.com/{path.name}", "file_id": path.name}


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture
def security_settings() -> SecuritySettings:
    return SecuritySettings(
        access_token_secret="unit-access-secret",
        refresh_token_secret="unit-refresh-secret",
        access_token_expire_minutes=15,
        refresh_token_expire_days=10,
    )


@pytest.fixture
def token_issuer(security_settings: SecuritySettings) -> TokenIssuer:
    return TokenIssuer(security_settings)


@pytest.fixture
def record_store(tmp_path: Path) -> SQLiteStore:
    return SQLiteStore(str(tmp_path / "accounts.db"))


@pytest.fixture
def identity_store(record_store: SQLiteStore) -> IdentityStore:
    # Cheap argon2 parameters keep the suite fast.
    hasher = PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)
    return IdentityStore(record_store, password_hasher=hasher)


@pytest.fixture
def token_cipher() -> RefreshTokenCipher:
    return RefreshTokenCipher(["unit-storage-secret"])


@pytest.fixture
def session_store(identity_store: IdentityStore, token_cipher: RefreshTokenCipher) -> SessionStore:
    return SessionStore(identity_store, token_cipher)


@pytest.fixture
def asset_host() -> StubAssetHost:
    return StubAssetHost()


@pytest.fixture
def auth_service(
    identity_store: IdentityStore,
    session_store: SessionStore,
    token_issuer: TokenIssuer,
    asset_host: StubAssetHost,
) -> AuthService:
    return AuthService(
        identity_store=identity_store,
        session_store=session_store,
        token_issuer=token_issuer,
        asset_host=asset_host,
        cookie_secure=False,
    )


@pytest.fixture
def avatar_file(tmp_path: Path) -> Path:
    path = tmp_path / "avatar.png"
    path.write_bytes(b"\x89PNG fake avatar")
    return path
