"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from app.clients import DynamoDBClient, GoogleDriveClient, SQLiteStore
from app.core.config import AppSettings, get_settings
from app.services import (
    AuthService,
    IdentityStore,
    RecordStore,
    RefreshTokenCipher,
    SessionStore,
    TokenIssuer,
)
from app.utils.uploads import UploadSpool


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


def get_app_settings() -> AppSettings:
    """FastAPI dependency returning application settings."""
    return _settings()


@lru_cache()
def get_record_store() -> RecordStore:
    """Provide the configured single-table record store."""
    storage = _settings().storage
    if storage.backend == "dynamodb":
        return DynamoDBClient(storage)
    return SQLiteStore(storage.sqlite_db_path)


@lru_cache()
def get_identity_store() -> IdentityStore:
    """Provide the user identity store."""
    return IdentityStore(get_record_store())


@lru_cache()
def get_token_cipher() -> RefreshTokenCipher:
    """Provide the cipher guarding refresh tokens at rest."""
    return RefreshTokenCipher(_settings().security.storage_encryption_secrets)


def get_session_store() -> SessionStore:
    """Provide the refresh-token register over user records."""
    return SessionStore(get_identity_store(), get_token_cipher())


@lru_cache()
def get_token_issuer() -> TokenIssuer:
    """Provide the access/refresh token signer."""
    return TokenIssuer(_settings().security)


@lru_cache()
def get_asset_host() -> GoogleDriveClient:
    """Provide the Drive-backed image host."""
    assets = _settings().assets
    return GoogleDriveClient(
        service_account_file=assets.service_account_file,
        drive_folder_id=assets.drive_folder_id,
    )


@lru_cache()
def get_upload_spool() -> UploadSpool:
    """Provide scratch storage for incoming multipart files."""
    assets = _settings().assets
    return UploadSpool(tmp_dir=assets.upload_tmp_dir, max_upload_mb=assets.max_upload_mb)


def get_auth_service() -> AuthService:
    """Build the account service from the shared collaborators."""
    security = _settings().security
    return AuthService(
        identity_store=get_identity_store(),
        session_store=get_session_store(),
        token_issuer=get_token_issuer(),
        asset_host=get_asset_host(),
        cookie_secure=security.cookie_secure,
        cookie_samesite=security.cookie_samesite,
    )


__all__ = [
    "get_app_settings",
    "get_asset_host",
    "get_auth_service",
    "get_identity_store",
    "get_record_store",
    "get_session_store",
    "get_token_cipher",
    "get_token_issuer",
    "get_upload_spool",
]
