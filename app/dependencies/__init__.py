"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_app_settings,
    get_asset_host,
    get_auth_service,
    get_identity_store,
    get_record_store,
    get_session_store,
    get_token_cipher,
    get_token_issuer,
    get_upload_spool,
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
