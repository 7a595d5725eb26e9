"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the account services and
the operational scripts share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

import os

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class SecuritySettings(BaseSettings):
    """Token signing and cookie configuration."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    access_token_secret: str = Field(..., alias="ACCESS_TOKEN_SECRET")
    refresh_token_secret: str = Field(..., alias="REFRESH_TOKEN_SECRET")
    access_token_expire_minutes: int = Field(
        15, alias="ACCESS_TOKEN_EXPIRE_MINUTES", gt=0
    )
    refresh_token_expire_days: int = Field(10, alias="REFRESH_TOKEN_EXPIRE_DAYS", gt=0)
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    token_encryption_secret: Optional[str] = Field(
        None,
        alias="TOKEN_ENCRYPTION_SECRET",
        description="Key material for encrypting stored refresh tokens. Falls back to REFRESH_TOKEN_SECRET.",
    )
    previous_token_encryption_secrets: str = Field(
        "",
        alias="TOKEN_ENCRYPTION_PREVIOUS_SECRETS",
        description="Comma-separated retired secrets still accepted when reading stored tokens.",
    )
    cookie_secure: bool = Field(
        True,
        alias="COOKIE_SECURE",
        description="Mark auth cookies as Secure. Disable only for local HTTP testing.",
    )
    cookie_samesite: Literal["lax", "strict", "none"] = Field(
        "lax", alias="COOKIE_SAMESITE"
    )

    @field_validator("jwt_algorithm")
    @classmethod
    def _require_hmac(cls, value: str) -> str:
        """Both token kinds are signed with shared secrets."""
        if not value.upper().startswith("HS"):
            raise ValueError("Only HMAC (HS*) algorithms are supported.")
        return value.upper()

    @model_validator(mode="after")
    def _distinct_secrets(self) -> "SecuritySettings":
        if self.access_token_secret == self.refresh_token_secret:
            raise ValueError(
                "ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must be different."
            )
        return self

    @property
    def storage_encryption_secrets(self) -> list[str]:
        """Current sealing secret first, then retired ones."""
        current = self.token_encryption_secret or self.refresh_token_secret
        retired = [s.strip() for s in self.previous_token_encryption_secrets.split(",")]
        return [current, *(s for s in retired if s)]


class StorageSettings(BaseSettings):
    """Where identity records are persisted."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    backend: Literal["sqlite", "dynamodb"] = Field("sqlite", alias="STORAGE_BACKEND")
    sqlite_db_path: str = Field("./data/accounts.db", alias="SQLITE_DB_PATH")
    dynamodb_table_name: Optional[str] = Field(None, alias="DYNAMODB_TABLE_NAME")
    region_name: str = Field("us-east-1", alias="AWS_REGION")

    @model_validator(mode="after")
    def _dynamodb_needs_table(self) -> "StorageSettings":
        if self.backend == "dynamodb" and not self.dynamodb_table_name:
            raise ValueError("DYNAMODB_TABLE_NAME is required for the dynamodb backend.")
        return self


class AssetSettings(BaseSettings):
    """Configuration for avatar and cover image hosting."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    service_account_file: Optional[str] = Field(
        None,
        alias="GOOGLE_SERVICE_ACCOUNT_FILE",
        description="Service account JSON used to upload images to Google Drive.",
    )
    drive_folder_id: Optional[str] = Field(
        None,
        alias="GOOGLE_DRIVE_FOLDER_ID",
        description="Optional Drive folder that receives uploaded images.",
    )
    upload_tmp_dir: Optional[str] = Field(
        None,
        alias="UPLOAD_TMP_DIR",
        description="Scratch directory for incoming files. Defaults to the system temp dir.",
    )
    max_upload_mb: int = Field(5, alias="MAX_UPLOAD_MB", gt=0)


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    environment: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="APP_LOG_LEVEL")
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    assets: AssetSettings = Field(default_factory=AssetSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "AssetSettings",
    "SecuritySettings",
    "StorageSettings",
    "get_settings",
]
