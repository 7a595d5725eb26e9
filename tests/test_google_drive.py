from __future__ import annotations

from pathlib import Path

import pytest

from app.clients import GoogleDriveClient
from app.core.errors import AssetUploadError
from app.services import AuthService, IdentityStore, SessionStore, TokenIssuer


@pytest.mark.asyncio
async def test_upload_with_missing_credentials_file_raises_asset_error(
    tmp_path: Path, avatar_file: Path
) -> None:
    client = GoogleDriveClient(service_account_file=str(tmp_path / "missing-sa.json"))

    with pytest.raises(AssetUploadError):
        await client.upload(avatar_file)


@pytest.mark.asyncio
async def test_upload_with_malformed_credentials_file_raises_asset_error(
    tmp_path: Path, avatar_file: Path
) -> None:
    credentials = tmp_path / "sa.json"
    credentials.write_text("{not json", encoding="utf-8")
    client = GoogleDriveClient(service_account_file=str(credentials))

    with pytest.raises(AssetUploadError):
        await client.upload(avatar_file)


@pytest.mark.asyncio
async def test_upload_without_configured_credentials_raises_asset_error(
    avatar_file: Path,
) -> None:
    client = GoogleDriveClient(service_account_file=None)

    with pytest.raises(AssetUploadError):
        await client.upload(avatar_file)


@pytest.mark.asyncio
async def test_upload_of_missing_local_file_raises_asset_error(tmp_path: Path) -> None:
    client = GoogleDriveClient(service_account_file=str(tmp_path / "sa.json"))

    with pytest.raises(AssetUploadError):
        await client.upload(tmp_path / "gone.png")


@pytest.mark.asyncio
async def test_register_with_broken_drive_credentials_is_bad_request(
    tmp_path: Path,
    avatar_file: Path,
    identity_store: IdentityStore,
    session_store: SessionStore,
    token_issuer: TokenIssuer,
) -> None:
    service = AuthService(
        identity_store=identity_store,
        session_store=session_store,
        token_issuer=token_issuer,
        asset_host=GoogleDriveClient(service_account_file=str(tmp_path / "missing-sa.json")),
        cookie_secure=False,
    )

    result = await service.register(
        {
            "username": "ana",
            "email": "ana@x.com",
            "full_name": "Ana Lima",
            "password": "secret",
        },
        {"avatar": avatar_file},
    )

    assert result.status_code == 400
    assert result.message == "Avatar file is required."
    assert await identity_store.find_by_identifier(username="ana") is None
