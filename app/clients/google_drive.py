"""Google Drive client wrapper used as the avatar/cover image host."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
from pathlib import Path
from typing import Optional

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaFileUpload

from app.core.errors import AssetUploadError

logger = logging.getLogger(__name__)


class GoogleDriveClient:
    """Upload local image files to Drive and expose them by public link."""

    SCOPES = ("https://www.googleapis.com/auth/drive.file",)

    def __init__(
        self,
        service_account_file: Optional[str],
        drive_folder_id: Optional[str] = None,
    ) -> None:
        self._service_account_file = service_account_file
        self._drive_folder_id = drive_folder_id

    def _credentials(self):
        if not self._service_account_file:
            raise AssetUploadError("GOOGLE_SERVICE_ACCOUNT_FILE is not configured.")
        return service_account.Credentials.from_service_account_file(
            self._service_account_file, scopes=list(self.SCOPES)
        )

    async def upload(self, local_path: str | Path) -> dict:
        """Upload ``local_path`` and return ``{"url": ..., "file_id": ...}``."""
        path = Path(local_path)
        if not path.is_file():
            raise AssetUploadError(f"Local file {path.name} does not exist.")

        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"

        def _execute_upload() -> dict:
            service = build(
                "drive", "v3", credentials=self._credentials(), cache_discovery=False
            )
            file_metadata: dict = {"name": path.name}
            if self._drive_folder_id:
                file_metadata["parents"] = [self._drive_folder_id]

            media = MediaFileUpload(str(path), mimetype=mime_type, resumable=False)
            created = (
                service.files()
                .create(body=file_metadata, media_body=media, fields="id, webContentLink")
                .execute()
            )
            service.permissions().create(
                fileId=created["id"],
                body={"type": "anyone", "role": "reader"},
            ).execute()

            url = created.get("webContentLink")
            if not url:
                url = f"https://drive.google.com/uc?id={created['id']}"
            return {"url": url, "file_id": created["id"]}

        try:
            return await asyncio.to_thread(_execute_upload)
        except (HttpError, httplib2.HttpLib2Error, GoogleAuthError, OSError, ValueError) as exc:
            logger.warning("Drive upload failed for %s: %s", path.name, exc)
            raise AssetUploadError(f"Upload of {path.name} failed.") from exc


__all__ = ["GoogleDriveClient"]
