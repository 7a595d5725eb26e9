"""Spool multipart uploads to a scratch directory before they are hosted."""

from __future__ import annotations

import logging
import tempfile
import uuid
from pathlib import Path
from typing import Iterable, Optional

import aiofiles
from fastapi import UploadFile

from app.core.errors import ValidationError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


class UploadSpool:
    """Write ``UploadFile`` objects to disk and remove them afterwards."""

    _ALLOWED_MIME_PREFIXES = ("image/",)

    def __init__(self, tmp_dir: Optional[str] = None, max_upload_mb: int = 5) -> None:
        self._tmp_dir = Path(tmp_dir or tempfile.gettempdir())
        self._tmp_dir.mkdir(parents=True, exist_ok=True)
        self._max_bytes = max_upload_mb * 1024 * 1024

    async def save(self, upload: Optional[UploadFile]) -> Optional[Path]:
        """Return the local path of ``upload``, or ``None`` if nothing was sent."""
        if upload is None or not upload.filename:
            return None

        content_type = upload.content_type or ""
        if not content_type.startswith(self._ALLOWED_MIME_PREFIXES):
            raise ValidationError(
                f"File {upload.filename} has unsupported type {content_type or 'unknown'}.",
                details={"filename": upload.filename},
            )

        suffix = Path(upload.filename).suffix.lower()
        target = self._tmp_dir / f"{uuid.uuid4().hex}{suffix}"
        total = 0
        try:
            async with aiofiles.open(target, "wb") as handle:
                while chunk := await upload.read(_CHUNK_SIZE):
                    total += len(chunk)
                    if total > self._max_bytes:
                        raise ValidationError(
                            f"File {upload.filename} exceeds "
                            f"{self._max_bytes // (1024 * 1024)}MB limit.",
                            details={"filename": upload.filename},
                        )
                    await handle.write(chunk)
        except BaseException:
            target.unlink(missing_ok=True)
            raise
        return target

    @staticmethod
    def cleanup(paths: Iterable[Optional[Path]]) -> None:
        for path in paths:
            if path is None:
                continue
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Could not delete temp upload %s: %s", path, exc)


__all__ = ["UploadSpool"]
