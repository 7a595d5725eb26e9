"""
Identity store built on a single-table record store.

Users live under ``user#<id>/profile``. Username and email each get a
uniqueness item (``username#<name>/index``, ``email#<email>/index``) that
points back at the user id and is written with an only-if-absent condition.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from app.core.errors import ConflictError, ItemExistsError
from app.models.user import UserRecord

logger = logging.getLogger(__name__)

_PROFILE_SK = "profile"
_INDEX_SK = "index"


class RecordStore(Protocol):
    """Interface shared by ``SQLiteStore`` and ``DynamoDBClient``."""

    def put_item(self, item: Dict[str, Any], *, if_absent: bool = False) -> None: ...

    def get_item(self, *, partition_key: str, sort_key: str) -> Optional[Dict[str, Any]]: ...

    def update_item(
        self, *, partition_key: str, sort_key: str, changes: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]: ...

    def delete_item(self, *, partition_key: str, sort_key: str) -> None: ...


def _user_pk(user_id: str) -> str:
    return f"user#{user_id}"


def _username_pk(username: str) -> str:
    return f"username#{username.strip().lower()}"


def _email_pk(email: str) -> str:
    return f"email#{email.strip().lower()}"


class IdentityStore:
    """Lookup, creation and patching of user records plus password checks."""

    def __init__(
        self,
        store: RecordStore,
        password_hasher: PasswordHasher | None = None,
    ) -> None:
        self._store = store
        self._hasher = password_hasher or PasswordHasher()

    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        item = await asyncio.to_thread(
            self._store.get_item, partition_key=_user_pk(user_id), sort_key=_PROFILE_SK
        )
        return self._to_record(item)

    async def find_by_identifier(
        self, *, username: str | None = None, email: str | None = None
    ) -> Optional[UserRecord]:
        """Return the user matching ``username`` OR ``email``, if any."""
        index_keys = []
        if username:
            index_keys.append(_username_pk(username))
        if email:
            index_keys.append(_email_pk(email))

        for pk in index_keys:
            pointer = await asyncio.to_thread(
                self._store.get_item, partition_key=pk, sort_key=_INDEX_SK
            )
            if pointer and pointer.get("user_id"):
                user = await self.find_by_id(pointer["user_id"])
                if user is not None:
                    return user
        return None

    async def create(self, fields: Dict[str, Any]) -> UserRecord:
        """Persist a new user; ``fields['password']`` is hashed before storage.

        Raises ``ConflictError`` if the username or email is already taken,
        leaving no partial records behind.
        """
        payload = dict(fields)
        password = payload.pop("password")
        password_hash = await asyncio.to_thread(self._hasher.hash, password)
        record = UserRecord(
            id=uuid.uuid4().hex,
            password_hash=password_hash,
            **payload,
        )
        await asyncio.to_thread(self._insert, record)
        return record

    def _insert(self, record: UserRecord) -> None:
        written: list[str] = []
        try:
            for pk in (_username_pk(record.username), _email_pk(record.email)):
                self._store.put_item(
                    {"pk": pk, "sk": _INDEX_SK, "user_id": record.id}, if_absent=True
                )
                written.append(pk)
        except ItemExistsError as exc:
            for pk in written:
                self._store.delete_item(partition_key=pk, sort_key=_INDEX_SK)
            raise ConflictError("User with email or username already exists.") from exc

        self._store.put_item(
            {"pk": _user_pk(record.id), "sk": _PROFILE_SK, **record.model_dump()}
        )

    async def update(self, user_id: str, patch: Dict[str, Any]) -> Optional[UserRecord]:
        """Apply ``patch`` to a user; returns ``None`` when the user is gone."""
        changes = {**patch, "updated_at": datetime.now(timezone.utc).isoformat()}
        item = await asyncio.to_thread(
            self._store.update_item,
            partition_key=_user_pk(user_id),
            sort_key=_PROFILE_SK,
            changes=changes,
        )
        return self._to_record(item)

    async def verify_password(self, user: UserRecord, plaintext: str) -> bool:
        try:
            return await asyncio.to_thread(self._hasher.verify, user.password_hash, plaintext)
        except (VerificationError, InvalidHashError):
            logger.info("Password verification failed", extra={"user_id": user.id})
            return False

    @staticmethod
    def _to_record(item: Optional[Dict[str, Any]]) -> Optional[UserRecord]:
        if not item:
            return None
        data = {key: value for key, value in item.items() if key not in ("pk", "sk")}
        return UserRecord.model_validate(data)


__all__ = ["IdentityStore", "RecordStore"]
