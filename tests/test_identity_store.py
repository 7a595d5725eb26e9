from __future__ import annotations

import threading

import pytest
from argon2 import PasswordHasher

from app.core.errors import ConflictError
from app.services import IdentityStore


def _fields(**overrides) -> dict:
    fields = {
        "username": "ana",
        "email": "ana@x.com",
        "full_name": "Ana Lima",
        "password": "secret",
        "avatar": "https://assets.example.com/a.png",
        "cover_image": "",
    }
    fields.update(overrides)
    return fields


@pytest.mark.asyncio
async def test_create_hashes_password_and_indexes_user(identity_store: IdentityStore) -> None:
    created = await identity_store.create(_fields())

    assert created.password_hash != "secret"
    assert created.refresh_token is None
    assert (await identity_store.find_by_identifier(username="ana")).id == created.id
    assert (await identity_store.find_by_identifier(email="ANA@x.com")).id == created.id
    assert await identity_store.verify_password(created, "secret")
    assert not await identity_store.verify_password(created, "wrong")


@pytest.mark.asyncio
async def test_create_duplicate_email_leaves_no_partial_records(
    identity_store: IdentityStore, record_store
) -> None:
    await identity_store.create(_fields())

    with pytest.raises(ConflictError):
        await identity_store.create(_fields(username="other"))

    # The username index written before the email clash was rolled back.
    assert record_store.get_item(partition_key="username#other", sort_key="index") is None
    assert await identity_store.find_by_identifier(username="other") is None


@pytest.mark.asyncio
async def test_update_patches_fields_and_returns_none_for_unknown_user(
    identity_store: IdentityStore,
) -> None:
    created = await identity_store.create(_fields())

    updated = await identity_store.update(created.id, {"refresh_token": "tok"})

    assert updated.refresh_token == "tok"
    assert updated.username == "ana"
    assert updated.updated_at >= created.updated_at
    assert await identity_store.update("nope", {"refresh_token": "tok"}) is None


@pytest.mark.asyncio
async def test_find_by_identifier_without_keys_returns_none(
    identity_store: IdentityStore,
) -> None:
    assert await identity_store.find_by_identifier() is None


class _ThreadRecordingHasher(PasswordHasher):
    def __init__(self) -> None:
        super().__init__(time_cost=1, memory_cost=8, parallelism=1)
        self.threads: list[int] = []

    def hash(self, password, **kwargs):
        self.threads.append(threading.get_ident())
        return super().hash(password, **kwargs)

    def verify(self, hash, password):
        self.threads.append(threading.get_ident())
        return super().verify(hash, password)


@pytest.mark.asyncio
async def test_password_hashing_runs_off_the_event_loop_thread(record_store) -> None:
    hasher = _ThreadRecordingHasher()
    store = IdentityStore(record_store, password_hasher=hasher)
    loop_thread = threading.get_ident()

    created = await store.create(_fields())
    assert await store.verify_password(created, "secret")

    assert len(hasher.threads) == 2
    assert loop_thread not in hasher.threads
