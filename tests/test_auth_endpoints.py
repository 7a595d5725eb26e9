try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

import httpx
import pytest

from app.main import app
from app.utils.uploads import UploadSpool

pytestmark = pytest.mark.anyio("asyncio")

_FORM = {
    "username": "ana",
    "email": "ana@x.com",
    "full_name": "Ana Lima",
    "password": "secret",
}


@pytest.fixture()
def overrides(tmp_path, auth_service, token_issuer, asset_host):
    from app import dependencies

    spool_dir = tmp_path / "spool"
    app.dependency_overrides.clear()
    app.dependency_overrides.update(
        {
            dependencies.get_auth_service: lambda: auth_service,
            dependencies.get_token_issuer: lambda: token_issuer,
            dependencies.get_upload_spool: lambda: UploadSpool(tmp_dir=str(spool_dir), max_upload_mb=1),
        }
    )

    yield asset_host, spool_dir

    app.dependency_overrides.clear()


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://testserver"
    )


async def _register(client: httpx.AsyncClient, **files) -> httpx.Response:
    files = files or {"avatar": ("avatar.png", b"\x89PNG avatar", "image/png")}
    return await client.post("/api/users/register", data=_FORM, files=files)


async def test_register_returns_public_profile_and_cleans_spool(overrides):
    asset_host, spool_dir = overrides
    async with _client() as client:
        response = await _register(
            client,
            avatar=("avatar.png", b"\x89PNG avatar", "image/png"),
            cover_image=("cover.jpg", b"\xff\xd8 cover", "image/jpeg"),
        )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["username"] == "ana"
    assert body["data"]["cover_image"].startswith("https://assets.example.com/")
    assert "password_hash" not in body["data"]
    assert len(asset_host.uploads) == 2
    assert list(spool_dir.iterdir()) == []


async def test_register_without_avatar_is_bad_request(overrides):
    async with _client() as client:
        response = await client.post("/api/users/register", data=_FORM)

    assert response.status_code == 400
    assert response.json()["message"] == "Avatar file is required."


async def test_register_rejects_non_image_upload(overrides):
    async with _client() as client:
        response = await _register(
            client, avatar=("notes.txt", b"plain text", "text/plain")
        )

    assert response.status_code == 400
    assert response.json()["error_type"] == "ValidationError"


async def test_register_duplicate_is_conflict(overrides):
    async with _client() as client:
        assert (await _register(client)).status_code == 201
        response = await _register(client)

    assert response.status_code == 409
    assert response.json()["success"] is False


async def test_login_sets_http_only_cookies(overrides):
    async with _client() as client:
        await _register(client)
        response = await client.post(
            "/api/users/login", json={"username": "ana", "password": "secret"}
        )

    assert response.status_code == 200
    body = response.json()
    assert body["data"]["access_token"]
    assert body["data"]["refresh_token"]
    set_cookies = response.headers.get_list("set-cookie")
    assert any(c.startswith("accessToken=") and "HttpOnly" in c for c in set_cookies)
    assert any(c.startswith("refreshToken=") and "HttpOnly" in c for c in set_cookies)


async def test_login_wrong_password_and_missing_identifier(overrides):
    async with _client() as client:
        await _register(client)
        wrong = await client.post(
            "/api/users/login", json={"email": "ana@x.com", "password": "wrong"}
        )
        missing = await client.post("/api/users/login", json={"password": "secret"})
        malformed = await client.post("/api/users/login", content=b"not json")

    assert wrong.status_code == 401
    assert missing.status_code == 400
    assert malformed.status_code == 400


async def test_refresh_with_cookie_then_reuse_is_rejected(overrides):
    async with _client() as client:
        await _register(client)
        login = await client.post(
            "/api/users/login", json={"username": "ana", "password": "secret"}
        )
        original = login.json()["data"]["refresh_token"]

        rotated = await client.post("/api/users/refresh-token")
        client.cookies.clear()
        reused = await client.post(
            "/api/users/refresh-token", json={"refresh_token": original}
        )

    assert rotated.status_code == 200
    assert rotated.json()["data"]["refresh_token"] != original
    assert reused.status_code == 401
    assert reused.json()["message"] == "Refresh token is expired or already used."


async def test_refresh_without_token_is_unauthorized(overrides):
    async with _client() as client:
        response = await client.post("/api/users/refresh-token")

    assert response.status_code == 401


async def test_logout_requires_access_token(overrides):
    async with _client() as client:
        response = await client.post("/api/users/logout")

    assert response.status_code == 401
    assert response.json()["error_type"] == "UnauthorizedError"


async def test_logout_clears_cookies_and_session(overrides):
    async with _client() as client:
        await _register(client)
        login = await client.post(
            "/api/users/login", json={"username": "ana", "password": "secret"}
        )
        tokens = login.json()["data"]
        client.cookies.clear()

        logout = await client.post(
            "/api/users/logout",
            headers={"Authorization": f"Bearer {tokens['access_token']}"},
        )
        refresh = await client.post(
            "/api/users/refresh-token", json={"refreshToken": tokens["refresh_token"]}
        )

    assert logout.status_code == 200
    cleared = logout.headers.get_list("set-cookie")
    assert any(c.startswith("accessToken=") and "Max-Age=0" in c for c in cleared)
    assert any(c.startswith("refreshToken=") and "Max-Age=0" in c for c in cleared)
    assert refresh.status_code == 401


async def test_me_returns_current_user(overrides):
    async with _client() as client:
        await _register(client)
        await client.post("/api/users/login", json={"username": "ana", "password": "secret"})
        response = await client.get("/api/users/me")

    assert response.status_code == 200
    assert response.json()["data"]["email"] == "ana@x.com"


async def test_health(overrides):
    async with _client() as client:
        response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_login_falls_back_to_email_when_username_misses(overrides):
    async with _client() as client:
        await _register(client)
        response = await client.post(
            "/api/users/login",
            json={"username": "anna", "email": "ana@x.com", "password": "secret"},
        )

    assert response.status_code == 200
    assert response.json()["data"]["user"]["email"] == "ana@x.com"
