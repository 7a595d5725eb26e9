"""
FastAPI routes for the account API.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Cookie, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

from app.dependencies import (
    get_app_settings,
    get_auth_service,
    get_upload_spool,
)
from app.dependencies.auth import get_current_user_id
from app.schemas import LoginRequest, RefreshTokenRequest
from app.services.auth import REFRESH_COOKIE, AuthResult

router = APIRouter()
logger = logging.getLogger(__name__)


def render_result(result: AuthResult) -> JSONResponse:
    """Turn an ``AuthResult`` into a JSON response and apply its cookies."""
    response = JSONResponse(status_code=result.status_code, content=result.to_body())
    for cookie in result.cookies:
        if cookie.delete:
            response.delete_cookie(
                cookie.name,
                httponly=cookie.httponly,
                secure=cookie.secure,
                samesite=cookie.samesite,
            )
        else:
            response.set_cookie(
                cookie.name,
                cookie.value,
                max_age=cookie.max_age,
                httponly=cookie.httponly,
                secure=cookie.secure,
                samesite=cookie.samesite,
            )
    return response


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck(
    settings: Annotated[Any, Depends(get_app_settings)],
) -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok", "environment": settings.environment}


@router.post("/users/register", status_code=HTTPStatus.CREATED)
async def register_user(
    auth_service: Annotated[Any, Depends(get_auth_service)],
    spool: Annotated[Any, Depends(get_upload_spool)],
    username: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    full_name: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None),
) -> JSONResponse:
    """Create an account from a multipart form with an avatar image."""
    saved = []
    try:
        avatar_path = await spool.save(avatar)
        saved.append(avatar_path)
        cover_path = await spool.save(cover_image)
        saved.append(cover_path)

        result = await auth_service.register(
            {
                "username": username,
                "email": email,
                "full_name": full_name,
                "password": password,
            },
            {"avatar": avatar_path, "cover_image": cover_path},
        )
    finally:
        spool.cleanup(saved)
    return render_result(result)


@router.post("/users/login", status_code=HTTPStatus.OK)
async def login_user(
    payload: LoginRequest,
    auth_service: Annotated[Any, Depends(get_auth_service)],
) -> JSONResponse:
    """Exchange username/email and password for an access/refresh pair."""
    result = await auth_service.login(
        payload.username, payload.password, email=payload.email
    )
    return render_result(result)


@router.post("/users/logout", status_code=HTTPStatus.OK)
async def logout_user(
    user_id: Annotated[str, Depends(get_current_user_id)],
    auth_service: Annotated[Any, Depends(get_auth_service)],
) -> JSONResponse:
    """Invalidate the caller's refresh token and clear both cookies."""
    result = await auth_service.logout(user_id)
    return render_result(result)


@router.post("/users/refresh-token", status_code=HTTPStatus.OK)
async def refresh_access_token(
    auth_service: Annotated[Any, Depends(get_auth_service)],
    payload: Optional[RefreshTokenRequest] = None,
    refresh_cookie: Annotated[Optional[str], Cookie(alias=REFRESH_COOKIE)] = None,
) -> JSONResponse:
    """Rotate the session using the refresh cookie or a body token."""
    presented = refresh_cookie or (payload.refresh_token if payload else None)
    result = await auth_service.refresh(presented)
    return render_result(result)


@router.get("/users/me", status_code=HTTPStatus.OK)
async def get_current_user(
    user_id: Annotated[str, Depends(get_current_user_id)],
    auth_service: Annotated[Any, Depends(get_auth_service)],
) -> JSONResponse:
    """Return the authenticated caller's public profile."""
    result = await auth_service.current_user(user_id)
    return render_result(result)


__all__ = ["render_result", "router"]
