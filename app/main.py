"""
FastAPI application entrypoint for the account API.
"""

from __future__ import annotations

from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.routes import router as api_router
from app.core.config import get_settings
from app.core.errors import AccountServiceError
from app.core.logging import configure_logging


async def _account_error_handler(request: Request, exc: AccountServiceError) -> JSONResponse:
    return JSONResponse(status_code=int(exc.status_code), content=exc.to_dict())


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    body = {
        "status_code": int(HTTPStatus.BAD_REQUEST),
        "error_type": "ValidationError",
        "message": "Request payload is invalid.",
        "details": {"errors": jsonable_errors(exc)},
        "success": False,
    }
    return JSONResponse(status_code=HTTPStatus.BAD_REQUEST, content=body)


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Reduce pydantic error entries to JSON-safe location/message pairs."""
    return [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": str(error.get("msg", ""))}
        for error in exc.errors()
    ]


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="User Account API",
        version="0.1.0",
        description="Registration, login, logout and refresh-token rotation.",
    )
    app.add_exception_handler(AccountServiceError, _account_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
