"""
Exception handlers for the FastAPI app.

API routes answer JSON ``{"detail", "status_code"}``; page routes guarded by
require_browser_user send guests to the GitHub login instead. Request ids are
logged but never returned to clients.
"""

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse

from core.constants import LOGIN_PATH
from core.logging import get_logger

from .auth.dependencies import LoginRequired

logger = get_logger("backend.errors")


def _request_id() -> str:
    return structlog.contextvars.get_contextvars().get("request_id", "-")


def _error_response(status_code: int, detail: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "status_code": status_code},
        headers=headers,
    )


async def _login_required(request: Request, exc: LoginRequired) -> RedirectResponse:
    logger.info("login_required", path=request.url.path)
    return RedirectResponse(url=LOGIN_PATH, status_code=status.HTTP_302_FOUND)


async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
    logger.warning(
        "http_exception",
        path=request.url.path,
        status_code=exc.status_code,
        detail=exc.detail,
        request_id=_request_id(),
    )
    return _error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("request_validation_failed", path=request.url.path, errors=exc.errors())
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, "Invalid request parameters")


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled_exception",
        path=request.url.path,
        error_type=type(exc).__name__,
        request_id=_request_id(),
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LoginRequired, _login_required)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error)
