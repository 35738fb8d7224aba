"""Standardized error responses and the domain error taxonomy."""
from typing import Any

import sentry_sdk
import structlog
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error envelope returned by all API error handlers."""
    error: str
    message: str
    detail: Any = None
    request_id: str = "unknown"

logger = structlog.get_logger()


class QuestVerifyError(Exception):
    """Base for errors that map onto a client-facing status code."""

    status_code = 400
    error = "bad_request"

    def __init__(self, message: str, detail: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class SubmissionValidationError(QuestVerifyError):
    """Malformed or missing submission fields; raised before any computation."""

    status_code = 400
    error = "invalid_submission"


class QuestNotFoundError(QuestVerifyError):
    status_code = 404
    error = "quest_not_found"


class ProfileNotFoundError(QuestVerifyError):
    status_code = 404
    error = "profile_not_found"


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", "unknown")


async def domain_exception_handler(request: Request, exc: QuestVerifyError) -> JSONResponse:
    """Render client errors (validation / not-found) in the standard envelope."""
    request_id = _request_id(request)

    logger.info(
        "client_error",
        error=exc.error,
        message=exc.message,
        path=request.url.path,
        request_id=request_id,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.error,
            message=exc.message,
            detail=exc.detail,
            request_id=request_id,
        ).model_dump(),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch unhandled exceptions and return a consistent JSON envelope."""
    request_id = _request_id(request)

    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        request_id=request_id,
    )

    sentry_sdk.capture_exception(exc)

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Our team has been notified.",
            "request_id": request_id,
        },
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Standardize HTTPException responses into the same JSON envelope."""
    request_id = _request_id(request)

    if isinstance(exc.detail, dict):
        error = exc.detail.get("error", f"http_{exc.status_code}")
        message = exc.detail.get("message", str(exc.detail))
        detail: Any = exc.detail.get("detail")
    else:
        error = f"http_{exc.status_code}"
        message = str(exc.detail)
        detail = exc.detail

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": error,
            "message": message,
            "detail": detail,
            "request_id": request_id,
        },
        headers=dict(exc.headers or {}),
    )
