"""Error envelope for the allocation API.

Every failure leaves the service as ``{error, message, detail, request_id}``.
The request id is the one TenantMiddleware bound to the structlog context, so
a response can be matched to its log lines.
"""
from typing import Any

import sentry_sdk
import structlog
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from structlog.contextvars import get_contextvars

from app.core.exceptions import DomainError

logger = structlog.get_logger()


class ErrorResponse(BaseModel):
    error: str
    message: str
    detail: Any = None
    request_id: str = "unknown"


def _request_id(request: Request) -> str:
    bound = get_contextvars().get("request_id")
    return bound or request.headers.get("x-request-id", "unknown")


def _envelope(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    detail: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            message=message,
            detail=detail,
            request_id=_request_id(request),
        ).model_dump(),
        headers=headers,
    )


async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    """NotFound, BadRequest and Conflict raised by the allocation service."""
    logger.info(
        "allocation_request.rejected",
        error=exc.error,
        message=exc.message,
        path=request.url.path,
        method=request.method,
    )
    return _envelope(request, exc.status_code, exc.error, exc.message, exc.message)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Bearer auth failures and other framework-level HTTP errors."""
    message = str(exc.detail)
    return _envelope(
        request,
        exc.status_code,
        f"http_{exc.status_code}",
        message,
        exc.detail,
        headers=dict(exc.headers or {}),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "allocation_request.failed",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
    )
    sentry_sdk.capture_exception(exc)
    return _envelope(
        request,
        500,
        "internal_server_error",
        "An unexpected error occurred while processing the allocation request.",
    )
