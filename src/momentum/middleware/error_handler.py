"""Global error handlers: every error leaves the API in one JSON envelope.

    {"statusCode": 404, "message": "...", "traceId": "...", "timestamp": "...", "details": [...]}

`details` is present only for request validation failures.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from momentum.middleware.request_id import REQUEST_ID_HEADER

logger = structlog.get_logger()

INTERNAL_ERROR_MESSAGE = "An internal server error occurred"
VALIDATION_ERROR_MESSAGE = "Validation failed"


def _trace_id(request: Request) -> str:
    trace_id = getattr(request.state, "request_id", None)
    if trace_id is None:
        trace_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = trace_id
    return trace_id


def error_response(
    request: Request,
    status_code: int,
    message: str,
    details: list[str] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render the error envelope with the request's trace id."""
    trace_id = _trace_id(request)
    content: dict[str, Any] = {
        "statusCode": status_code,
        "message": message,
        "traceId": trace_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details is not None:
        content["details"] = details
    return JSONResponse(
        status_code=status_code,
        content=content,
        headers={**(headers or {}), REQUEST_ID_HEADER: trace_id},
    )


def validation_messages(exc: RequestValidationError) -> list[str]:
    """Flatten pydantic errors into 'field: message' strings."""
    messages: list[str] = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc)
        messages.append(f"{field}: {error['msg']}" if field else error["msg"])
    return messages


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return error_response(request, exc.status_code, message, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return error_response(request, 400, VALIDATION_ERROR_MESSAGE, details=validation_messages(exc))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions. The response never carries exception details."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            trace_id=_trace_id(request),
            error=str(exc),
            exc_info=exc,
        )
        return error_response(request, 500, INTERNAL_ERROR_MESSAGE)
