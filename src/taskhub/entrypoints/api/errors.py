"""Mapping of business errors to HTTP responses.

The single place where error kinds become status codes.
"""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from taskhub.core.exceptions import ErrorKind, TaskhubError

logger = structlog.get_logger()

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.EMAIL_EXISTS: 409,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.INVALID_TOKEN: 401,
    ErrorKind.TOKEN_EXPIRED: 401,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.ALREADY_MEMBER: 409,
    ErrorKind.LAST_ADMIN: 400,
}


def error_body(code: str, message: str) -> dict[str, Any]:
    """Build the error envelope."""
    return {"success": False, "error": {"code": code, "message": message}}


def success_body(data: Any) -> dict[str, Any]:
    """Build the success envelope."""
    return {"success": True, "data": data}


async def taskhub_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a TaskhubError with the status its kind maps to."""
    assert isinstance(exc, TaskhubError)
    status_code = STATUS_BY_KIND[exc.kind]
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.code or exc.kind.value, exc.message),
        headers=headers,
    )


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render request body and parameter validation failures as a 400."""
    assert isinstance(exc, RequestValidationError)
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"{field}: {first.get('msg', 'invalid')}" if field else "Invalid request"
    return JSONResponse(status_code=400, content=error_body("VALIDATION_ERROR", message))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render anything unexpected as an opaque 500."""
    logger.exception("unhandled_error", path=request.url.path)
    return JSONResponse(
        status_code=500,
        content=error_body("SERVER_ERROR", "Internal server error"),
    )


def install_error_handlers(app: FastAPI) -> None:
    """Register the error handlers on an app."""
    app.add_exception_handler(TaskhubError, taskhub_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
