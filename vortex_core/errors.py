"""
API Error Standards
===================
Client-facing error envelope and the exception types that produce it.

Every failure body is ``{"error": <message>, "code": <CODE>}``. Messages are
generic; technical detail goes to the server log only.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

logger = structlog.get_logger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"


class ApiError(Exception):
    """Base class for errors rendered as a JSON envelope."""
    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    message: str = GENERIC_ERROR_MESSAGE

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None):
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        super().__init__(f"[{self.code}] {self.message}")


class InvalidRequestError(ApiError):
    """Request body is not valid JSON."""
    status_code = 400
    code = "INVALID_REQUEST"
    message = "Invalid request body"


class RequestValidationFailed(ApiError):
    """Input did not pass the reputation validator."""
    status_code = 400
    code = "VALIDATION_ERROR"
    message = "Validation failed"


class NotFoundError(ApiError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Not found"


class MethodNotAllowedError(ApiError):
    status_code = 405
    code = "METHOD_NOT_ALLOWED"
    message = "Method not allowed"


class RateLimitedError(ApiError):
    status_code = 429
    code = "RATE_LIMITED"
    message = "Too many requests. Please try again later."


class UpstreamError(ApiError):
    """A required upstream provider call failed."""
    status_code = 502
    code = "LOOKUP_ERROR"
    message = "Unable to retrieve scan results"


class ConfigError(ApiError):
    """A required provider credential is missing."""
    status_code = 503
    code = "CONFIG_ERROR"
    message = "Service temporarily unavailable"


def error_response(
    message: str,
    code: str,
    status_code: int,
    headers: Optional[dict] = None,
) -> JSONResponse:
    """Build the standard ``{error, code}`` JSON response."""
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "code": code},
        headers=headers,
    )


def internal_error_response() -> JSONResponse:
    return error_response(GENERIC_ERROR_MESSAGE, "INTERNAL_ERROR", 500)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request_failed",
            path=request.url.path,
            code=exc.code,
            status_code=exc.status_code,
        )
    return error_response(exc.message, exc.code, exc.status_code)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Map routing errors (unknown path, wrong method) onto the envelope."""
    if exc.status_code == 405:
        err = MethodNotAllowedError()
    elif exc.status_code == 404:
        err = NotFoundError()
    else:
        return error_response(str(exc.detail), "HTTP_ERROR", exc.status_code)
    return error_response(err.message, err.code, err.status_code, headers=exc.headers)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return error_response(InvalidRequestError.message, InvalidRequestError.code, 400)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope handlers on a FastAPI application."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
