"""
Error Envelope Middleware
=========================
Converts uncaught exceptions into the standard JSON error body.
"""

from typing import Callable, Awaitable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import structlog

from vortex_core.errors import internal_error_response

logger = structlog.get_logger(__name__)


class ErrorEnvelopeMiddleware(BaseHTTPMiddleware):
    """
    Catches anything the route handlers did not anticipate.

    The client receives a generic 500 ``INTERNAL_ERROR`` body; the
    exception and its traceback are logged server side only. Sitting
    inside the CORS middleware means these responses still carry CORS
    headers.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception:
            logger.exception(
                "unhandled_exception",
                path=request.url.path,
                method=request.method,
            )
            return internal_error_response()
