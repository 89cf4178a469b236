"""
CORS Policy Middleware
======================
Applies CorsPolicy headers to every response and answers preflights.
"""

from typing import Callable, Awaitable, Dict, Optional, Sequence

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import structlog

from .policy import CorsPolicy, POST_METHODS

logger = structlog.get_logger(__name__)


class CorsPolicyMiddleware(BaseHTTPMiddleware):
    """
    Middleware enforcing the origin policy for all handlers.

    ``OPTIONS`` requests are short-circuited with an empty 200 response
    carrying only the CORS headers. Other requests pass through and get
    the same headers added, whatever their status.
    """

    def __init__(
        self,
        app,
        policy: Optional[CorsPolicy] = None,
        route_methods: Optional[Dict[str, Sequence[str]]] = None,
        default_methods: Sequence[str] = POST_METHODS,
    ):
        """
        Args:
            app: ASGI application
            policy: Origin policy (defaults to local development origins)
            route_methods: Advertised methods per request path
            default_methods: Methods advertised for paths not in route_methods
        """
        super().__init__(app)
        self.policy = policy or CorsPolicy()
        self.route_methods = dict(route_methods or {})
        self.default_methods = tuple(default_methods)

    def _methods_for(self, path: str) -> Sequence[str]:
        return self.route_methods.get(path.rstrip("/") or "/", self.default_methods)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        origin = request.headers.get("origin")
        cors_headers = self.policy.headers_for(origin, self._methods_for(request.url.path))

        if origin and not self.policy.is_allowed(origin):
            logger.info("cors_origin_rejected", origin=origin, path=request.url.path)

        if request.method == "OPTIONS":
            return Response(status_code=200, headers=cors_headers)

        response = await call_next(request)
        response.headers.update(cors_headers)
        return response
