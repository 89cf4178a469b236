"""
Request Dependencies
====================
Admission control, body parsing and service lookup shared by the routers.
"""

from typing import Any, Callable, Awaitable

from fastapi import Request
import structlog

from vortex_core.client_ip import resolve_client_ip
from vortex_core.errors import ConfigError, InvalidRequestError, RateLimitedError
from vortex_core.rate_limit import SlidingWindowRateLimiter
from vortex_core.services import IPReputationService, URLReputationService

logger = structlog.get_logger(__name__)

# Keys into app.state.rate_limiters
IP_REPUTATION_LIMITER = "check-ip-threat"
URL_REPUTATION_LIMITER = "scan-url"
VISITOR_IP_LIMITER = "get-visitor-ip"


def enforce_rate_limit(limiter_name: str) -> Callable[[Request], Awaitable[str]]:
    """
    Build a dependency that admits the caller or raises RateLimitedError.

    The dependency resolves to the client IP used as the rate-limit key.
    """
    async def _admit(request: Request) -> str:
        client_ip = resolve_client_ip(request.headers)
        limiter: SlidingWindowRateLimiter = request.app.state.rate_limiters[limiter_name]
        if not limiter.admit(client_ip):
            logger.warning("rate_limit_exceeded", client_ip=client_ip, limiter=limiter_name)
            raise RateLimitedError()
        return client_ip

    return _admit


async def read_json_body(request: Request) -> Any:
    """Decode the request body, raising INVALID_REQUEST when it is not JSON."""
    try:
        return await request.json()
    except ValueError as e:
        raise InvalidRequestError() from e


def body_field(payload: Any, name: str) -> Any:
    return payload.get(name) if isinstance(payload, dict) else None


def get_ip_service(request: Request) -> IPReputationService:
    return request.app.state.ip_service


def get_url_service(request: Request) -> URLReputationService:
    service = request.app.state.url_service
    if service is None:
        logger.error("virustotal_api_key_missing")
        raise ConfigError()
    return service
