"""
Application Factory
===================
Assembles the FastAPI app: routers, error envelope, CORS guard,
per-handler rate limiters and the shared upstream HTTP client.

Usage:
    from vortex_core.app import create_app

    app = create_app()  # Settings.from_env()
"""

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI
import httpx
import structlog

from vortex_core import __version__
from vortex_core.api import (
    create_health_router,
    ip_reputation_router,
    url_reputation_router,
    visitor_ip_router,
)
from vortex_core.api.deps import (
    IP_REPUTATION_LIMITER,
    URL_REPUTATION_LIMITER,
    VISITOR_IP_LIMITER,
)
from vortex_core.config import Settings
from vortex_core.cors import CorsPolicy, CorsPolicyMiddleware, GET_POST_METHODS, POST_METHODS
from vortex_core.errors import register_exception_handlers
from vortex_core.logging import RequestLoggingMiddleware, setup_logging
from vortex_core.middleware import ErrorEnvelopeMiddleware
from vortex_core.providers import AbuseIPDBClient, IpApiClient, VirusTotalClient
from vortex_core.rate_limit import SlidingWindowRateLimiter
from vortex_core.services import IPReputationService, URLReputationService

logger = structlog.get_logger(__name__)

ROUTE_METHODS = {
    "/check-ip-threat": POST_METHODS,
    "/scan-url": POST_METHODS,
    "/get-visitor-ip": GET_POST_METHODS,
    "/health": ("GET", "OPTIONS"),
    "/health/live": ("GET", "OPTIONS"),
}


def build_rate_limiters(settings: Settings) -> Dict[str, SlidingWindowRateLimiter]:
    """One limiter per handler; the visitor IP handler makes no upstream call."""
    window = settings.rate_limit_window
    return {
        IP_REPUTATION_LIMITER: SlidingWindowRateLimiter(
            settings.ip_rate_limit, window, name=IP_REPUTATION_LIMITER
        ),
        URL_REPUTATION_LIMITER: SlidingWindowRateLimiter(
            settings.url_rate_limit, window, name=URL_REPUTATION_LIMITER
        ),
        VISITOR_IP_LIMITER: SlidingWindowRateLimiter(
            settings.visitor_rate_limit, window, name=VISITOR_IP_LIMITER
        ),
    }


def build_services(app: FastAPI, client: httpx.AsyncClient) -> None:
    """Attach the reputation services to ``app.state``."""
    settings: Settings = app.state.settings

    abuse = None
    if settings.abuseipdb_api_key:
        abuse = AbuseIPDBClient(client, settings.abuseipdb_api_key, settings.abuseipdb_base_url)
    else:
        logger.warning("abuseipdb_api_key_missing", effect="ip reputation without abuse data")

    app.state.ip_service = IPReputationService(
        geolocation=IpApiClient(client, settings.ip_api_base_url),
        abuse=abuse,
    )

    app.state.url_service = None
    if settings.virustotal_api_key:
        scanner = VirusTotalClient(client, settings.virustotal_api_key, settings.virustotal_base_url)
        app.state.url_service = URLReputationService(scanner, poll_delay=settings.scan_poll_delay)
    else:
        logger.warning("virustotal_api_key_missing", effect="url scans return CONFIG_ERROR")


async def sweep_rate_limits(limiters: Dict[str, SlidingWindowRateLimiter], interval: float) -> None:
    """Periodically evict expired rate-limit records."""
    while True:
        await asyncio.sleep(interval)
        for limiter in limiters.values():
            limiter.sweep()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    client = httpx.AsyncClient(
        timeout=settings.upstream_timeout,
        transport=app.state.transport,
        headers={"User-Agent": f"{settings.service_name}/{__version__}"},
    )
    build_services(app, client)

    sweeper: Optional[asyncio.Task] = None
    if settings.rate_limit_sweep_interval > 0:
        sweeper = asyncio.create_task(
            sweep_rate_limits(app.state.rate_limiters, settings.rate_limit_sweep_interval)
        )

    logger.info("service_started", service=settings.service_name, version=__version__)
    try:
        yield
    finally:
        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
        await client.aclose()
        logger.info("service_stopped", service=settings.service_name)


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """
    Create the threat intelligence API.

    Args:
        settings: Configuration (defaults to Settings.from_env())
        transport: httpx transport for upstream calls (tests inject a mock)
        configure_logging: Install the structlog configuration

    Returns:
        FastAPI application; rate-limit state is owned by this instance
    """
    settings = settings or Settings.from_env()
    if configure_logging:
        setup_logging(settings.service_name, settings.log_level, settings.log_json)

    app = FastAPI(
        title="Vortex Threat Intelligence API",
        version=__version__,
        lifespan=lifespan,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
    )
    app.state.settings = settings
    app.state.transport = transport
    app.state.rate_limiters = build_rate_limiters(settings)
    app.state.ip_service = None
    app.state.url_service = None

    register_exception_handlers(app)

    app.include_router(ip_reputation_router)
    app.include_router(url_reputation_router)
    app.include_router(visitor_ip_router)
    app.include_router(create_health_router(settings.service_name, __version__))

    # Added innermost first: errors -> CORS -> request logging
    app.add_middleware(ErrorEnvelopeMiddleware)
    app.add_middleware(
        CorsPolicyMiddleware,
        policy=CorsPolicy(
            allowed_origins=settings.allowed_origins,
            trusted_suffixes=settings.trusted_origin_suffixes,
        ),
        route_methods=ROUTE_METHODS,
    )
    app.add_middleware(RequestLoggingMiddleware)

    return app
