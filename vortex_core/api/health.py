"""
Health Check Router
===================
Liveness and configuration status for the service.
"""

import time
from enum import Enum
from typing import Dict, Optional

from fastapi import APIRouter, Request

from vortex_core.models import WireModel


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"


class ComponentHealth(WireModel):
    status: str
    tracked_clients: Optional[int] = None


class HealthResponse(WireModel):
    status: HealthStatus
    service: str
    version: str
    components: Dict[str, ComponentHealth]
    timestamp: float


def _credential_status(value: Optional[str]) -> ComponentHealth:
    return ComponentHealth(status="configured" if value else "not_configured")


def create_health_router(service_name: str, version: str = "1.0.0") -> APIRouter:
    """
    Create the health router.

    Args:
        service_name: Reported service name
        version: Reported service version

    Returns:
        Router with /health and /health/live
    """
    router = APIRouter(tags=["Health"])

    @router.get("/health", response_model=HealthResponse)
    async def health_check(request: Request) -> HealthResponse:
        """Provider credential status and rate-limit table sizes."""
        settings = request.app.state.settings
        components: Dict[str, ComponentHealth] = {
            "abuseipdb": _credential_status(settings.abuseipdb_api_key),
            "virustotal": _credential_status(settings.virustotal_api_key),
        }
        for name, limiter in request.app.state.rate_limiters.items():
            components[f"rate_limit:{name}"] = ComponentHealth(
                status="ok", tracked_clients=len(limiter)
            )

        # URL scanning cannot work without its credential
        overall = HealthStatus.HEALTHY if settings.virustotal_api_key else HealthStatus.DEGRADED

        return HealthResponse(
            status=overall,
            service=service_name,
            version=version,
            components=components,
            timestamp=time.time(),
        )

    @router.get("/health/live")
    async def liveness_probe():
        return {"status": "alive"}

    return router
