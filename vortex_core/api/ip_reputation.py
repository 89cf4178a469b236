from fastapi import APIRouter, Depends, Request
import structlog

from vortex_core.errors import RequestValidationFailed
from vortex_core.models import ErrorResponse, ThreatIntelligence
from vortex_core.validators import validate_ip

from .deps import IP_REPUTATION_LIMITER, body_field, enforce_rate_limit, get_ip_service, read_json_body

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["IP Reputation"])


@router.post(
    "/check-ip-threat",
    response_model=ThreatIntelligence,
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
    },
)
async def check_ip_threat(
    request: Request,
    client_ip: str = Depends(enforce_rate_limit(IP_REPUTATION_LIMITER)),
) -> ThreatIntelligence:
    """Abuse score and geolocation for an IP address."""
    payload = await read_json_body(request)
    ip = body_field(payload, "ip")

    validation = validate_ip(ip)
    if not validation:
        raise RequestValidationFailed(validation.error)

    ip = ip.strip()
    logger.info("ip_reputation_requested", ip=ip, client_ip=client_ip)
    return await get_ip_service(request).check(ip)
