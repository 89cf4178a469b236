from fastapi import APIRouter, Depends
import structlog

from vortex_core.models import ErrorResponse, VisitorIPResponse

from .deps import VISITOR_IP_LIMITER, enforce_rate_limit

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Visitor IP"])


@router.api_route(
    "/get-visitor-ip",
    methods=["GET", "POST"],
    response_model=VisitorIPResponse,
    responses={429: {"model": ErrorResponse}},
)
async def get_visitor_ip(
    client_ip: str = Depends(enforce_rate_limit(VISITOR_IP_LIMITER)),
) -> VisitorIPResponse:
    """Echo the caller's public IP as seen through the edge proxy headers."""
    logger.info("visitor_ip_detected", ip=client_ip)
    return VisitorIPResponse(ip=client_ip)
