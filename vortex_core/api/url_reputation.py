from fastapi import APIRouter, Depends, Request
import structlog

from vortex_core.errors import RequestValidationFailed
from vortex_core.models import ErrorResponse, URLScanResult
from vortex_core.validators import validate_url

from .deps import URL_REPUTATION_LIMITER, body_field, enforce_rate_limit, get_url_service, read_json_body

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["URL Reputation"])


@router.post(
    "/scan-url",
    response_model=URLScanResult,
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def scan_url(
    request: Request,
    client_ip: str = Depends(enforce_rate_limit(URL_REPUTATION_LIMITER)),
) -> URLScanResult:
    """Multi-engine reputation for a URL."""
    payload = await read_json_body(request)
    url = body_field(payload, "url")

    validation = validate_url(url)
    if not validation:
        raise RequestValidationFailed(validation.error)

    service = get_url_service(request)
    logger.info("url_scan_requested", client_ip=client_ip)
    return await service.scan(url)
