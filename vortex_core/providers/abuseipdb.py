"""
AbuseIPDB Provider
==================
Abuse confidence lookups for IP addresses.
"""

from typing import Any, Dict, Optional

import httpx
import structlog

from vortex_core.config import ABUSEIPDB_BASE_URL

from .base import BaseProviderClient
from .exceptions import ProviderResponseError

logger = structlog.get_logger(__name__)

MAX_AGE_IN_DAYS = 90


class AbuseIPDBClient(BaseProviderClient):
    """Client for the AbuseIPDB v2 ``check`` endpoint."""

    name = "abuseipdb"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        base_url: str = ABUSEIPDB_BASE_URL,
    ):
        super().__init__(client, base_url, headers={"Key": api_key})

    async def check(self, ip: str, max_age_days: int = MAX_AGE_IN_DAYS) -> Dict[str, Any]:
        """
        Fetch the abuse report for an IP.

        Returns:
            The ``data`` object of the response (abuseConfidenceScore,
            totalReports, isTor, isp, ...)

        Raises:
            ProviderError: on any network, status or payload failure
        """
        payload = await self.get(
            "/check",
            params={
                "ipAddress": ip,
                "maxAgeInDays": max_age_days,
                "verbose": "true",
            },
        )
        data: Optional[Dict[str, Any]] = payload.get("data")
        if not isinstance(data, dict):
            raise ProviderResponseError("Missing data object", provider=self.name)
        logger.debug("abuseipdb_score", ip=ip, score=data.get("abuseConfidenceScore"))
        return data
