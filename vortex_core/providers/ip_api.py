"""
ip-api.com Provider
===================
Keyless IP geolocation.
"""

from typing import Any, Dict
from urllib.parse import quote

import httpx

from vortex_core.config import IP_API_BASE_URL

from .base import BaseProviderClient
from .exceptions import ProviderResponseError

GEO_FIELDS = (
    "status,message,country,countryCode,region,regionName,city,zip,"
    "lat,lon,timezone,isp,org,as,query"
)


class IpApiClient(BaseProviderClient):
    """Client for the free ip-api.com JSON endpoint."""

    name = "ip-api"

    def __init__(self, client: httpx.AsyncClient, base_url: str = IP_API_BASE_URL):
        super().__init__(client, base_url)

    async def lookup(self, ip: str) -> Dict[str, Any]:
        """
        Geolocate an IP.

        ip-api answers 200 with ``status: "fail"`` for private or reserved
        ranges; that is reported as a ProviderResponseError.
        """
        payload = await self.get(f"/json/{quote(ip, safe='')}", params={"fields": GEO_FIELDS})
        if payload.get("status") != "success":
            raise ProviderResponseError(
                f"Lookup failed: {payload.get('message', 'unknown reason')}",
                provider=self.name,
            )
        return payload
