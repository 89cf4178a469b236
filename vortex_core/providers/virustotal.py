"""
VirusTotal Provider
===================
Multi-engine URL reputation via the VirusTotal v3 API.
"""

import base64
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from vortex_core.config import VIRUSTOTAL_BASE_URL

from .base import BaseProviderClient


def url_identifier(url: str) -> str:
    """VirusTotal URL id: unpadded URL-safe base64 of the raw URL."""
    return base64.urlsafe_b64encode(url.encode("utf-8")).decode("ascii").rstrip("=")


class VirusTotalClient(BaseProviderClient):
    """Client for the VirusTotal ``urls`` and ``analyses`` endpoints."""

    name = "virustotal"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        base_url: str = VIRUSTOTAL_BASE_URL,
    ):
        super().__init__(client, base_url, headers={"x-apikey": api_key})

    async def get_url_report(self, url: str) -> Dict[str, Any]:
        """
        Fetch the stored analysis for a URL.

        Raises:
            ProviderNotFoundError: when VirusTotal has never seen the URL
        """
        return await self.get(f"/urls/{url_identifier(url)}")

    async def submit_url(self, url: str) -> Optional[str]:
        """Queue a URL for scanning and return the analysis id, if any."""
        payload = await self.post_form("/urls", data={"url": url})
        data = payload.get("data") or {}
        return data.get("id") if isinstance(data, dict) else None

    async def get_analysis(self, analysis_id: str) -> Dict[str, Any]:
        return await self.get(f"/analyses/{quote(analysis_id, safe='')}")
