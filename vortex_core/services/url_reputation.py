"""
URL Reputation Service
======================
Looks up or submits a URL with VirusTotal and normalizes engine verdicts.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

import structlog

from vortex_core.errors import UpstreamError
from vortex_core.models import URLScanResult, utc_isoformat
from vortex_core.providers import ProviderError, ProviderNotFoundError, VirusTotalClient

from .verdicts import (
    build_scan_stats,
    classify_scan,
    compute_threat_score,
    extract_categories,
    extract_flagged_engines,
)

logger = structlog.get_logger(__name__)

DEFAULT_POLL_DELAY = 2.0


def _attributes(report: Dict[str, Any]) -> Dict[str, Any]:
    data = report.get("data")
    if not isinstance(data, dict):
        return {}
    attributes = data.get("attributes")
    return attributes if isinstance(attributes, dict) else {}


def _epoch_to_iso(value: Any) -> Optional[str]:
    if not value:
        return None
    try:
        return utc_isoformat(datetime.fromtimestamp(float(value), tz=timezone.utc))
    except (TypeError, ValueError, OverflowError, OSError):
        return None


class URLReputationService:
    """
    Two-step URL scan against VirusTotal.

    1. Fetch the stored report for the URL.
    2. If VirusTotal has never seen it, submit it, wait ``poll_delay``
       seconds once, and read the analysis. An analysis that is still
       running at that point yields partial (possibly empty) stats, which
       are returned as final.

    Unlike the IP service this cannot degrade: a failed lookup or
    submission raises UpstreamError.
    """

    def __init__(
        self,
        scanner: VirusTotalClient,
        poll_delay: float = DEFAULT_POLL_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.scanner = scanner
        self.poll_delay = poll_delay
        self._sleep = sleep

    async def _fetch_report(self, url: str) -> Dict[str, Any]:
        try:
            return await self.scanner.get_url_report(url)
        except ProviderNotFoundError:
            logger.info("url_not_indexed", url=url[:50])
            return await self._submit_and_poll(url)
        except ProviderError as e:
            logger.error(
                "url_lookup_failed",
                provider=e.provider,
                reason=e.reason,
                status_code=e.status_code,
                error=e.message,
            )
            raise UpstreamError("Unable to retrieve scan results", code="LOOKUP_ERROR") from e

    async def _submit_and_poll(self, url: str) -> Dict[str, Any]:
        try:
            analysis_id = await self.scanner.submit_url(url)
        except ProviderError as e:
            logger.error(
                "url_submit_failed",
                provider=e.provider,
                reason=e.reason,
                status_code=e.status_code,
                error=e.message,
            )
            raise UpstreamError("Unable to scan URL at this time", code="SCAN_ERROR") from e

        if not analysis_id:
            logger.warning("url_submit_missing_analysis_id", url=url[:50])
            return {}

        await self._sleep(self.poll_delay)

        try:
            return await self.scanner.get_analysis(analysis_id)
        except ProviderError as e:
            logger.warning(
                "analysis_fetch_failed",
                analysis_id=analysis_id,
                status_code=e.status_code,
                error=e.message,
            )
            return {}

    async def scan(self, url: str) -> URLScanResult:
        """
        Scan an already validated URL.

        Raises:
            UpstreamError: LOOKUP_ERROR or SCAN_ERROR when VirusTotal fails
        """
        logger.info("url_scan_started", url=url[:50])
        attributes = _attributes(await self._fetch_report(url))

        stats = build_scan_stats(
            attributes.get("last_analysis_stats") or attributes.get("stats")
        )
        threat_score = compute_threat_score(stats)
        threat_level = classify_scan(stats, threat_score)
        flagged = extract_flagged_engines(
            attributes.get("last_analysis_results") or attributes.get("results")
        )

        logger.info(
            "url_scan_complete",
            threat_level=threat_level.value,
            malicious=stats.malicious,
            suspicious=stats.suspicious,
            total_engines=stats.total_engines,
        )
        return URLScanResult(
            url=url,
            threat_level=threat_level,
            threat_score=threat_score,
            stats=stats,
            flagged_engines=flagged,
            categories=extract_categories(attributes.get("categories")),
            last_analysis_date=_epoch_to_iso(attributes.get("last_analysis_date")),
        )
