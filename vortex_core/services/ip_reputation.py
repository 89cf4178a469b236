"""
IP Reputation Service
=====================
Merges abuse reports and geolocation into a ThreatIntelligence record.
"""

import asyncio
from typing import Any, Dict, Optional

from pydantic import ValidationError
import structlog

from vortex_core.models import AbuseData, Geolocation, ThreatIntelligence
from vortex_core.providers import AbuseIPDBClient, IpApiClient, ProviderError

from .verdicts import classify_abuse_score

logger = structlog.get_logger(__name__)


def build_abuse_data(data: Dict[str, Any]) -> AbuseData:
    score = data.get("abuseConfidenceScore")
    return AbuseData(
        confidence_score=clamp_score(score),
        total_reports=data.get("totalReports"),
        is_tor=data.get("isTor"),
        isp=data.get("isp"),
        domain=data.get("domain"),
        usage_type=data.get("usageType"),
        last_reported_at=data.get("lastReportedAt"),
        country_code=data.get("countryCode"),
        is_whitelisted=data.get("isWhitelisted"),
    )


def build_geolocation(data: Dict[str, Any]) -> Geolocation:
    return Geolocation(
        country=data.get("country"),
        country_code=data.get("countryCode"),
        region=data.get("regionName"),
        city=data.get("city"),
        lat=data.get("lat"),
        lon=data.get("lon"),
        isp=data.get("isp"),
        org=data.get("org"),
        timezone=data.get("timezone"),
    )


def clamp_score(score: Any) -> int:
    try:
        return min(100, max(0, int(score or 0)))
    except (TypeError, ValueError):
        return 0


class IPReputationService:
    """
    Looks up an IP with the abuse and geolocation providers.

    Both calls run concurrently and fail independently: a provider that
    errors contributes ``None`` instead of failing the request. The abuse
    lookup is skipped entirely when no AbuseIPDB client is configured.
    """

    def __init__(
        self,
        geolocation: IpApiClient,
        abuse: Optional[AbuseIPDBClient] = None,
    ):
        self.geolocation = geolocation
        self.abuse = abuse

    async def _fetch_abuse(self, ip: str) -> Optional[AbuseData]:
        if self.abuse is None:
            return None
        try:
            return build_abuse_data(await self.abuse.check(ip))
        except ProviderError as e:
            logger.warning(
                "abuse_lookup_failed",
                ip=ip,
                provider=e.provider,
                reason=e.reason,
                status_code=e.status_code,
                error=e.message,
            )
            return None
        except ValidationError as e:
            logger.warning("abuse_payload_invalid", ip=ip, error=str(e))
            return None

    async def _fetch_geolocation(self, ip: str) -> Optional[Geolocation]:
        try:
            return build_geolocation(await self.geolocation.lookup(ip))
        except ProviderError as e:
            logger.warning(
                "geolocation_lookup_failed",
                ip=ip,
                provider=e.provider,
                reason=e.reason,
                status_code=e.status_code,
                error=e.message,
            )
            return None
        except ValidationError as e:
            logger.warning("geolocation_payload_invalid", ip=ip, error=str(e))
            return None

    async def check(self, ip: str) -> ThreatIntelligence:
        """
        Evaluate an already validated IP address.

        Returns:
            ThreatIntelligence; threat level and risk score come from the
            abuse score alone, geolocation is informational
        """
        abuse_data, geolocation = await asyncio.gather(
            self._fetch_abuse(ip),
            self._fetch_geolocation(ip),
        )

        risk_score = abuse_data.confidence_score if abuse_data else 0
        threat_level = classify_abuse_score(abuse_data.confidence_score if abuse_data else None)

        logger.info(
            "ip_reputation_checked",
            ip=ip,
            threat_level=threat_level.value,
            risk_score=risk_score,
            abuse_data=abuse_data is not None,
            geolocation=geolocation is not None,
        )
        return ThreatIntelligence(
            ip=ip,
            threat_level=threat_level,
            risk_score=risk_score,
            abuse_data=abuse_data,
            geolocation=geolocation,
        )
