"""
Tests for the IP and URL reputation services.
"""

import httpx
import pytest

from vortex_core.errors import UpstreamError
from vortex_core.models import ThreatLevel
from vortex_core.providers import AbuseIPDBClient, IpApiClient, VirusTotalClient
from vortex_core.services import IPReputationService, URLReputationService

from conftest import ABUSEIPDB_HOST, IP_API_HOST, VIRUSTOTAL_HOST, abuse_payload, geo_payload, vt_report

SCAN_URL = "https://phish.example.com/login"


def ip_service(http, with_abuse=True) -> IPReputationService:
    return IPReputationService(
        geolocation=IpApiClient(http),
        abuse=AbuseIPDBClient(http, "abuse-key") if with_abuse else None,
    )


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class TestIPReputationService:
    """Tests for IPReputationService."""

    @pytest.mark.asyncio
    async def test_merges_both_providers(self, upstream):
        upstream.add("GET", ABUSEIPDB_HOST, "/api/v2/check", json=abuse_payload(85))
        upstream.add("GET", IP_API_HOST, "/json/", json=geo_payload())

        async with httpx.AsyncClient(transport=upstream.transport) as http:
            result = await ip_service(http).check("185.220.101.1")

        assert result.threat_level == ThreatLevel.CRITICAL
        assert result.risk_score == 85
        assert result.abuse_data.is_tor is True
        assert result.abuse_data.total_reports == 1204
        assert result.abuse_data.usage_type == "Data Center/Web Hosting/Transit"
        assert result.geolocation.region == "Berlin"
        assert result.geolocation.country_code == "DE"
        assert result.checked_at.endswith("Z")

    @pytest.mark.asyncio
    async def test_low_score_is_safe(self, upstream):
        upstream.add("GET", ABUSEIPDB_HOST, "/api/v2/check", json=abuse_payload(15))
        upstream.add("GET", IP_API_HOST, "/json/", json=geo_payload())

        async with httpx.AsyncClient(transport=upstream.transport) as http:
            result = await ip_service(http).check("185.220.101.1")

        assert result.threat_level == ThreatLevel.SAFE
        assert result.risk_score == 15

    @pytest.mark.asyncio
    async def test_abuse_failure_degrades(self, upstream):
        """Should still answer with geolocation when the abuse lookup fails."""
        upstream.add("GET", ABUSEIPDB_HOST, "/api/v2/check", json={}, status=500)
        upstream.add("GET", IP_API_HOST, "/json/", json=geo_payload())

        async with httpx.AsyncClient(transport=upstream.transport) as http:
            result = await ip_service(http).check("185.220.101.1")

        assert result.abuse_data is None
        assert result.threat_level == ThreatLevel.SAFE
        assert result.risk_score == 0
        assert result.geolocation.city == "Berlin"

    @pytest.mark.asyncio
    async def test_geolocation_failure_degrades(self, upstream):
        upstream.add("GET", ABUSEIPDB_HOST, "/api/v2/check", json=abuse_payload(65))

        async with httpx.AsyncClient(transport=upstream.transport) as http:
            result = await ip_service(http).check("185.220.101.1")

        assert result.geolocation is None
        assert result.threat_level == ThreatLevel.HIGH
        assert result.risk_score == 65

    @pytest.mark.asyncio
    async def test_both_providers_down(self, upstream):
        async with httpx.AsyncClient(transport=upstream.transport) as http:
            result = await ip_service(http).check("185.220.101.1")

        assert result.abuse_data is None
        assert result.geolocation is None
        assert result.threat_level == ThreatLevel.SAFE

    @pytest.mark.asyncio
    async def test_without_abuse_credential(self, upstream):
        """Should not call AbuseIPDB at all when no client is configured."""
        upstream.add("GET", IP_API_HOST, "/json/", json=geo_payload())

        async with httpx.AsyncClient(transport=upstream.transport) as http:
            result = await ip_service(http, with_abuse=False).check("185.220.101.1")

        assert result.abuse_data is None
        assert result.geolocation is not None
        assert upstream.calls(ABUSEIPDB_HOST) == []

    @pytest.mark.asyncio
    async def test_out_of_range_score_is_clamped(self, upstream):
        upstream.add("GET", ABUSEIPDB_HOST, "/api/v2/check", json=abuse_payload(140))
        upstream.add("GET", IP_API_HOST, "/json/", json=geo_payload())

        async with httpx.AsyncClient(transport=upstream.transport) as http:
            result = await ip_service(http).check("185.220.101.1")

        assert result.risk_score == 100
        assert result.threat_level == ThreatLevel.CRITICAL


class TestURLReputationService:
    """Tests for URLReputationService."""

    @pytest.mark.asyncio
    async def test_existing_report(self, upstream):
        upstream.add(
            "GET", VIRUSTOTAL_HOST, "/api/v3/urls/",
            json=vt_report(
                {"malicious": 5, "suspicious": 0, "harmless": 95, "undetected": 0},
                results={
                    "Kaspersky": {"category": "malicious", "result": "phishing"},
                    "ESET": {"category": "harmless", "result": "clean"},
                },
                categories={"Forcepoint ThreatSeeker": "phishing"},
                last_analysis_date=1700000000,
            ),
        )
        sleep = RecordingSleep()

        async with httpx.AsyncClient(transport=upstream.transport) as http:
            service = URLReputationService(VirusTotalClient(http, "vt-key"), poll_delay=2, sleep=sleep)
            result = await service.scan(SCAN_URL)

        assert result.url == SCAN_URL
        assert result.threat_level == ThreatLevel.CRITICAL
        assert result.threat_score == 5.0
        assert result.stats.total_engines == 100
        assert [e.engine for e in result.flagged_engines] == ["Kaspersky"]
        assert result.categories == {"Forcepoint ThreatSeeker": "phishing"}
        assert result.last_analysis_date == "2023-11-14T22:13:20.000Z"
        assert sleep.delays == []
        assert upstream.calls(VIRUSTOTAL_HOST, "POST") == []

    @pytest.mark.asyncio
    async def test_unknown_url_is_submitted_and_polled(self, upstream):
        """Should submit, wait once, and read the analysis."""
        upstream.add("GET", VIRUSTOTAL_HOST, "/api/v3/urls/", json={"error": {}}, status=404)
        upstream.add("POST", VIRUSTOTAL_HOST, "/api/v3/urls", json={"data": {"id": "u-abc-123"}})
        upstream.add(
            "GET", VIRUSTOTAL_HOST, "/api/v3/analyses/u-abc-123",
            json={"data": {"attributes": {
                "stats": {"malicious": 0, "suspicious": 1, "harmless": 99, "undetected": 0},
                "results": {"Sophos": {"category": "suspicious", "result": "suspicious"}},
            }}},
        )
        sleep = RecordingSleep()

        async with httpx.AsyncClient(transport=upstream.transport) as http:
            service = URLReputationService(VirusTotalClient(http, "vt-key"), poll_delay=2, sleep=sleep)
            result = await service.scan(SCAN_URL)

        assert sleep.delays == [2]
        assert result.threat_level == ThreatLevel.LOW
        assert result.threat_score == 1.0
        assert result.flagged_engines[0].engine == "Sophos"
        assert result.last_analysis_date is None

    @pytest.mark.asyncio
    async def test_analysis_still_running(self, upstream):
        """Should accept empty stats from an unfinished analysis."""
        upstream.add("GET", VIRUSTOTAL_HOST, "/api/v3/urls/", json={}, status=404)
        upstream.add("POST", VIRUSTOTAL_HOST, "/api/v3/urls", json={"data": {"id": "u-1"}})
        upstream.add(
            "GET", VIRUSTOTAL_HOST, "/api/v3/analyses/",
            json={"data": {"attributes": {"status": "queued", "stats": {}}}},
        )

        async with httpx.AsyncClient(transport=upstream.transport) as http:
            service = URLReputationService(VirusTotalClient(http, "vt-key"), sleep=RecordingSleep())
            result = await service.scan(SCAN_URL)

        assert result.threat_level == ThreatLevel.SAFE
        assert result.threat_score == 0.0
        assert result.stats.total_engines == 0
        assert result.flagged_engines == []

    @pytest.mark.asyncio
    async def test_analysis_fetch_failure_yields_empty_result(self, upstream):
        upstream.add("GET", VIRUSTOTAL_HOST, "/api/v3/urls/", json={}, status=404)
        upstream.add("POST", VIRUSTOTAL_HOST, "/api/v3/urls", json={"data": {"id": "u-1"}})
        upstream.add("GET", VIRUSTOTAL_HOST, "/api/v3/analyses/", json={}, status=500)

        async with httpx.AsyncClient(transport=upstream.transport) as http:
            service = URLReputationService(VirusTotalClient(http, "vt-key"), sleep=RecordingSleep())
            result = await service.scan(SCAN_URL)

        assert result.threat_level == ThreatLevel.SAFE
        assert result.stats.total_engines == 0

    @pytest.mark.asyncio
    async def test_submission_without_analysis_id(self, upstream):
        upstream.add("GET", VIRUSTOTAL_HOST, "/api/v3/urls/", json={}, status=404)
        upstream.add("POST", VIRUSTOTAL_HOST, "/api/v3/urls", json={"data": {}})
        sleep = RecordingSleep()

        async with httpx.AsyncClient(transport=upstream.transport) as http:
            service = URLReputationService(VirusTotalClient(http, "vt-key"), sleep=sleep)
            result = await service.scan(SCAN_URL)

        assert result.stats.total_engines == 0
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_lookup_failure(self, upstream):
        upstream.add("GET", VIRUSTOTAL_HOST, "/api/v3/urls/", json={}, status=500)

        async with httpx.AsyncClient(transport=upstream.transport) as http:
            service = URLReputationService(VirusTotalClient(http, "vt-key"), sleep=RecordingSleep())
            with pytest.raises(UpstreamError) as exc_info:
                await service.scan(SCAN_URL)

        assert exc_info.value.code == "LOOKUP_ERROR"
        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Unable to retrieve scan results"

    @pytest.mark.asyncio
    async def test_lookup_unreachable(self, upstream):
        async with httpx.AsyncClient(transport=upstream.transport) as http:
            service = URLReputationService(VirusTotalClient(http, "vt-key"), sleep=RecordingSleep())
            with pytest.raises(UpstreamError) as exc_info:
                await service.scan(SCAN_URL)

        assert exc_info.value.code == "LOOKUP_ERROR"

    @pytest.mark.asyncio
    async def test_submission_failure(self, upstream):
        upstream.add("GET", VIRUSTOTAL_HOST, "/api/v3/urls/", json={}, status=404)
        upstream.add("POST", VIRUSTOTAL_HOST, "/api/v3/urls", json={}, status=429)

        async with httpx.AsyncClient(transport=upstream.transport) as http:
            service = URLReputationService(VirusTotalClient(http, "vt-key"), sleep=RecordingSleep())
            with pytest.raises(UpstreamError) as exc_info:
                await service.scan(SCAN_URL)

        assert exc_info.value.code == "SCAN_ERROR"
        assert exc_info.value.message == "Unable to scan URL at this time"
