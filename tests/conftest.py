"""
Shared fixtures: settings, a fake upstream for the provider APIs, and an
app client wired to it.
"""

from dataclasses import replace
from typing import Any, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from vortex_core.app import create_app
from vortex_core.config import Settings

ABUSEIPDB_HOST = "api.abuseipdb.com"
IP_API_HOST = "ip-api.com"
VIRUSTOTAL_HOST = "www.virustotal.com"


def abuse_payload(score: int = 85, ip: str = "185.220.101.1") -> dict:
    return {
        "data": {
            "ipAddress": ip,
            "isPublic": True,
            "ipVersion": 4,
            "isWhitelisted": False,
            "abuseConfidenceScore": score,
            "countryCode": "DE",
            "countryName": "Germany",
            "usageType": "Data Center/Web Hosting/Transit",
            "isp": "Example Hosting GmbH",
            "domain": "example-hosting.de",
            "hostnames": [],
            "isTor": True,
            "totalReports": 1204,
            "numDistinctUsers": 310,
            "lastReportedAt": "2025-12-01T10:00:00+00:00",
        }
    }


def geo_payload(ip: str = "185.220.101.1") -> dict:
    return {
        "status": "success",
        "country": "Germany",
        "countryCode": "DE",
        "region": "BE",
        "regionName": "Berlin",
        "city": "Berlin",
        "zip": "10115",
        "lat": 52.52,
        "lon": 13.405,
        "timezone": "Europe/Berlin",
        "isp": "Example Hosting GmbH",
        "org": "Example Hosting",
        "as": "AS64500 Example",
        "query": ip,
    }


def vt_report(stats: dict, results: Optional[dict] = None, **attributes: Any) -> dict:
    return {
        "data": {
            "type": "url",
            "id": "abc",
            "attributes": {
                "last_analysis_stats": stats,
                "last_analysis_results": results or {},
                **attributes,
            },
        }
    }


class FakeUpstream:
    """
    Routes upstream requests by method, host and path prefix.

    Unmatched requests fail with a connection error, like an unreachable
    provider.
    """

    def __init__(self):
        self.routes: List[tuple] = []
        self.requests: List[httpx.Request] = []

    def add(
        self,
        method: str,
        host: str,
        path: str,
        json: Any = None,
        status: int = 200,
        exc: Optional[Exception] = None,
        content: Optional[bytes] = None,
    ) -> "FakeUpstream":
        self.routes.append((method, host, path, json, status, exc, content))
        return self

    def calls(self, host: str, method: Optional[str] = None) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.url.host == host and (method is None or r.method == method)
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for method, host, path, body, status, exc, content in self.routes:
            if request.method == method and request.url.host == host and request.url.path.startswith(path):
                if exc is not None:
                    raise exc
                if content is not None:
                    return httpx.Response(status, content=content)
                return httpx.Response(status, json=body)
        raise httpx.ConnectError(f"no route for {request.url}", request=request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        allowed_origins=("http://localhost:8080", "https://dashboard.example.com"),
        abuseipdb_api_key="test-abuse-key",
        virustotal_api_key="test-vt-key",
        scan_poll_delay=0,
        rate_limit_sweep_interval=0,
        log_json=False,
    )


@pytest.fixture
def make_client(upstream):
    """Factory yielding a started TestClient; overrides apply to settings."""
    clients = []

    def _make(settings: Settings, **overrides) -> TestClient:
        app = create_app(replace(settings, **overrides), transport=upstream.transport)
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, settings) -> TestClient:
    return make_client(settings)
