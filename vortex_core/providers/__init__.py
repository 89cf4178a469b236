"""
Threat Intelligence Providers
=============================
Async clients for the upstream reputation and geolocation APIs.
"""

from .base import BaseProviderClient
from .abuseipdb import AbuseIPDBClient
from .ip_api import IpApiClient
from .virustotal import VirusTotalClient, url_identifier
from .exceptions import (
    ProviderError,
    ProviderUnavailableError,
    ProviderTimeoutError,
    ProviderAuthError,
    ProviderNotFoundError,
    ProviderResponseError,
)

__all__ = [
    "BaseProviderClient",
    "AbuseIPDBClient",
    "IpApiClient",
    "VirusTotalClient",
    "url_identifier",
    "ProviderError",
    "ProviderUnavailableError",
    "ProviderTimeoutError",
    "ProviderAuthError",
    "ProviderNotFoundError",
    "ProviderResponseError",
]
