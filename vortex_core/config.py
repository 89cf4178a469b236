"""
Service Configuration
=====================
Settings loaded from environment variables.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

DEFAULT_ALLOWED_ORIGINS: Tuple[str, ...] = (
    "http://localhost:8080",
    "http://localhost:3000",
    "http://localhost:5173",
)

# Preview deployments are trusted by suffix, independent of the allow-list
TRUSTED_ORIGIN_SUFFIXES: Tuple[str, ...] = (
    ".lovable.app",
    ".lovableproject.com",
)

ABUSEIPDB_BASE_URL = "https://api.abuseipdb.com/api/v2"
IP_API_BASE_URL = "http://ip-api.com"
VIRUSTOTAL_BASE_URL = "https://www.virustotal.com/api/v3"


def parse_origins(raw: Optional[str]) -> Tuple[str, ...]:
    """Split a comma separated origin list, falling back to local dev origins."""
    if not raw:
        return DEFAULT_ALLOWED_ORIGINS
    return tuple(o.strip() for o in raw.split(",") if o.strip())


def _env_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_secret(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


@dataclass
class Settings:
    """Runtime configuration for the threat intelligence service."""
    service_name: str = "vortex-threat-intel"
    environment: str = "production"
    allowed_origins: Tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    trusted_origin_suffixes: Tuple[str, ...] = TRUSTED_ORIGIN_SUFFIXES

    # Provider credentials; only the URL scanner is mandatory
    abuseipdb_api_key: Optional[str] = None
    virustotal_api_key: Optional[str] = None

    abuseipdb_base_url: str = ABUSEIPDB_BASE_URL
    ip_api_base_url: str = IP_API_BASE_URL
    virustotal_base_url: str = VIRUSTOTAL_BASE_URL
    upstream_timeout: float = 10.0

    # Requests per window, per client IP
    ip_rate_limit: int = 60
    url_rate_limit: int = 30
    visitor_rate_limit: int = 120
    rate_limit_window: float = 60.0
    rate_limit_sweep_interval: float = 300.0  # 0 disables eviction

    scan_poll_delay: float = 2.0

    log_level: str = "INFO"
    log_json: bool = True
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)
        """
        env = os.environ if environ is None else environ
        return cls(
            service_name=env.get("SERVICE_NAME", "vortex-threat-intel"),
            environment=env.get("ENVIRONMENT", "production"),
            allowed_origins=parse_origins(env.get("ALLOWED_ORIGINS")),
            abuseipdb_api_key=_env_secret(env.get("ABUSEIPDB_API_KEY")),
            virustotal_api_key=_env_secret(env.get("VIRUSTOTAL_API_KEY")),
            abuseipdb_base_url=env.get("ABUSEIPDB_BASE_URL", ABUSEIPDB_BASE_URL),
            ip_api_base_url=env.get("IP_API_BASE_URL", IP_API_BASE_URL),
            virustotal_base_url=env.get("VIRUSTOTAL_BASE_URL", VIRUSTOTAL_BASE_URL),
            upstream_timeout=float(env.get("UPSTREAM_TIMEOUT_SECONDS", "10")),
            ip_rate_limit=int(env.get("IP_RATE_LIMIT", "60")),
            url_rate_limit=int(env.get("URL_RATE_LIMIT", "30")),
            visitor_rate_limit=int(env.get("VISITOR_RATE_LIMIT", "120")),
            rate_limit_window=float(env.get("RATE_LIMIT_WINDOW_SECONDS", "60")),
            rate_limit_sweep_interval=float(env.get("RATE_LIMIT_SWEEP_SECONDS", "300")),
            scan_poll_delay=float(env.get("SCAN_POLL_DELAY_SECONDS", "2")),
            log_level=env.get("LOG_LEVEL", "INFO"),
            log_json=_env_bool(env.get("LOG_JSON"), True),
            host=env.get("HOST", "127.0.0.1"),
            port=int(env.get("PORT", "8000")),
        )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod", "staging")
