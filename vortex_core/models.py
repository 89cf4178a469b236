"""
Response Models
===============
Wire shapes for the threat intelligence handlers.

Attributes are snake_case in Python and camelCase in JSON.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_isoformat(moment: Optional[datetime] = None) -> str:
    """Render a UTC timestamp as ``2024-01-01T00:00:00.000Z``."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ThreatLevel(str, Enum):
    SAFE = "safe"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AbuseData(WireModel):
    confidence_score: int = 0
    total_reports: Optional[int] = None
    is_tor: Optional[bool] = None
    isp: Optional[str] = None
    domain: Optional[str] = None
    usage_type: Optional[str] = None
    last_reported_at: Optional[str] = None
    country_code: Optional[str] = None
    is_whitelisted: Optional[bool] = None


class Geolocation(WireModel):
    country: Optional[str] = None
    country_code: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    isp: Optional[str] = None
    org: Optional[str] = None
    timezone: Optional[str] = None


class ThreatIntelligence(WireModel):
    """IP reputation verdict."""
    ip: str
    threat_level: ThreatLevel
    risk_score: int = Field(ge=0, le=100)
    abuse_data: Optional[AbuseData] = None
    geolocation: Optional[Geolocation] = None
    checked_at: str = Field(default_factory=utc_isoformat)


class ScanStats(WireModel):
    malicious: int = 0
    suspicious: int = 0
    harmless: int = 0
    undetected: int = 0
    total_engines: int = 0


class FlaggedEngine(WireModel):
    engine: str
    category: str
    result: Optional[str] = None


class URLScanResult(WireModel):
    """URL reputation verdict."""
    url: str
    threat_level: ThreatLevel
    threat_score: float = Field(ge=0, le=100)
    stats: ScanStats
    flagged_engines: List[FlaggedEngine] = Field(default_factory=list, max_length=10)
    categories: Dict[str, str] = Field(default_factory=dict)
    last_analysis_date: Optional[str] = None
    checked_at: str = Field(default_factory=utc_isoformat)


class VisitorIPResponse(WireModel):
    ip: str
    detected_at: str = Field(default_factory=utc_isoformat)


class ErrorResponse(BaseModel):
    error: str
    code: str
