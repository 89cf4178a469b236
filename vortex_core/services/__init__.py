"""
Threat Intelligence Services
============================
IP and URL reputation lookups built on the provider clients.
"""

from .ip_reputation import IPReputationService
from .url_reputation import URLReputationService
from .verdicts import (
    classify_abuse_score,
    classify_scan,
    compute_threat_score,
    build_scan_stats,
    extract_flagged_engines,
)

__all__ = [
    "IPReputationService",
    "URLReputationService",
    "classify_abuse_score",
    "classify_scan",
    "compute_threat_score",
    "build_scan_stats",
    "extract_flagged_engines",
]
