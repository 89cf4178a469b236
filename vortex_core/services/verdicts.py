"""
Verdict Rules
=============
Pure functions turning provider data into threat levels and scores.
"""

import math
from typing import Any, Dict, List, Mapping, Optional

from vortex_core.models import FlaggedEngine, ScanStats, ThreatLevel

MAX_FLAGGED_ENGINES = 10
FLAGGED_CATEGORIES = ("malicious", "suspicious")


def round_half_up(value: float, digits: int = 1) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def classify_abuse_score(score: Optional[int]) -> ThreatLevel:
    """
    Map an AbuseIPDB confidence score (0-100) to a threat level.

    No score means no abuse data, which is reported as SAFE.
    """
    if score is None:
        return ThreatLevel.SAFE
    if score >= 80:
        return ThreatLevel.CRITICAL
    if score >= 60:
        return ThreatLevel.HIGH
    if score >= 40:
        return ThreatLevel.MEDIUM
    if score >= 20:
        return ThreatLevel.LOW
    return ThreatLevel.SAFE


def _count(stats: Mapping[str, Any], key: str) -> int:
    try:
        return max(0, int(stats.get(key) or 0))
    except (TypeError, ValueError):
        return 0


def build_scan_stats(raw_stats: Optional[Mapping[str, Any]]) -> ScanStats:
    """Engine counts with missing entries treated as zero."""
    raw_stats = raw_stats if isinstance(raw_stats, Mapping) else {}
    malicious = _count(raw_stats, "malicious")
    suspicious = _count(raw_stats, "suspicious")
    harmless = _count(raw_stats, "harmless")
    undetected = _count(raw_stats, "undetected")
    return ScanStats(
        malicious=malicious,
        suspicious=suspicious,
        harmless=harmless,
        undetected=undetected,
        total_engines=malicious + suspicious + harmless + undetected,
    )


def compute_threat_score(stats: ScanStats) -> float:
    """Share of engines flagging the URL, in percent, one decimal."""
    if stats.total_engines == 0:
        return 0.0
    return round_half_up((stats.malicious + stats.suspicious) / stats.total_engines * 100)


def classify_scan(stats: ScanStats, threat_score: float) -> ThreatLevel:
    """First matching rule wins."""
    if stats.malicious >= 5 or threat_score >= 20:
        return ThreatLevel.CRITICAL
    if stats.malicious >= 3 or threat_score >= 10:
        return ThreatLevel.HIGH
    if stats.malicious >= 1 or stats.suspicious >= 3:
        return ThreatLevel.MEDIUM
    if stats.suspicious >= 1:
        return ThreatLevel.LOW
    return ThreatLevel.SAFE


def extract_flagged_engines(
    results: Optional[Mapping[str, Any]],
    limit: int = MAX_FLAGGED_ENGINES,
) -> List[FlaggedEngine]:
    """
    Engines that classified the URL as malicious or suspicious.

    Sorted by engine name before truncating so output is stable across
    identical upstream payloads.
    """
    if not isinstance(results, Mapping):
        return []

    flagged = []
    for engine in sorted(results):
        verdict = results[engine]
        if not isinstance(verdict, Mapping):
            continue
        category = verdict.get("category")
        if category in FLAGGED_CATEGORIES:
            result = verdict.get("result")
            flagged.append(FlaggedEngine(
                engine=str(engine),
                category=category,
                result=None if result is None else str(result),
            ))
        if len(flagged) >= limit:
            break
    return flagged


def extract_categories(raw: Any) -> Dict[str, str]:
    if not isinstance(raw, Mapping):
        return {}
    return {str(key): str(value) for key, value in raw.items()}
