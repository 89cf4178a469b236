"""
Client IP Resolution
====================
Best-effort resolution of the calling client's public IP from edge headers.
"""

from typing import Mapping, Optional

UNKNOWN_CLIENT = "unknown"

CONNECTING_IP_HEADER = "cf-connecting-ip"
FORWARDED_FOR_HEADER = "x-forwarded-for"
REAL_IP_HEADER = "x-real-ip"


def first_forwarded_ip(forwarded_for: Optional[str]) -> Optional[str]:
    """Return the left-most address of an X-Forwarded-For chain."""
    if not forwarded_for:
        return None
    return forwarded_for.split(",")[0].strip() or None


def resolve_client_ip(headers: Mapping[str, str]) -> str:
    """
    Resolve the client IP from trusted proxy headers.

    Priority: CF-Connecting-IP, first X-Forwarded-For entry, X-Real-IP.
    Empty values fall through to the next header. Requests carrying none of
    them resolve to ``"unknown"`` and therefore share one rate-limit bucket.

    Args:
        headers: Case-insensitive header mapping (e.g. Starlette ``Headers``)
    """
    return (
        headers.get(CONNECTING_IP_HEADER)
        or first_forwarded_ip(headers.get(FORWARDED_FOR_HEADER))
        or headers.get(REAL_IP_HEADER)
        or UNKNOWN_CLIENT
    )
