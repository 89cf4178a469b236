"""
Rate Limiting
=============
In-memory per-client admission control shared by all handlers.
"""

from .models import RateLimitInfo, RateLimitRecord, RateLimitResult
from .in_memory import SlidingWindowRateLimiter

__all__ = [
    # Models
    "RateLimitInfo",
    "RateLimitRecord",
    "RateLimitResult",
    # Limiters
    "SlidingWindowRateLimiter",
]
