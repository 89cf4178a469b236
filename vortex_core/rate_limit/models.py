"""
Rate Limit Models
=================
Data models for rate limiting state and decisions.
"""

from dataclasses import dataclass
from enum import Enum


class RateLimitResult(str, Enum):
    """Rate limit decision result."""
    ALLOWED = "allowed"
    BLOCKED = "blocked"


@dataclass
class RateLimitRecord:
    """Per-client counter for the current window."""
    count: int
    reset_time: float  # clock value at which the window expires

    def is_expired(self, now: float) -> bool:
        return now >= self.reset_time


@dataclass
class RateLimitInfo:
    """Rate limit check result with quota information."""
    allowed: bool
    remaining: int
    limit: int
    reset_at: float

    @property
    def result(self) -> RateLimitResult:
        return RateLimitResult.ALLOWED if self.allowed else RateLimitResult.BLOCKED
