"""
In-Memory Rate Limiter
======================
Per-process window limiter keyed by client identifier.
"""

import time
from typing import Callable, Dict, Optional

import structlog

from .models import RateLimitInfo, RateLimitRecord

logger = structlog.get_logger(__name__)


class SlidingWindowRateLimiter:
    """
    Window-by-replacement rate limiter.

    A client's window starts with its first request and lasts ``window``
    seconds. Once the window has elapsed the next request replaces the
    record with a fresh one. Rejected requests are not counted, so a
    record's count never exceeds ``limit``.

    State lives only as long as the instance; restarts reset every client.
    """

    def __init__(
        self,
        limit: int = 60,
        window: float = 60.0,
        clock: Optional[Callable[[], float]] = None,
        name: str = "default",
    ):
        """
        Args:
            limit: Number of requests admitted per window
            window: Window size in seconds
            clock: Monotonic time source in seconds (injectable for tests)
            name: Label used in log events
        """
        self.limit = limit
        self.window = window
        self.name = name
        self._clock = clock or time.monotonic
        self._records: Dict[str, RateLimitRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def check(self, key: str) -> RateLimitInfo:
        """
        Admit or reject one request for ``key``.

        Args:
            key: Client identifier (usually the resolved client IP)

        Returns:
            RateLimitInfo with decision and quota
        """
        now = self._clock()
        record = self._records.get(key)

        if record is None or record.is_expired(now):
            record = RateLimitRecord(count=1, reset_time=now + self.window)
            self._records[key] = record
            return self._info(True, record)

        if record.count >= self.limit:
            return self._info(False, record)

        record.count += 1
        return self._info(True, record)

    def admit(self, key: str) -> bool:
        """Shorthand for ``check(key).allowed``."""
        return self.check(key).allowed

    def sweep(self) -> int:
        """
        Drop records whose window has elapsed.

        Returns:
            Number of evicted records
        """
        now = self._clock()
        expired = [key for key, record in self._records.items() if record.is_expired(now)]
        for key in expired:
            del self._records[key]
        if expired:
            logger.debug("rate_limit_sweep", limiter=self.name, evicted=len(expired))
        return len(expired)

    def reset(self) -> None:
        self._records.clear()

    def _info(self, allowed: bool, record: RateLimitRecord) -> RateLimitInfo:
        return RateLimitInfo(
            allowed=allowed,
            remaining=max(0, self.limit - record.count),
            limit=self.limit,
            reset_at=record.reset_time,
        )
