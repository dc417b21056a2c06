"""
Unified Rate Limiter

Client-side rate limiting for the music catalog adapters. Supports a
per-second token bucket (YouTube Data API) and a sliding per-hour window
(Spotify Web API).
"""

import asyncio
import time
from collections import deque
from typing import Any, Dict, Optional

import structlog

logger = structlog.get_logger(__name__)

HOUR_SECONDS = 3600


class UnifiedRateLimiter:
    """
    Rate limiter shared by every request an adapter makes.

    Supports:
    - Per-second limiting via token bucket (bursts up to twice the rate)
    - Per-hour limiting via a sliding window of request timestamps
    """

    def __init__(
        self,
        calls_per_second: Optional[float] = None,
        calls_per_hour: Optional[int] = None,
        burst_size: Optional[int] = None,
        service_name: str = "api"
    ):
        """
        Initialize rate limiter with specified limits.

        Args:
            calls_per_second: Maximum sustained calls per second
            calls_per_hour: Maximum calls in any rolling hour
            burst_size: Token bucket capacity (defaults to twice calls_per_second)
            service_name: Service name for logging
        """
        self.calls_per_second = calls_per_second
        self.calls_per_hour = calls_per_hour
        self.service_name = service_name

        if calls_per_second:
            self.burst_size = burst_size or max(int(calls_per_second * 2), 1)
            self.tokens = float(self.burst_size)
        else:
            self.burst_size = None
            self.tokens = 0.0
        self.last_refill = time.monotonic()

        self.request_times: deque = deque()
        self.lock = asyncio.Lock()

        self.logger = logger.bind(component="RateLimiter", service=service_name)
        self.logger.info(
            "Rate limiter initialized",
            calls_per_second=calls_per_second,
            calls_per_hour=calls_per_hour,
            burst_size=self.burst_size
        )

    @classmethod
    def for_spotify(cls, calls_per_hour: int = 50) -> "UnifiedRateLimiter":
        """Rate limiter for the Spotify Web API."""
        return cls(calls_per_hour=calls_per_hour, service_name="Spotify")

    @classmethod
    def for_youtube(cls, calls_per_second: float = 5.0) -> "UnifiedRateLimiter":
        """Rate limiter for the YouTube Data API."""
        return cls(calls_per_second=calls_per_second, service_name="YouTube")

    async def wait_if_needed(self) -> None:
        """
        Block until one more request fits within every configured limit.

        Call before each outgoing request.
        """
        async with self.lock:
            now = time.monotonic()
            self._drop_expired(now)

            wait_time = 0.0
            if self.calls_per_second:
                wait_time = max(wait_time, self._token_wait(now))
            if self.calls_per_hour:
                wait_time = max(wait_time, self._hour_wait(now))

            if wait_time > 0:
                self.logger.debug(
                    "Rate limit wait required",
                    wait_time=wait_time,
                    recent_requests=len(self.request_times)
                )
                await asyncio.sleep(wait_time)
                now = time.monotonic()
                if self.calls_per_second:
                    self._refill(now)

            self.request_times.append(now)
            if self.calls_per_second:
                self.tokens = max(self.tokens - 1, 0.0)

    def _refill(self, now: float) -> None:
        elapsed = now - self.last_refill
        self.tokens = min(float(self.burst_size), self.tokens + elapsed * self.calls_per_second)
        self.last_refill = now

    def _token_wait(self, now: float) -> float:
        self._refill(now)
        if self.tokens >= 1:
            return 0.0
        return (1.0 - self.tokens) / self.calls_per_second

    def _hour_wait(self, now: float) -> float:
        if len(self.request_times) < self.calls_per_hour:
            return 0.0
        # Oldest request in the window must age out first
        return max(0.0, HOUR_SECONDS - (now - self.request_times[0]))

    def _drop_expired(self, now: float) -> None:
        cutoff = now - HOUR_SECONDS
        while self.request_times and self.request_times[0] <= cutoff:
            self.request_times.popleft()

    def get_current_usage(self) -> Dict[str, Any]:
        """Current usage statistics for monitoring."""
        now = time.monotonic()
        hour_requests = sum(1 for t in self.request_times if t > now - HOUR_SECONDS)

        usage: Dict[str, Any] = {"requests_last_hour": hour_requests}
        if self.calls_per_second:
            usage["tokens_available"] = self.tokens
            usage["burst_capacity"] = self.burst_size
        if self.calls_per_hour:
            usage["calls_per_hour_limit"] = self.calls_per_hour
            usage["hour_usage_percent"] = (hour_requests / self.calls_per_hour) * 100
        return usage

    def reset(self) -> None:
        """Reset rate limiter state (useful for testing)."""
        self.request_times.clear()
        if self.calls_per_second:
            self.tokens = float(self.burst_size)
        self.last_refill = time.monotonic()
        self.logger.info("Rate limiter reset")
