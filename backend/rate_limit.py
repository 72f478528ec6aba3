"""
Rate Limiting

Per-client fixed-window rate limiting for the HTTP layer, built on the
`limits` package. Counters live in the storage named by
RATE_LIMIT_STORAGE_URI ("memory://" by default, per process).

Usage:
    @router.post("/analyze", dependencies=[Depends(rate_limit("analysis"))])
    def analyze(...):
        ...
"""

import math
import time
from dataclasses import dataclass
from typing import Dict, Optional

from fastapi import HTTPException, Request, Response
from limits import RateLimitItemPerSecond
from limits.storage import storage_from_string
from limits.strategies import FixedWindowRateLimiter

import config
from structured_logging import log_security_event


@dataclass
class RateLimitResult:
    success: bool
    remaining: int
    reset_at: float  # epoch seconds when the window resets


class RateLimiter:
    """One named limit (e.g. 10 per 60s) applied per client identifier."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: int = 60,
        name: str = "api",
        storage_uri: str = None,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.name = name
        self.item = RateLimitItemPerSecond(max_requests, window_seconds)
        self._storage = storage_from_string(storage_uri or config.RATE_LIMIT_STORAGE_URI)
        self._strategy = FixedWindowRateLimiter(self._storage)

    def check(self, identifier: str) -> RateLimitResult:
        """Count one request for ``identifier`` and say whether it is allowed."""
        allowed = self._strategy.hit(self.item, self.name, identifier)
        stats = self._strategy.get_window_stats(self.item, self.name, identifier)
        return RateLimitResult(allowed, stats.remaining if allowed else 0, stats.reset_time)

    def reset(self, identifier: str):
        """Forget the window for one client."""
        self._strategy.clear(self.item, self.name, identifier)

    def clear(self):
        """Drop every counter in this limiter's storage."""
        self._storage.reset()

    def retry_after(self, result: RateLimitResult) -> int:
        return max(0, math.ceil(result.reset_at - time.time()))


rate_limiters: Dict[str, RateLimiter] = {
    "api": RateLimiter(config.RATE_LIMIT_API_PER_MINUTE, config.RATE_LIMIT_WINDOW_SECONDS, "api"),
    "search": RateLimiter(config.RATE_LIMIT_SEARCH_PER_MINUTE, config.RATE_LIMIT_WINDOW_SECONDS, "search"),
    "analysis": RateLimiter(config.RATE_LIMIT_ANALYSIS_PER_MINUTE, config.RATE_LIMIT_WINDOW_SECONDS, "analysis"),
}


def get_client_ip(request: Request) -> str:
    """Extract client IP, handling proxies."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"


class RateLimitExceeded(HTTPException):
    """429 carrying the retry hint in body and headers."""

    def __init__(self, retry_after: int, reset_at: float):
        super().__init__(
            status_code=429,
            detail={"error": "Too many requests", "retryAfter": retry_after},
            headers={
                "Retry-After": str(retry_after),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(int(reset_at)),
            },
        )


def rate_limit(name: str, enabled: Optional[bool] = None):
    """
    Build a FastAPI dependency enforcing the named limiter.

    Allowed requests get X-RateLimit-Remaining / X-RateLimit-Reset headers;
    rejected requests raise RateLimitExceeded.
    """

    def dependency(request: Request, response: Response):
        is_enabled = config.RATE_LIMIT_ENABLED if enabled is None else enabled
        if not is_enabled:
            return

        limiter = rate_limiters[name]
        client_ip = get_client_ip(request)
        result = limiter.check(client_ip)

        if not result.success:
            log_security_event(
                "rate_limit_exceeded",
                client_ip=client_ip,
                limiter=name,
                limit=str(limiter.item),
                http_path=request.url.path,
            )
            raise RateLimitExceeded(limiter.retry_after(result), result.reset_at)

        response.headers["X-RateLimit-Remaining"] = str(result.remaining)
        response.headers["X-RateLimit-Reset"] = str(int(result.reset_at))

    return dependency
