"""
Request Logging Middleware

- RequestLoggingMiddleware: request/correlation IDs, timing and one
  structured log line per request. Bodies are never logged.
- RequestStatsMiddleware: feeds RequestStats, served at /api/stats.
"""

import threading
import time
from collections import Counter, deque
from datetime import datetime, timezone
from typing import Callable, Optional
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from rate_limit import get_client_ip
from structured_logging import (
    get_logger,
    LogContext,
    log_request,
    generate_request_id,
)

logger = get_logger("api.middleware")


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    # Health checks and docs are served without logging
    QUIET_PATHS = {"/health", "/favicon.ico", "/docs", "/redoc", "/openapi.json"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        correlation_id = request.headers.get("X-Correlation-ID") or request_id
        path = request.url.path

        if path in self.QUIET_PATHS:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

        with LogContext(request_id=request_id, correlation_id=correlation_id, client_ip=get_client_ip(request)):
            start_time = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception:
                logger.exception("Unhandled error", extra={"http_method": request.method, "http_path": path})
                raise
            duration_ms = (time.perf_counter() - start_time) * 1000

            log_request(
                request.method,
                path,
                response.status_code,
                duration_ms,
                rate_limit_remaining=response.headers.get("X-RateLimit-Remaining"),
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Correlation-ID"] = correlation_id
        response.headers["X-Process-Time"] = f"{duration_ms:.2f}ms"
        return response


class RequestStats:
    """Request counters plus a window of recent latencies."""

    def __init__(self, window: int = 1000):
        self._lock = threading.Lock()
        self._window = window
        self.reset()

    def reset(self):
        with self._lock:
            self.started_at = datetime.now(timezone.utc)
            self.by_status = Counter()
            self.by_endpoint = Counter()
            self.rate_limited = 0
            self.latencies = deque(maxlen=self._window)

    @staticmethod
    def endpoint_group(path: str) -> str:
        """'/api/ingredients/water' -> 'ingredients', '/health' -> 'health'."""
        parts = [p for p in path.split("/") if p]
        if parts and parts[0] == "api":
            parts = parts[1:]
        return parts[0] if parts else "root"

    def record(self, path: str, status: int, duration_ms: float):
        with self._lock:
            self.by_status[status] += 1
            self.by_endpoint[self.endpoint_group(path)] += 1
            if status == 429:
                self.rate_limited += 1
            self.latencies.append(duration_ms)

    def get_stats(self) -> dict:
        with self._lock:
            total = sum(self.by_status.values())
            errors = sum(n for status, n in self.by_status.items() if status >= 500)
            latencies = sorted(self.latencies)
            return {
                "total_requests": total,
                "total_errors": errors,
                "rate_limited": self.rate_limited,
                "requests_by_status": {str(k): v for k, v in self.by_status.items()},
                "top_paths": dict(self.by_endpoint.most_common(10)),
                "p50_response_time_ms": self._nearest_rank(latencies, 50),
                "p95_response_time_ms": self._nearest_rank(latencies, 95),
                "started_at": self.started_at.isoformat(),
            }

    @staticmethod
    def _nearest_rank(latencies: list, pct: int) -> float:
        if not latencies:
            return 0.0
        index = max(0, -(-pct * len(latencies) // 100) - 1)
        return round(latencies[index], 2)


class RequestStatsMiddleware(BaseHTTPMiddleware):

    def __init__(self, app: ASGIApp, stats: Optional[RequestStats] = None):
        super().__init__(app)
        self.stats = stats or get_request_stats()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            self.stats.record(request.url.path, status, (time.perf_counter() - start_time) * 1000)


_request_stats = RequestStats()


def get_request_stats() -> RequestStats:
    return _request_stats
