"""
Middleware package for the Skintelect API.
"""

from .logging_middleware import (
    RequestLoggingMiddleware,
    RequestStats,
    RequestStatsMiddleware,
    get_request_stats,
)

__all__ = [
    "RequestLoggingMiddleware",
    "RequestStats",
    "RequestStatsMiddleware",
    "get_request_stats",
]
