"""
Skintelect API - Main Application

Ingredient list analysis for skincare products, built from FastAPI routers:
- analysis_router.py - POST /api/analyze
- ingredients_router.py - Ingredient reference listing, lookup, autocomplete
"""

import time
from datetime import datetime, timezone

import psutil
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
import shared
from database import check_database_connection
from middleware import (
    RequestLoggingMiddleware,
    RequestStatsMiddleware,
    get_request_stats,
)
from rate_limit import RateLimitExceeded
from structured_logging import configure_logging, get_logger

# Routers
from routers.analysis_router import router as analysis_router
from routers.ingredients_router import router as ingredients_router

configure_logging()
logger = get_logger("api")

# =============================================================================
# APPLICATION SETUP
# =============================================================================

app = FastAPI(
    title="Skintelect API",
    description="Paste a skincare ingredient list and get a per-ingredient breakdown with fungal acne, allergen, irritant, comedogenic and reef-safety flags.",
    version=config.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Build the ingredient reference table once; routers read it from app.state
app.state.reference_table = shared.load_reference_table()

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=config.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Retry-After", "X-RateLimit-Remaining", "X-RateLimit-Reset", "X-Request-ID"],
)

# Add request logging middleware (logs all API calls)
app.add_middleware(RequestLoggingMiddleware)

# Add request stats middleware (tracks request statistics)
app.add_middleware(RequestStatsMiddleware, stats=get_request_stats())


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(status_code=exc.status_code, content=exc.detail, headers=exc.headers)


# =============================================================================
# REGISTER ROUTERS
# =============================================================================

# Ingredient list analysis
app.include_router(analysis_router)

# Ingredient reference and autocomplete
app.include_router(ingredients_router)

logger.info("Application configured", extra=config.get_config_summary())


# =============================================================================
# HEALTH CHECK ENDPOINTS
# =============================================================================

@app.get("/")
def read_root():
    return {
        "message": f"Skintelect API v{config.APP_VERSION}",
        "status": "healthy",
        "docs": "/docs"
    }


@app.get("/health")
def health_check(request: Request):
    """
    Basic health check endpoint.
    Returns reference table size, database connectivity, memory and uptime.
    The database is only checked when reference data is read from it.
    """
    table = shared.get_reference_table(request)
    if config.REFERENCE_SOURCE == "database":
        database_status = "connected" if check_database_connection() else "disconnected"
    else:
        database_status = "not_configured"
    healthy = database_status != "disconnected" and len(table) > 0

    memory = psutil.virtual_memory()

    process = psutil.Process()
    uptime_seconds = time.time() - process.create_time()

    return {
        "status": "healthy" if healthy else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": config.APP_VERSION,
        "reference_source": config.REFERENCE_SOURCE,
        "reference_ingredients": len(table),
        "database": database_status,
        "memory": {
            "total_gb": round(memory.total / (1024**3), 2),
            "available_gb": round(memory.available / (1024**3), 2),
            "used_percent": memory.percent,
        },
        "uptime": _format_uptime(uptime_seconds),
        "uptime_seconds": round(uptime_seconds),
    }


def _format_uptime(seconds: float) -> str:
    """Format uptime seconds to human readable string."""
    days, remainder = divmod(int(seconds), 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    parts.append(f"{secs}s")

    return " ".join(parts)


@app.get("/api/stats")
def request_stats():
    """Get API request statistics for monitoring."""
    return get_request_stats().get_stats()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
