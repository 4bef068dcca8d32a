"""Health check endpoints.

- /health - Service status and configuration readiness
- /health/db - Database connection pool health
"""

from __future__ import annotations

import os
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter

from newsbrief.config import APP_VERSION, ENCRYPTION_KEY_ENV, GEMINI_MODEL, REFERENCE_TIMEZONE
from newsbrief.observability.telemetry import get_counter, get_latency_stats

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Service status, configuration readiness and job counters since process start."""
    return {
        "status": "healthy",
        "service": "NewsBrief API",
        "version": APP_VERSION,
        "timestamp": datetime.now(UTC).isoformat(),
        "timezone": REFERENCE_TIMEZONE,
        "model": GEMINI_MODEL,
        "encryption_configured": bool(os.getenv(ENCRYPTION_KEY_ENV)),
        "jobs": {
            "succeeded": get_counter("job.success"),
            "latency_ms": get_latency_stats("job.run.latency"),
        },
    }


@router.get("/health/db")
async def database_health() -> dict[str, Any]:
    """
    Database health check endpoint.

    Alerts if pool usage exceeds 80%.
    """
    from newsbrief.infrastructure.database import get_pool_stats

    stats = get_pool_stats()
    usage_percent = stats["usage_percent"]

    return {
        "status": "degraded" if usage_percent > 80 else "healthy",
        "pool": stats,
        "warning": "Pool usage high" if usage_percent > 80 else None,
    }
