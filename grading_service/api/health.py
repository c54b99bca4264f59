"""Health and readiness endpoints.

  /health (liveness):
    "Is this process alive?"  Always 200; the body reports each backing
    service so a dashboard can show a degraded instance.

  /ready (readiness):
    "Can this instance grade right now?"  503 when PostgreSQL is
    configured but unreachable, since every grading request needs it.
    Redis only carries the settings cache and the notification queue,
    so an unreachable Redis degrades /health but never fails /ready.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response
from sqlalchemy import text

from grading_service.db.engine import engine
from grading_service.db.redis import redis_pool

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _check_redis() -> str:
    if redis_pool is None:
        return "not_configured"
    try:
        await redis_pool.ping()  # type: ignore[misc]
        return "ok"
    except Exception:
        logger.warning("Redis health check failed", exc_info=True)
        return "degraded"


async def _check_database() -> str:
    if engine is None:
        return "not_configured"
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return "ok"
    except Exception:
        logger.warning("Database health check failed", exc_info=True)
        return "degraded"


@router.get("/health")
async def health() -> dict:
    """Liveness probe with per-dependency status.

    Returns 200 even when degraded; the status field carries the verdict.
    """
    checks = {
        "database": await _check_database(),
        "redis": await _check_redis(),
    }
    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    """Readiness probe: 503 while the database is unreachable."""
    if await _check_database() == "degraded":
        return Response(status_code=503)
    return Response(status_code=200)
