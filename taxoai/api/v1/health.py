"""
Health check endpoints
"""
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter
from sqlalchemy import text

from taxoai.api.deps import AsyncSessionDep, CacheDep, SettingsDep
from taxoai.core.logging import log
from taxoai.schemas.common import HealthCheckResponse


router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(settings: SettingsDep) -> HealthCheckResponse:
    """Basic health check"""
    return HealthCheckResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.version,
        database="unknown",
        api_key_configured=settings.has_api_key,
    )


@router.get("/health/ready", response_model=Dict[str, Any])
async def readiness_check(session: AsyncSessionDep, cache: CacheDep) -> Dict[str, Any]:
    """Readiness check - database and cache"""
    checks = {"database": False, "cache": False}

    try:
        result = await session.execute(text("SELECT 1"))
        checks["database"] = result.scalar() == 1
    except Exception as e:
        log.error(f"Database health check failed: {e}")

    try:
        await cache.set("taxoai:health:check", "ok", ttl=10)
        checks["cache"] = await cache.get("taxoai:health:check") == "ok"
    except Exception as e:
        log.error(f"Cache health check failed: {e}")

    return {
        "status": "ok" if all(checks.values()) else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }
