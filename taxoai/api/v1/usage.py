"""
Usage endpoints
"""
from fastapi import APIRouter, Query

from taxoai.api.deps import ServicesDep
from taxoai.schemas.usage import UsageResponse


router = APIRouter()


@router.get("", response_model=UsageResponse)
async def get_usage(
    services: ServicesDep,
    force_refresh: bool = Query(False, description="Bypass the cached snapshot"),
) -> UsageResponse:
    """Current plan usage plus the local fallback counter"""
    cached = None if force_refresh else await services.usage.cached_usage()
    usage = cached or await services.usage.get_usage(force_refresh=force_refresh)
    count, month = await services.usage.local_usage()

    return UsageResponse(usage=usage, local_count=count, local_month=month, cached=cached is not None)
