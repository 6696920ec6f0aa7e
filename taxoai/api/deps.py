"""
API Dependencies for dependency injection
"""
from typing import Annotated

from fastapi import Depends, Request
from sqlmodel.ext.asyncio.session import AsyncSession

from taxoai.core.cache import CacheBackend, get_cache
from taxoai.core.config import Settings, get_settings
from taxoai.core.database import get_async_session
from taxoai.services import Services, TaxoAIClient, build_services


# Database session
AsyncSessionDep = Annotated[AsyncSession, Depends(get_async_session)]


async def get_app_settings() -> Settings:
    return get_settings()


SettingsDep = Annotated[Settings, Depends(get_app_settings)]


async def get_api_client(request: Request) -> TaxoAIClient:
    """Shared TaxoAI client, created by the application lifespan"""
    client = getattr(request.app.state, "taxoai_client", None)
    if client is None:
        client = TaxoAIClient()
        request.app.state.taxoai_client = client
    return client


ApiClientDep = Annotated[TaxoAIClient, Depends(get_api_client)]


async def get_cache_backend() -> CacheBackend:
    return get_cache()


CacheDep = Annotated[CacheBackend, Depends(get_cache_backend)]


# Services
async def get_services(
    session: AsyncSessionDep,
    client: ApiClientDep,
    cache: CacheDep,
    settings: SettingsDep,
) -> Services:
    """Service graph bound to the request's session"""
    return build_services(session, client, cache=cache, settings=settings)


ServicesDep = Annotated[Services, Depends(get_services)]
