"""
API v1 routers
"""

from fastapi import APIRouter

from .bulk import router as bulk_router
from .health import router as health_router
from .products import router as products_router
from .settings import router as settings_router
from .taxonomies import router as taxonomies_router
from .usage import router as usage_router
from .webhooks import router as webhooks_router

api_router = APIRouter()

# Include routers
api_router.include_router(health_router, tags=["health"])
api_router.include_router(products_router, prefix="/products", tags=["products"])
api_router.include_router(taxonomies_router, prefix="/taxonomies", tags=["taxonomies"])
api_router.include_router(bulk_router, prefix="/bulk", tags=["bulk"])
api_router.include_router(usage_router, prefix="/usage", tags=["usage"])
api_router.include_router(settings_router, prefix="/settings", tags=["settings"])
api_router.include_router(webhooks_router, prefix="/webhooks", tags=["webhooks"])
