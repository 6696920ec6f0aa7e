"""
TaxoAI connector API - FastAPI application
"""
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from starlette_context import plugins
from starlette_context.middleware import ContextMiddleware

from taxoai.api.v1 import api_router
from taxoai.core.config import settings
from taxoai.core.database import db_manager, init_db
from taxoai.core.exceptions import TaxoAIError, handle_api_exception, handle_unexpected_exception
from taxoai.core.logging import log, setup_logging
from taxoai.middleware import RequestIDMiddleware, TimingMiddleware
from taxoai.services.api_client import TaxoAIClient


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events
    """
    setup_logging()
    log.info("Starting TaxoAI connector", version=settings.version, env=settings.environment)

    if not settings.has_api_key:
        log.warning("TaxoAI API key is not configured; analyses will be rejected")

    await init_db()
    app.state.taxoai_client = TaxoAIClient()

    yield

    log.info("Shutting down TaxoAI connector")
    await app.state.taxoai_client.aclose()
    await db_manager.close()


def create_application() -> FastAPI:
    """
    Create FastAPI application with all configurations
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        openapi_url=f"{settings.api_v1_prefix}/openapi.json" if settings.debug else None,
        docs_url=f"{settings.api_v1_prefix}/docs" if settings.debug else None,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
        debug=settings.debug,
        openapi_tags=[
            {"name": "health", "description": "Health check endpoints"},
            {"name": "products", "description": "Product analysis and catalog"},
            {"name": "taxonomies", "description": "Google taxonomy search"},
            {"name": "bulk", "description": "Batch analysis jobs"},
            {"name": "usage", "description": "Plan usage"},
            {"name": "settings", "description": "Connector settings"},
            {"name": "webhooks", "description": "Store events"},
        ],
    )

    # Add custom exception handlers
    app.add_exception_handler(TaxoAIError, handle_api_exception)
    app.add_exception_handler(Exception, handle_unexpected_exception)

    # Add middleware stack (last added runs first)
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        ContextMiddleware,
        plugins=(
            plugins.RequestIdPlugin(),
            plugins.CorrelationIdPlugin(force_new_uuid=False),
        ),
    )
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(TimingMiddleware)

    # Add API routes
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    @app.get("/", tags=["root"])
    async def root() -> Dict[str, Any]:
        """Root endpoint with API information"""
        return {
            "name": settings.app_name,
            "version": settings.version,
            "environment": settings.environment,
            "docs": f"{settings.api_v1_prefix}/docs" if settings.debug else None,
        }

    return app


# Create the application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "taxoai.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=None,
        access_log=False,
    )
