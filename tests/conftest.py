"""
Test configuration and fixtures
"""

import os

# Settings are read at import time
os.environ.setdefault("TAXOAI_API_KEY", "test-key")
os.environ.setdefault("TAXOAI_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("TAXOAI_LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import taxoai.models  # noqa: F401
from taxoai.api.deps import get_api_client, get_app_settings, get_cache_backend
from taxoai.core.cache import InMemoryCache
from taxoai.core.config import Settings
from taxoai.core.database import get_async_session
from taxoai.main import app
from taxoai.schemas.product import ProductCreate
from taxoai.services import TaxoAIClient, build_services


TEST_API_URL = "https://api.taxoai.test"


class FakeClock:
    """Controllable UTC clock"""

    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float):
        self.now += timedelta(seconds=seconds)


class FakeTaxoAI:
    """
    In-process stand-in for the remote API, served through httpx.MockTransport.

    Responses are registered per (method, path); a list of responses is
    consumed in order and the last one repeats.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[Any]] = {}
        self.requests: List[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
        exc: Optional[Exception] = None,
    ):
        self.routes.setdefault((method, path), []).append((status, json, headers, exc))
        return self

    def reset(self, method: str, path: str):
        self.routes.pop((method, path), None)
        return self

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": "Not found"})

        status, body, headers, exc = queue.pop(0) if len(queue) > 1 else queue[0]
        if exc is not None:
            raise exc
        return httpx.Response(status, json=body, headers=headers)


@pytest.fixture
def fake_api() -> FakeTaxoAI:
    return FakeTaxoAI()


@pytest_asyncio.fixture
async def taxoai_client(fake_api):
    async with TaxoAIClient(api_key="test-key", api_url=TEST_API_URL, transport=httpx.MockTransport(fake_api)) as client:
        yield client


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        api_key="test-key",
        api_url=TEST_API_URL,
        database_url="sqlite+aiosqlite://",
        language="en",
        confidence_threshold=0.7,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def cache():
    backend = InMemoryCache()
    yield backend
    await backend.clear()


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Create a test database session"""
    session_factory = async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def services_factory(db_session, taxoai_client, cache, test_settings, clock) -> Callable:
    """Build the service graph, optionally with overridden settings"""

    def factory(**overrides):
        settings = test_settings.model_copy(update=overrides) if overrides else test_settings
        return build_services(db_session, taxoai_client, cache=cache, settings=settings, clock=clock)

    return factory


@pytest.fixture
def services(services_factory):
    return services_factory()


@pytest.fixture
def make_product(db_session, services) -> Callable:
    async def factory(**fields):
        data = {"name": "Blue Cotton T-Shirt", "price": 29.99}
        data.update(fields)
        return await services.products.create_product(ProductCreate(**data))

    return factory


@pytest_asyncio.fixture
async def client(db_session, taxoai_client, cache, test_settings):
    """Create test client with database, cache and remote API overrides"""

    async def get_test_session():
        yield db_session

    app.dependency_overrides[get_async_session] = get_test_session
    app.dependency_overrides[get_api_client] = lambda: taxoai_client
    app.dependency_overrides[get_cache_backend] = lambda: cache
    app.dependency_overrides[get_app_settings] = lambda: test_settings

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def analysis_response() -> Callable[..., Dict[str, Any]]:
    """Factory for a typical analyze response body"""

    def build(confidence: float = 0.92, **sections) -> Dict[str, Any]:
        body = {
            "classification": {
                "google_category": "Apparel & Accessories > Clothing > Shirts & Tops",
                "google_category_id": 212,
                "confidence": confidence,
            },
            "seo": {
                "meta_title": "Blue Cotton T-Shirt | Soft Everyday Tee",
                "meta_description": "Breathable blue cotton t-shirt for everyday wear.",
                "optimized_title": "Blue Cotton Crew Neck T-Shirt",
                "optimized_description": "<p>Soft <strong>cotton</strong> tee.</p><script>alert(1)</script>",
                "keywords": [{"keyword": "blue t-shirt", "volume": 5400}, {"keyword": "cotton tee", "volume": 1900}],
                "tags": ["cotton", "t-shirt"],
            },
            "attributes": {"color": ["Blue"], "material": "Cotton", "gender": "Unisex", "style": "Casual"},
            "processing_time_ms": 840,
            "cached": False,
        }
        body.update(sections)
        return body

    return build
