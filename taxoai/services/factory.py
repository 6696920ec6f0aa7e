"""
Explicit wiring of the service graph for one database session
"""

from dataclasses import dataclass
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from taxoai.core.cache import CacheBackend, get_cache
from taxoai.core.config import Settings, settings as default_settings
from taxoai.repositories import AttributeRepository, OptionRepository, ProductRepository, TermRepository
from taxoai.services.api_client import TaxoAIClient
from taxoai.services.batch import BatchOrchestrator
from taxoai.services.integrators import AttributeMapper, CategoryMapper, SEOIntegrator
from taxoai.services.product_analyzer import ProductAnalyzer
from taxoai.services.product_events import ProductEventHandler
from taxoai.services.usage_tracker import Clock, UsageTracker
from taxoai.utils.dates import utc_now


@dataclass
class Services:
    client: TaxoAIClient
    products: ProductRepository
    terms: TermRepository
    attributes: AttributeRepository
    options: OptionRepository
    usage: UsageTracker
    seo: SEOIntegrator
    category: CategoryMapper
    attribute_mapper: AttributeMapper
    analyzer: ProductAnalyzer
    batch: BatchOrchestrator
    events: ProductEventHandler


def build_services(
    session: AsyncSession,
    client: TaxoAIClient,
    cache: Optional[CacheBackend] = None,
    settings: Optional[Settings] = None,
    clock: Clock = utc_now,
) -> Services:
    """Build every service; the caller owns the session and the client"""
    settings = settings or default_settings
    cache = cache or get_cache()

    products = ProductRepository(session)
    terms = TermRepository(session)
    attributes = AttributeRepository(session)
    options = OptionRepository(session)

    usage = UsageTracker(
        client,
        options,
        cache=cache,
        clock=clock,
        free_tier_limit=settings.free_tier_limit,
        cache_ttl=settings.usage_cache_ttl,
    )
    seo = SEOIntegrator(products, terms, seo_plugin=settings.seo_plugin)
    category = CategoryMapper(products, terms, auto_map=settings.auto_map_categories)
    attribute_mapper = AttributeMapper(products, terms, attributes)

    analyzer = ProductAnalyzer(client, usage, products, seo, category, attribute_mapper, settings=settings)
    batch = BatchOrchestrator(client, analyzer, products, cache=cache, settings=settings)
    events = ProductEventHandler(analyzer, products, settings=settings)

    return Services(
        client=client,
        products=products,
        terms=terms,
        attributes=attributes,
        options=options,
        usage=usage,
        seo=seo,
        category=category,
        attribute_mapper=attribute_mapper,
        analyzer=analyzer,
        batch=batch,
        events=events,
    )
