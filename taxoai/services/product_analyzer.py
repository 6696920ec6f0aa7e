"""
Single-product analysis orchestration
"""

from typing import Optional

from taxoai.core.config import Settings, settings as default_settings
from taxoai.core.exceptions import InvalidInputError, LimitReachedError, NotConfiguredError
from taxoai.core.logging import log
from taxoai.models.product import Product
from taxoai.repositories.product import (
    ANALYSIS_META_KEYS,
    META_ANALYSIS_RESULT,
    META_ANALYZED_AT,
    META_CONFIDENCE,
    META_GOOGLE_CATEGORY,
    META_GOOGLE_CATEGORY_ID,
    ProductRepository,
)
from taxoai.schemas.analysis import AnalysisPayload, AnalysisResult, StoredAnalysis
from taxoai.services.api_client import TaxoAIClient
from taxoai.services.integrators import AttributeMapper, CategoryMapper, SEOIntegrator
from taxoai.services.usage_tracker import UsageTracker
from taxoai.utils.dates import utc_now
from taxoai.utils.text import sanitize_text_field, strip_all_tags


class ProductAnalyzer:
    """
    Runs one product through the classification API.

    The raw result is always stored; SEO, category and attribute write-back
    only happen when the classification confidence reaches the configured
    threshold.
    """

    def __init__(
        self,
        client: TaxoAIClient,
        usage: UsageTracker,
        products: ProductRepository,
        seo: SEOIntegrator,
        category: CategoryMapper,
        attributes: AttributeMapper,
        settings: Optional[Settings] = None,
    ):
        self.client = client
        self.usage = usage
        self.products = products
        self.seo = seo
        self.category = category
        self.attributes = attributes
        self.settings = settings or default_settings

    async def analyze(self, product_id: int) -> AnalysisResult:
        """
        Analyze a product and write the result back.

        Any product status is accepted. Any error leaves the product untouched.
        """
        product = await self.products.get(product_id)
        if not product:
            raise InvalidInputError("Invalid product ID.", product_id=product_id)

        if not self.client.api_key:
            raise NotConfiguredError()

        if not await self.usage.can_analyze():
            raise LimitReachedError()

        payload = self.build_payload(product)
        result = await self.client.analyze_product(payload)

        await self.usage.increment()
        await self.store_result(product.id, result)
        await self.apply_result(product.id, result)

        log.info(
            "Product analyzed",
            product_id=product.id,
            confidence=result.confidence,
            cached=result.cached,
        )
        return result

    def build_payload(self, product: Product) -> AnalysisPayload:
        description = strip_all_tags(product.description) if product.description else ""
        image_urls = ProductRepository.image_urls(product)

        return AnalysisPayload(
            name=product.name,
            language=self.settings.language,
            product_id=str(product.id),
            description=description or None,
            price=float(product.price) if product.price is not None else None,
            image_urls=image_urls or None,
            analyze_images=True if self.settings.analyze_images else None,
        )

    async def store_result(self, product_id: int, result: AnalysisResult) -> None:
        """Persist the raw result and the derived classification fields"""
        await self.products.update_meta(product_id, META_ANALYSIS_RESULT, result.raw())
        await self.products.update_meta(product_id, META_ANALYZED_AT, utc_now().isoformat(timespec="seconds"))

        classification = result.classification
        if classification is None:
            return

        # Only fields the service actually returned
        sent = classification.model_fields_set
        if "google_category" in sent:
            await self.products.update_meta(
                product_id, META_GOOGLE_CATEGORY, sanitize_text_field(classification.google_category)
            )
        if "google_category_id" in sent:
            await self.products.update_meta(product_id, META_GOOGLE_CATEGORY_ID, classification.google_category_id)
        if "confidence" in sent:
            await self.products.update_meta(product_id, META_CONFIDENCE, classification.confidence)

    def meets_threshold(self, result: AnalysisResult) -> bool:
        return result.confidence >= self.settings.confidence_threshold

    async def apply_result(self, product_id: int, result: AnalysisResult) -> bool:
        """Fan the result out to the integrators; False when below threshold"""
        if not self.meets_threshold(result):
            log.info(
                "Confidence below threshold, result not applied",
                product_id=product_id,
                confidence=result.confidence,
                threshold=self.settings.confidence_threshold,
            )
            return False

        if result.seo is not None:
            await self.seo.apply_seo(
                product_id,
                result.seo,
                update_title=self.settings.update_title,
                update_description=self.settings.update_description,
            )

        if result.classification is not None:
            await self.category.map(
                product_id,
                result.classification.google_category,
                result.classification.google_category_id,
            )

        if result.attributes is not None:
            await self.attributes.map_attributes(product_id, result.attributes)

        return True

    async def stored_analysis(self, product_id: int) -> StoredAnalysis:
        """Analysis fields currently stored on a product"""
        if not await self.products.get(product_id):
            raise InvalidInputError("Invalid product ID.", product_id=product_id)

        meta = await self.products.get_meta_many(product_id, ANALYSIS_META_KEYS)
        return StoredAnalysis(
            product_id=product_id,
            analysis_result=meta.get(META_ANALYSIS_RESULT),
            analyzed_at=meta.get(META_ANALYZED_AT),
            google_category=meta.get(META_GOOGLE_CATEGORY),
            google_category_id=meta.get(META_GOOGLE_CATEGORY_ID),
            confidence=meta.get(META_CONFIDENCE),
        )
