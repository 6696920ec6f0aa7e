"""
Auto-analysis on product save
"""

from typing import Optional, Set

from taxoai.core.config import Settings, settings as default_settings
from taxoai.core.exceptions import TaxoAIError
from taxoai.core.logging import log
from taxoai.repositories.product import ProductRepository
from taxoai.schemas.analysis import AnalysisResult
from taxoai.services.product_analyzer import ProductAnalyzer


# Products being auto-analyzed in this process
_in_progress: Set[int] = set()


class ProductEventHandler:
    def __init__(
        self,
        analyzer: ProductAnalyzer,
        products: ProductRepository,
        settings: Optional[Settings] = None,
        in_progress: Optional[Set[int]] = None,
    ):
        self.analyzer = analyzer
        self.products = products
        self.settings = settings or default_settings
        self.in_progress = _in_progress if in_progress is None else in_progress

    async def on_product_saved(self, product_id: int) -> Optional[AnalysisResult]:
        """
        Analyze a published product after it was saved.

        Saves triggered by the analysis itself are ignored, and a failed
        analysis never propagates to the save.
        """
        if not self.settings.auto_analyze:
            return None

        product = await self.products.get(product_id)
        if not product or not product.is_published:
            return None

        if product.id in self.in_progress:
            log.debug("Auto-analysis already running", product_id=product.id)
            return None

        self.in_progress.add(product.id)
        try:
            return await self.analyzer.analyze(product.id)
        except TaxoAIError as e:
            log.warning("Auto-analysis failed", product_id=product.id, code=e.code, error=e.detail)
            return None
        finally:
            self.in_progress.discard(product.id)
