"""
Product repository implementation
"""

import math
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from taxoai.core.logging import log
from taxoai.models.product import Product, ProductMeta
from taxoai.repositories.base import BaseRepository
from taxoai.schemas.product import (
    AnalysisStatus,
    CatalogFilter,
    CatalogPage,
    CatalogRow,
    ConfidenceBand,
    ProductCreate,
)
from taxoai.utils.dates import utc_now


# Meta keys written by the analyzer
META_ANALYSIS_RESULT = "_taxoai_analysis_result"
META_ANALYZED_AT = "_taxoai_analyzed_at"
META_GOOGLE_CATEGORY = "_taxoai_google_category"
META_GOOGLE_CATEGORY_ID = "_taxoai_google_category_id"
META_CONFIDENCE = "_taxoai_confidence"

ANALYSIS_META_KEYS = (
    META_ANALYSIS_RESULT,
    META_ANALYZED_AT,
    META_GOOGLE_CATEGORY,
    META_GOOGLE_CATEGORY_ID,
    META_CONFIDENCE,
)


class ProductRepository(BaseRepository[Product]):
    """Repository for products and their metadata"""

    def __init__(self, session: AsyncSession):
        super().__init__(Product, session)

    async def get(self, id: Union[int, str, None]) -> Optional[Product]:
        """Get product by id; non-numeric or non-positive ids resolve to None"""
        try:
            product_id = int(id)
        except (TypeError, ValueError):
            return None
        if product_id <= 0:
            return None
        return await self.session.get(Product, product_id)

    async def create_product(self, product_in: ProductCreate) -> Product:
        product = await self.create(**product_in.model_dump())
        log.info("Product created", product_id=product.id)
        return product

    async def update_fields(self, product_id: int, **fields) -> Optional[Product]:
        """Update core product fields (name, description, ...)"""
        product = await self.get(product_id)
        if not product:
            return None

        for field, value in fields.items():
            setattr(product, field, value)
        product.updated_at = utc_now()
        return await self.add(product)

    @staticmethod
    def image_urls(product: Product) -> List[str]:
        """Featured image first, then gallery; empty URLs skipped"""
        urls = [product.image_url] + list(product.gallery_urls or [])
        return [url for url in urls if url]

    # Metadata

    async def _meta_row(self, product_id: int, key: str) -> Optional[ProductMeta]:
        statement = select(ProductMeta).where(ProductMeta.product_id == product_id, ProductMeta.meta_key == key)
        result = await self.session.exec(statement)
        return result.first()

    async def get_meta(self, product_id: int, key: str, default: Any = None) -> Any:
        row = await self._meta_row(product_id, key)
        return row.meta_value if row else default

    async def get_meta_many(self, product_id: int, keys: Iterable[str]) -> Dict[str, Any]:
        """Present keys only"""
        statement = select(ProductMeta).where(
            ProductMeta.product_id == product_id, ProductMeta.meta_key.in_(list(keys))
        )
        result = await self.session.exec(statement)
        return {row.meta_key: row.meta_value for row in result.all()}

    async def update_meta(self, product_id: int, key: str, value: Any) -> None:
        """Insert or replace a metadata value"""
        row = await self._meta_row(product_id, key)
        if row is None:
            row = ProductMeta(product_id=product_id, meta_key=key, meta_value=value)
        else:
            row.meta_value = value
            row.updated_at = utc_now()
        await self.add(row)

    async def delete_meta(self, product_id: int, key: str) -> bool:
        row = await self._meta_row(product_id, key)
        if row is None:
            return False
        await self.delete(row)
        return True

    # Analysis catalog

    async def list_products(
        self,
        filter: CatalogFilter = CatalogFilter.ALL,
        threshold: float = 0.7,
        page: int = 1,
        per_page: int = 25,
    ) -> CatalogPage:
        """Published products ordered by name, with their analysis status"""
        filter = CatalogFilter(filter)
        page = max(1, page)

        statement = select(Product).where(Product.status == "publish").order_by(Product.name, Product.id)
        products = (await self.session.exec(statement)).all()

        meta: Dict[int, Dict[str, Any]] = {product.id: {} for product in products}
        if products:
            statement = select(ProductMeta).where(
                ProductMeta.product_id.in_(list(meta)),
                ProductMeta.meta_key.in_([META_ANALYZED_AT, META_CONFIDENCE, META_GOOGLE_CATEGORY]),
            )
            for row in (await self.session.exec(statement)).all():
                meta[row.product_id][row.meta_key] = row.meta_value

        rows = []
        for product in products:
            row = self._catalog_row(product, meta[product.id], threshold)
            if filter == CatalogFilter.UNANALYZED and row.analyzed_at:
                continue
            if filter == CatalogFilter.LOW_CONFIDENCE and (row.confidence is None or row.confidence >= threshold):
                continue
            rows.append(row)

        start = (page - 1) * per_page
        return CatalogPage(
            items=rows[start : start + per_page],
            total=len(rows),
            page=page,
            per_page=per_page,
            total_pages=math.ceil(len(rows) / per_page) if per_page else 0,
        )

    @staticmethod
    def _catalog_row(product: Product, meta: Dict[str, Any], threshold: float) -> CatalogRow:
        analyzed_at = meta.get(META_ANALYZED_AT) or None
        confidence = meta.get(META_CONFIDENCE)
        confidence = float(confidence) if confidence is not None else None

        if not analyzed_at:
            status = AnalysisStatus.PENDING
        elif confidence is not None and confidence < threshold:
            status = AnalysisStatus.LOW_CONFIDENCE
        else:
            status = AnalysisStatus.ANALYZED

        return CatalogRow(
            id=product.id,
            name=product.name,
            status=status,
            google_category=meta.get(META_GOOGLE_CATEGORY) or None,
            confidence=confidence,
            confidence_band=ConfidenceBand.for_confidence(confidence) if confidence is not None else None,
            analyzed_at=analyzed_at,
        )
