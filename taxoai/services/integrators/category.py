"""
Google category write-back and store category mapping
"""

from typing import Optional

from taxoai.core.config import settings
from taxoai.core.logging import log
from taxoai.models.taxonomy import Term
from taxoai.repositories.product import ProductRepository
from taxoai.repositories.term import TermRepository
from taxoai.utils.text import sanitize_text_field


META_GOOGLE_PRODUCT_CATEGORY = "_google_product_category"
META_GOOGLE_PRODUCT_CATEGORY_ID = "_google_product_category_id"

PRODUCT_CATEGORY_TAXONOMY = "product_cat"


def leaf_category(path: str) -> str:
    """Last segment of a 'A > B > C' category path"""
    return path.split(">")[-1].strip() if path else ""


class CategoryMapper:
    def __init__(
        self,
        products: ProductRepository,
        terms: TermRepository,
        auto_map: Optional[bool] = None,
    ):
        self.products = products
        self.terms = terms
        self.auto_map = settings.auto_map_categories if auto_map is None else auto_map

    async def map(self, product_id: int, google_category: str, google_category_id: int = 0) -> Optional[Term]:
        """
        Store the Google category fields read by shopping feeds and, when
        auto-mapping is on, append the leaf category as a store category.

        Returns the assigned store category, if any.
        """
        google_category = sanitize_text_field(google_category)

        if google_category:
            await self.products.update_meta(product_id, META_GOOGLE_PRODUCT_CATEGORY, google_category)
        if google_category_id and google_category_id > 0:
            await self.products.update_meta(product_id, META_GOOGLE_PRODUCT_CATEGORY_ID, int(google_category_id))

        if not self.auto_map or not google_category:
            return None

        leaf = leaf_category(google_category)
        if not leaf:
            return None

        term = await self.terms.find_or_create(PRODUCT_CATEGORY_TAXONOMY, leaf)
        await self.terms.set_object_terms(product_id, [term.id], PRODUCT_CATEGORY_TAXONOMY, append=True)

        log.info("Category mapped", product_id=product_id, category=leaf, term_id=term.id)
        return term
