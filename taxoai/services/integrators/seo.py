"""
SEO write-back
"""

from typing import Dict, Optional

from taxoai.core.config import SEOPlugin, settings
from taxoai.core.logging import log
from taxoai.repositories.product import ProductRepository
from taxoai.repositories.term import TermRepository
from taxoai.schemas.analysis import SEOData
from taxoai.utils.text import clean_list, sanitize_html, sanitize_text_field


META_KEYWORDS = "_taxoai_keywords"

# Meta keys each SEO extension reads; the fallback has no focus keyword field
SEO_META_KEYS: Dict[SEOPlugin, Dict[str, str]] = {
    SEOPlugin.YOAST: {
        "title": "_yoast_wpseo_title",
        "description": "_yoast_wpseo_metadesc",
        "focus_keyword": "_yoast_wpseo_focuskw",
    },
    SEOPlugin.RANK_MATH: {
        "title": "rank_math_title",
        "description": "rank_math_description",
        "focus_keyword": "rank_math_focus_keyword",
    },
    SEOPlugin.NONE: {
        "title": "_taxoai_seo_title",
        "description": "_taxoai_seo_meta_description",
    },
}


class SEOIntegrator:
    """Writes SEO suggestions into the configured SEO extension's fields"""

    def __init__(
        self,
        products: ProductRepository,
        terms: TermRepository,
        seo_plugin: Optional[SEOPlugin] = None,
    ):
        self.products = products
        self.terms = terms
        self.seo_plugin = SEOPlugin(seo_plugin or settings.seo_plugin)
        self.meta_keys = SEO_META_KEYS[self.seo_plugin]

    async def apply_seo(
        self,
        product_id: int,
        seo: SEOData,
        update_title: bool = False,
        update_description: bool = False,
    ) -> None:
        meta_title = sanitize_text_field(seo.meta_title)
        meta_description = sanitize_text_field(seo.meta_description)
        optimized_title = sanitize_text_field(seo.optimized_title)
        optimized_description = sanitize_html(seo.optimized_description)
        focus_keyword = sanitize_text_field(seo.focus_keyword)

        fields = {
            "title": meta_title,
            "description": meta_description,
            "focus_keyword": focus_keyword,
        }
        for field, value in fields.items():
            key = self.meta_keys.get(field)
            if key and value:
                await self.products.update_meta(product_id, key, value)

        updates = {}
        if update_title and optimized_title:
            updates["name"] = optimized_title
        if update_description and optimized_description:
            updates["description"] = optimized_description
        if updates:
            await self.products.update_fields(product_id, **updates)

        tags = clean_list(seo.tags)
        if tags:
            await self.terms.add_terms_by_name(product_id, tags, "product_tag")

        if seo.keywords:
            await self.products.update_meta(
                product_id, META_KEYWORDS, [keyword.model_dump(exclude_none=True) for keyword in seo.keywords]
            )

        log.info(
            "SEO applied",
            product_id=product_id,
            seo_plugin=self.seo_plugin.value,
            title_updated="name" in updates,
            description_updated="description" in updates,
            tags=len(tags),
        )
