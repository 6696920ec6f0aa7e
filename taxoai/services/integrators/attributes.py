"""
Attribute write-back
"""

from typing import Dict, List

from taxoai.core.logging import log
from taxoai.repositories.attribute import AttributeRepository
from taxoai.repositories.product import ProductRepository
from taxoai.repositories.term import TermRepository
from taxoai.schemas.analysis import AttributesData
from taxoai.utils.text import clean_list


# Response field -> attribute taxonomy
ATTRIBUTE_TAXONOMIES: Dict[str, str] = {
    "color": "pa_color",
    "material": "pa_material",
    "gender": "pa_gender",
    "style": "pa_style",
}


class AttributeMapper:
    def __init__(
        self,
        products: ProductRepository,
        terms: TermRepository,
        attributes: AttributeRepository,
    ):
        self.products = products
        self.terms = terms
        self.attributes = attributes

    async def map_attributes(self, product_id: int, attributes: AttributesData) -> Dict[str, List[int]]:
        """
        Set color/material/gender/style on the product.

        Each dimension present in the response replaces the product's terms
        for that attribute; dimensions that are absent, and attributes the
        mapper does not know, are left untouched. Returns the term ids
        assigned per taxonomy.
        """
        if not await self.products.get(product_id):
            return {}

        assigned: Dict[str, List[int]] = {}
        for field, taxonomy in ATTRIBUTE_TAXONOMIES.items():
            values = clean_list(getattr(attributes, field, None))
            if not values:
                continue

            attribute = await self.attributes.ensure_taxonomy(taxonomy[len("pa_"):])

            term_ids = []
            for value in values:
                term = await self.terms.find_or_create(taxonomy, value)
                if term.id not in term_ids:
                    term_ids.append(term.id)

            await self.terms.set_object_terms(product_id, term_ids, taxonomy, append=False)
            await self.attributes.save_product_attribute(product_id, attribute, term_ids)
            assigned[taxonomy] = term_ids

        if assigned:
            log.info("Attributes mapped", product_id=product_id, taxonomies=sorted(assigned))
        return assigned
