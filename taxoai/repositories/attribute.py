"""
Product attribute repository implementation
"""

from typing import List, Optional

from sqlmodel import func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from taxoai.core.logging import log
from taxoai.models.taxonomy import AttributeTaxonomy, ProductAttribute
from taxoai.repositories.base import BaseRepository
from taxoai.utils.text import ucfirst


class AttributeRepository(BaseRepository[AttributeTaxonomy]):
    """Repository for global attributes and per-product attribute rows"""

    def __init__(self, session: AsyncSession):
        super().__init__(AttributeTaxonomy, session)

    async def get_by_name(self, name: str) -> Optional[AttributeTaxonomy]:
        statement = select(AttributeTaxonomy).where(AttributeTaxonomy.name == name)
        result = await self.session.exec(statement)
        return result.first()

    async def ensure_taxonomy(self, name: str) -> AttributeTaxonomy:
        """Get the global attribute, creating it as a select attribute on first use"""
        attribute = await self.get_by_name(name)
        if attribute:
            return attribute

        attribute = await self.create(name=name, label=ucfirst(name), type="select", order_by="menu_order")
        log.info("Attribute taxonomy created", taxonomy=attribute.taxonomy, attribute_id=attribute.id)
        return attribute

    async def get_product_attributes(self, product_id: int) -> List[ProductAttribute]:
        statement = (
            select(ProductAttribute)
            .where(ProductAttribute.product_id == product_id)
            .order_by(ProductAttribute.position, ProductAttribute.id)
        )
        result = await self.session.exec(statement)
        return list(result.all())

    async def count_product_attributes(self, product_id: int) -> int:
        statement = select(func.count()).select_from(ProductAttribute).where(ProductAttribute.product_id == product_id)
        result = await self.session.exec(statement)
        return result.one()

    async def save_product_attribute(
        self, product_id: int, attribute: AttributeTaxonomy, term_ids: List[int]
    ) -> ProductAttribute:
        """
        Set (or replace) the product's row for one attribute taxonomy.

        A new row is placed after the existing ones; rows for other
        attributes are left as they are.
        """
        statement = select(ProductAttribute).where(
            ProductAttribute.product_id == product_id, ProductAttribute.taxonomy == attribute.taxonomy
        )
        row = (await self.session.exec(statement)).first()

        if row is None:
            row = ProductAttribute(
                product_id=product_id,
                taxonomy=attribute.taxonomy,
                position=await self.count_product_attributes(product_id),
            )

        row.attribute_id = attribute.id
        row.options = list(term_ids)
        row.visible = True
        row.variation = False
        return await self.add(row)
