"""
Term repository implementation
"""

from typing import Iterable, List, Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from taxoai.core.logging import log
from taxoai.models.taxonomy import ProductTerm, Term
from taxoai.repositories.base import BaseRepository
from taxoai.utils.text import slugify


class TermRepository(BaseRepository[Term]):
    """Repository for taxonomy terms and their product assignments"""

    def __init__(self, session: AsyncSession):
        super().__init__(Term, session)

    async def get_by_name(self, taxonomy: str, name: str) -> Optional[Term]:
        statement = select(Term).where(Term.taxonomy == taxonomy, Term.name == name)
        result = await self.session.exec(statement)
        return result.first()

    async def get_by_slug(self, taxonomy: str, slug: str) -> Optional[Term]:
        statement = select(Term).where(Term.taxonomy == taxonomy, Term.slug == slug)
        result = await self.session.exec(statement)
        return result.first()

    async def find_or_create(self, taxonomy: str, name: str) -> Term:
        """Look up by name, then by slug; create when neither matches"""
        term = await self.get_by_name(taxonomy, name)
        if term:
            return term

        slug = slugify(name) or name.lower()
        term = await self.get_by_slug(taxonomy, slug)
        if term:
            return term

        term = await self.create(taxonomy=taxonomy, name=name, slug=slug)
        log.info("Term created", taxonomy=taxonomy, term=name, term_id=term.id)
        return term

    async def get_object_terms(self, product_id: int, taxonomy: str) -> List[Term]:
        statement = (
            select(Term)
            .join(ProductTerm, ProductTerm.term_id == Term.id)
            .where(ProductTerm.product_id == product_id, Term.taxonomy == taxonomy)
            .order_by(Term.id)
        )
        result = await self.session.exec(statement)
        return list(result.all())

    async def set_object_terms(
        self, product_id: int, term_ids: Iterable[int], taxonomy: str, append: bool = False
    ) -> List[int]:
        """
        Assign terms of one taxonomy to a product.

        With append=False the product's other terms in that taxonomy are
        removed; terms of other taxonomies are never touched.
        """
        wanted = list(dict.fromkeys(term_ids))
        current = {term.id for term in await self.get_object_terms(product_id, taxonomy)}

        if not append:
            for term_id in current - set(wanted):
                link = await self.session.get(ProductTerm, (product_id, term_id))
                if link:
                    await self.session.delete(link)

        for term_id in wanted:
            if term_id not in current:
                self.session.add(ProductTerm(product_id=product_id, term_id=term_id))

        await self.session.flush()
        return [term.id for term in await self.get_object_terms(product_id, taxonomy)]

    async def add_terms_by_name(self, product_id: int, names: Iterable[str], taxonomy: str) -> List[Term]:
        """Find-or-create each name and append it to the product"""
        terms = [await self.find_or_create(taxonomy, name) for name in names if name]
        if terms:
            await self.set_object_terms(product_id, [term.id for term in terms], taxonomy, append=True)
        return terms
