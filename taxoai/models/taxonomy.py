"""
Term and attribute models
"""

from typing import List, Optional

from sqlalchemy import JSON, UniqueConstraint
from sqlmodel import Column, Field, SQLModel


class Term(SQLModel, table=True):
    """Term within a taxonomy (product_cat, product_tag, pa_color, ...)"""

    __tablename__ = "term"
    __table_args__ = (UniqueConstraint("taxonomy", "slug", name="uq_term_taxonomy_slug"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    taxonomy: str = Field(index=True)
    name: str = Field(index=True)
    slug: str


class ProductTerm(SQLModel, table=True):
    """Product to term assignment"""

    __tablename__ = "product_term"

    product_id: int = Field(foreign_key="product.id", primary_key=True)
    term_id: int = Field(foreign_key="term.id", primary_key=True)


class AttributeTaxonomy(SQLModel, table=True):
    """Global product attribute (backs the pa_<name> taxonomy)"""

    __tablename__ = "attribute_taxonomy"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True)  # slug without the pa_ prefix
    label: str
    type: str = Field(default="select")
    order_by: str = Field(default="menu_order")
    has_archives: bool = Field(default=False)

    @property
    def taxonomy(self) -> str:
        return f"pa_{self.name}"


class ProductAttribute(SQLModel, table=True):
    """Attribute row shown on a product"""

    __tablename__ = "product_attribute"
    __table_args__ = (UniqueConstraint("product_id", "taxonomy", name="uq_product_attribute"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(foreign_key="product.id", index=True)
    taxonomy: str
    attribute_id: Optional[int] = Field(default=None, foreign_key="attribute_taxonomy.id")
    options: List[int] = Field(default_factory=list, sa_column=Column(JSON))  # term ids
    position: int = Field(default=0)
    visible: bool = Field(default=True)
    variation: bool = Field(default=False)
