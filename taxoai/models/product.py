"""
Product models
"""

from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import JSON, DateTime, UniqueConstraint
from sqlmodel import Column, Field, SQLModel

from taxoai.utils.dates import utc_now


class ProductBase(SQLModel):
    """Base product attributes"""

    name: str
    description: Optional[str] = None
    price: Optional[float] = None
    status: str = Field(default="publish", index=True)  # publish, draft, pending, private

    # Featured image first, gallery after it
    image_url: Optional[str] = None


class Product(ProductBase, table=True):
    """Store product"""

    __tablename__ = "product"

    id: Optional[int] = Field(default=None, primary_key=True)
    gallery_urls: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True)))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True)))

    @property
    def is_published(self) -> bool:
        return self.status == "publish"


class ProductMeta(SQLModel, table=True):
    """Key/value metadata attached to a product"""

    __tablename__ = "product_meta"
    __table_args__ = (UniqueConstraint("product_id", "meta_key", name="uq_product_meta_key"),)

    meta_id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(foreign_key="product.id", index=True)
    meta_key: str = Field(index=True)
    meta_value: Any = Field(default=None, sa_column=Column(JSON))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True)))
