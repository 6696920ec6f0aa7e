"""
SQLModel database models
"""

from .option import Option
from .product import Product, ProductMeta
from .taxonomy import AttributeTaxonomy, ProductAttribute, ProductTerm, Term

__all__ = [
    "Product",
    "ProductMeta",
    "Term",
    "ProductTerm",
    "AttributeTaxonomy",
    "ProductAttribute",
    "Option",
]
