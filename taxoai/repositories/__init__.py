"""
Repository implementations
"""

from .attribute import AttributeRepository
from .base import BaseRepository
from .option import OptionRepository
from .product import ProductRepository
from .term import TermRepository

__all__ = [
    "BaseRepository",
    "ProductRepository",
    "TermRepository",
    "AttributeRepository",
    "OptionRepository",
]
