"""
Result integrators: write analysis results back onto products
"""

from .attributes import AttributeMapper
from .category import CategoryMapper
from .seo import SEOIntegrator

__all__ = ["AttributeMapper", "CategoryMapper", "SEOIntegrator"]
