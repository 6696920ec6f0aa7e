"""
Service layer for business logic
"""

from .api_client import TaxoAIClient
from .batch import BatchOrchestrator
from .credentials import validate_api_key
from .factory import Services, build_services
from .product_analyzer import ProductAnalyzer
from .product_events import ProductEventHandler
from .usage_tracker import UsageTracker

__all__ = [
    "TaxoAIClient",
    "UsageTracker",
    "ProductAnalyzer",
    "BatchOrchestrator",
    "ProductEventHandler",
    "Services",
    "build_services",
    "validate_api_key",
]
