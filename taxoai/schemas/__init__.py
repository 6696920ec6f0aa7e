"""
API Schemas (Pydantic models for request/response)
"""

from .analysis import (
    AnalysisPayload,
    AnalysisResult,
    AnalyzeResponse,
    AttributesData,
    Classification,
    Keyword,
    SEOData,
    StoredAnalysis,
)
from .batch import (
    BatchJob,
    BatchPollResult,
    BatchSubmitRequest,
    BatchSubmitResponse,
    BatchSubmitResult,
    JobMap,
    JobStatus,
)
from .common import HealthCheckResponse, ProductSavedEvent
from .product import AnalysisStatus, CatalogFilter, CatalogPage, CatalogRow, ConfidenceBand, ProductCreate, ProductRead
from .taxonomy import TaxonomySearchResult
from .usage import ApiKeyValidationRequest, ApiKeyValidationResponse, UsageResponse, UsageSnapshot

__all__ = [
    # Analysis
    "AnalysisPayload",
    "AnalysisResult",
    "AnalyzeResponse",
    "AttributesData",
    "Classification",
    "Keyword",
    "SEOData",
    "StoredAnalysis",
    # Batch
    "BatchJob",
    "BatchPollResult",
    "BatchSubmitRequest",
    "BatchSubmitResponse",
    "BatchSubmitResult",
    "JobMap",
    "JobStatus",
    # Product / catalog
    "ProductCreate",
    "ProductRead",
    "CatalogFilter",
    "CatalogPage",
    "CatalogRow",
    "AnalysisStatus",
    "ConfidenceBand",
    # Usage
    "UsageSnapshot",
    "UsageResponse",
    "ApiKeyValidationRequest",
    "ApiKeyValidationResponse",
    # Taxonomy
    "TaxonomySearchResult",
    # Common
    "HealthCheckResponse",
    "ProductSavedEvent",
]
