"""
Product schemas
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    """Schema for creating a product"""
    name: str
    description: Optional[str] = None
    price: Optional[float] = None
    status: str = "publish"
    image_url: Optional[str] = None
    gallery_urls: List[str] = Field(default_factory=list)


class CatalogFilter(str, Enum):
    ALL = "all"
    UNANALYZED = "unanalyzed"
    LOW_CONFIDENCE = "low-confidence"


class AnalysisStatus(str, Enum):
    PENDING = "pending"
    LOW_CONFIDENCE = "low_confidence"
    ANALYZED = "analyzed"


class ConfidenceBand(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def for_confidence(cls, confidence: float) -> "ConfidenceBand":
        if confidence >= 0.8:
            return cls.HIGH
        if confidence >= 0.5:
            return cls.MEDIUM
        return cls.LOW


class CatalogRow(BaseModel):
    """One product in the analysis catalog"""
    id: int
    name: str
    status: AnalysisStatus
    google_category: Optional[str] = None
    confidence: Optional[float] = None
    confidence_band: Optional[ConfidenceBand] = None
    analyzed_at: Optional[str] = None


class CatalogPage(BaseModel):
    items: List[CatalogRow]
    total: int
    page: int
    per_page: int
    total_pages: int


class ProductRead(ProductCreate):
    """Schema for reading a product"""
    id: int
