"""
Analysis request/response schemas

Responses from the classification service are decoded leniently: every
section is optional, the decoded body is kept as-is for raw storage and the
confidence is clamped into [0, 1].
"""

import copy
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator


def _clamp_unit(value: Any) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return max(0.0, min(1.0, value))


class AnalysisPayload(BaseModel):
    """Request body for POST /v1/products/analyze"""

    name: str
    language: str = "es"
    product_id: str
    description: Optional[str] = None
    price: Optional[float] = None
    image_urls: Optional[List[str]] = None
    analyze_images: Optional[bool] = None

    def to_request(self) -> Dict[str, Any]:
        """JSON body with absent optional keys omitted"""
        return self.model_dump(exclude_none=True)


class Classification(BaseModel):
    """Google product taxonomy match"""

    model_config = ConfigDict(extra="allow")

    google_category: str = ""
    google_category_id: int = 0
    confidence: float = 0.0

    @field_validator("google_category", mode="before")
    @classmethod
    def coerce_category(cls, v):
        return "" if v is None else str(v)

    @field_validator("google_category_id", mode="before")
    @classmethod
    def coerce_category_id(cls, v):
        try:
            return int(v)
        except (TypeError, ValueError):
            return 0

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v):
        return _clamp_unit(v)


class Keyword(BaseModel):
    model_config = ConfigDict(extra="allow")

    keyword: str = ""
    volume: Optional[int] = None


class SEOData(BaseModel):
    """SEO suggestions"""

    model_config = ConfigDict(extra="allow")

    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    optimized_title: Optional[str] = None
    optimized_description: Optional[str] = None
    keywords: List[Keyword] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    @field_validator("keywords", mode="before")
    @classmethod
    def coerce_keywords(cls, v):
        if not isinstance(v, list):
            return []
        # Bare strings are accepted as keywords without volume
        return [{"keyword": item} if isinstance(item, str) else item for item in v if isinstance(item, (str, dict))]

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, v):
        if isinstance(v, str):
            return [v]
        if not isinstance(v, list):
            return []
        return [str(item) for item in v if item is not None]

    @property
    def focus_keyword(self) -> str:
        return self.keywords[0].keyword if self.keywords else ""


class AttributesData(BaseModel):
    """Extracted product attributes; each may be a single value or a list"""

    model_config = ConfigDict(extra="allow")

    color: Union[List[str], str, None] = None
    material: Union[List[str], str, None] = None
    gender: Union[List[str], str, None] = None
    style: Union[List[str], str, None] = None

    @field_validator("color", "material", "gender", "style", mode="before")
    @classmethod
    def stringify(cls, v):
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, list):
            return [str(item) for item in v if item is not None]
        return str(v)


class AnalysisResult(BaseModel):
    """Response of POST /v1/products/analyze (and one batch result item)"""

    model_config = ConfigDict(extra="allow")

    classification: Optional[Classification] = None
    seo: Optional[SEOData] = None
    attributes: Optional[AttributesData] = None
    image_analysis: Optional[Dict[str, Any]] = None
    processing_time_ms: Optional[float] = None
    cached: Optional[bool] = None

    _body: Optional[Dict[str, Any]] = PrivateAttr(default=None)

    def keep_body(self, body: Any) -> "AnalysisResult":
        """Remember the decoded response body this result was built from"""
        self._body = copy.deepcopy(body) if isinstance(body, dict) else {}
        return self

    @model_validator(mode="before")
    @classmethod
    def drop_malformed_sections(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        data = dict(data)
        for section in ("classification", "seo", "attributes", "image_analysis"):
            # Empty or non-object sections count as absent
            if section in data and (not data[section] or not isinstance(data[section], dict)):
                data[section] = None
        return data

    @property
    def confidence(self) -> float:
        return self.classification.confidence if self.classification else 0.0

    def raw(self) -> Dict[str, Any]:
        """Response body as received, or a dump when built without one"""
        if self._body is not None:
            return self._body
        return self.model_dump(mode="json", exclude_none=True)


class StoredAnalysis(BaseModel):
    """Analysis fields stored on a product"""

    product_id: int
    analysis_result: Optional[Dict[str, Any]] = None
    analyzed_at: Optional[str] = None
    google_category: Optional[str] = None
    google_category_id: Optional[int] = None
    confidence: Optional[float] = None


class AnalyzeResponse(BaseModel):
    """Result of a manual analysis"""

    product_id: int
    applied: bool
    result: Dict[str, Any]
    stored: StoredAnalysis
