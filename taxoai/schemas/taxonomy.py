"""
Taxonomy search schemas
"""
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaxonomySearchResult(BaseModel):
    """Response of GET /v1/taxonomies/search"""
    model_config = ConfigDict(extra="allow")

    categories: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator("categories", mode="before")
    @classmethod
    def coerce_categories(cls, v):
        if not isinstance(v, list):
            return []
        return [item for item in v if isinstance(item, dict)]
