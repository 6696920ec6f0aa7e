"""
Usage / quota schemas
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


FREE_TIER = "free"


class UsageSnapshot(BaseModel):
    """Response of GET /v1/usage"""

    model_config = ConfigDict(extra="allow")

    tier: str = FREE_TIER
    products_used_this_month: int = 0
    products_limit: Optional[int] = None
    percentage_used: float = 0.0

    @field_validator("tier", mode="before")
    @classmethod
    def default_tier(cls, v):
        return str(v) if v else FREE_TIER

    @field_validator("products_used_this_month", mode="before")
    @classmethod
    def coerce_used(cls, v):
        try:
            return int(v)
        except (TypeError, ValueError):
            return 0

    @field_validator("percentage_used", mode="before")
    @classmethod
    def coerce_percentage(cls, v):
        try:
            return float(v)
        except (TypeError, ValueError):
            return 0.0

    @property
    def is_free(self) -> bool:
        return self.tier == FREE_TIER


class UsageResponse(BaseModel):
    """Usage endpoint response"""

    usage: UsageSnapshot
    local_count: int
    local_month: str
    cached: bool


class ApiKeyValidationRequest(BaseModel):
    api_key: str


class ApiKeyValidationResponse(BaseModel):
    valid: bool
    usage: UsageSnapshot
