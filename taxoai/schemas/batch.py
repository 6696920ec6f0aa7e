"""
Batch job schemas
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = {JobStatus.COMPLETED.value, JobStatus.FAILED.value}


def _as_int(v: Any) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return 0


class BatchSubmitResponse(BaseModel):
    """Response of POST /v1/products/batch"""

    model_config = ConfigDict(extra="allow")

    job_id: str = ""
    status: str = JobStatus.PENDING.value

    @field_validator("job_id", mode="before")
    @classmethod
    def coerce_job_id(cls, v):
        return "" if v is None else str(v)

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v):
        return str(v) if v else JobStatus.PENDING.value


class BatchJob(BaseModel):
    """Response of GET /v1/jobs/{id}"""

    model_config = ConfigDict(extra="allow")

    job_id: str = ""
    status: str = JobStatus.PENDING.value
    total_products: int = 0
    processed_products: int = 0
    result: List[Any] = Field(default_factory=list)

    @field_validator("job_id", mode="before")
    @classmethod
    def coerce_job_id(cls, v):
        return "" if v is None else str(v)

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v):
        return str(v) if v else JobStatus.PENDING.value

    @field_validator("total_products", "processed_products", mode="before")
    @classmethod
    def coerce_counts(cls, v):
        return _as_int(v)

    @field_validator("result", mode="before")
    @classmethod
    def coerce_result(cls, v):
        return v if isinstance(v, list) else []

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class BatchSubmitRequest(BaseModel):
    product_ids: List[int] = Field(default_factory=list)


class BatchSubmitResult(BaseModel):
    """Outcome of a batch submission"""

    job_id: str
    status: str
    total_products: int
    product_ids: List[int]


class BatchPollResult(BaseModel):
    """Outcome of a job poll"""

    status: str
    total_products: int
    processed_products: int
    applied_products: List[int] = Field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class JobMap(BaseModel):
    """Batch index -> product id, as stored in the cache"""

    job_id: str
    product_ids: List[int]

    def product_for(self, index: int) -> Optional[int]:
        return self.product_ids[index] if 0 <= index < len(self.product_ids) else None
