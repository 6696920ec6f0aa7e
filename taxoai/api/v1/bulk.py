"""
Bulk analysis endpoints
"""
from fastapi import APIRouter, status

from taxoai.api.deps import ServicesDep
from taxoai.schemas.batch import BatchPollResult, BatchSubmitRequest, BatchSubmitResult


router = APIRouter()


@router.post("/jobs", status_code=status.HTTP_202_ACCEPTED, response_model=BatchSubmitResult)
async def submit_job(request: BatchSubmitRequest, services: ServicesDep) -> BatchSubmitResult:
    """Submit the selected products as one batch job"""
    return await services.batch.submit(request.product_ids)


@router.get("/jobs/{job_id}", response_model=BatchPollResult)
async def poll_job(job_id: str, services: ServicesDep) -> BatchPollResult:
    """Job progress; results of a completed job are stored on first poll"""
    return await services.batch.poll(job_id)
