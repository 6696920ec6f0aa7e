"""
Settings endpoints
"""
from fastapi import APIRouter

from taxoai.api.deps import ServicesDep
from taxoai.schemas.usage import ApiKeyValidationRequest, ApiKeyValidationResponse
from taxoai.services.credentials import validate_api_key


router = APIRouter()


@router.post("/api-key/validate", response_model=ApiKeyValidationResponse)
async def validate_key(request: ApiKeyValidationRequest, services: ServicesDep) -> ApiKeyValidationResponse:
    """Check an API key against the usage endpoint"""
    usage = await validate_api_key(request.api_key, services.usage, base_client=services.client)
    return ApiKeyValidationResponse(valid=True, usage=usage)
