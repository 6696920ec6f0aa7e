"""
Store event webhooks
"""
from typing import Any, Dict

from fastapi import APIRouter, status

from taxoai.api.deps import ServicesDep
from taxoai.schemas.common import ProductSavedEvent


router = APIRouter()


@router.post("/product-saved", status_code=status.HTTP_202_ACCEPTED, response_model=Dict[str, Any])
async def product_saved(event: ProductSavedEvent, services: ServicesDep) -> Dict[str, Any]:
    """Auto-analyze a product after the store saved it"""
    result = await services.events.on_product_saved(event.product_id)
    return {"product_id": event.product_id, "analyzed": result is not None}
