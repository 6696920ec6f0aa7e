"""
Product analysis endpoints
"""
from fastapi import APIRouter, Query, status

from taxoai.api.deps import ServicesDep, SettingsDep
from taxoai.core.logging import log
from taxoai.schemas.analysis import AnalyzeResponse, StoredAnalysis
from taxoai.schemas.product import CatalogFilter, CatalogPage, ProductCreate, ProductRead


router = APIRouter()


@router.get("", response_model=CatalogPage)
async def list_products(
    services: ServicesDep,
    settings: SettingsDep,
    filter: CatalogFilter = Query(CatalogFilter.ALL, description="all, unanalyzed or low-confidence"),
    page: int = Query(1, ge=1),
    per_page: int = Query(25, ge=1, le=100),
) -> CatalogPage:
    """Published products with their analysis status"""
    return await services.products.list_products(
        filter=filter,
        threshold=settings.confidence_threshold,
        page=page,
        per_page=per_page,
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ProductRead)
async def create_product(product_in: ProductCreate, services: ServicesDep) -> ProductRead:
    """Register a product; it starts out unanalyzed"""
    product = await services.products.create_product(product_in)
    return ProductRead.model_validate(product, from_attributes=True)


@router.post("/{product_id}/analyze", response_model=AnalyzeResponse)
async def analyze_product(product_id: int, services: ServicesDep) -> AnalyzeResponse:
    """Analyze one product now, regardless of its status"""
    result = await services.analyzer.analyze(product_id)
    stored = await services.analyzer.stored_analysis(product_id)

    log.info("Manual analysis finished", product_id=product_id)
    return AnalyzeResponse(
        product_id=product_id,
        applied=services.analyzer.meets_threshold(result),
        result=result.raw(),
        stored=stored,
    )


@router.get("/{product_id}/analysis", response_model=StoredAnalysis)
async def get_product_analysis(product_id: int, services: ServicesDep) -> StoredAnalysis:
    return await services.analyzer.stored_analysis(product_id)
