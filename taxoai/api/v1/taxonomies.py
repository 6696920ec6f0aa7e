"""
Google taxonomy search endpoint
"""
from fastapi import APIRouter, Query

from taxoai.api.deps import ApiClientDep
from taxoai.schemas.taxonomy import TaxonomySearchResult
from taxoai.utils.text import sanitize_text_field


router = APIRouter()


@router.get("/search", response_model=TaxonomySearchResult)
async def search_taxonomies(
    client: ApiClientDep,
    query: str = Query("", description="Category search text"),
    limit: int = Query(10, ge=1, le=50, description="Maximum number of categories"),
) -> TaxonomySearchResult:
    """Search Google product categories; an empty query returns no categories"""
    query = sanitize_text_field(query)
    if not query:
        return TaxonomySearchResult(categories=[])

    return await client.search_taxonomies(query, limit)
