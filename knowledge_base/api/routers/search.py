"""
Search API endpoints.

Routes: POST /search

Dependencies: knowledge_base.application.services.search_service
System role: Retrieval HTTP API
"""

from fastapi import APIRouter, Depends

from knowledge_base.api.deps import get_search_service
from knowledge_base.api.routers.router_utils import handle_service_errors
from knowledge_base.application.services.search_service import SearchService
from knowledge_base.models.search import SearchRequest, SearchResponse

router = APIRouter(prefix="/search", tags=["search"])


@router.post("", response_model=SearchResponse)
@handle_service_errors
async def search(
    request: SearchRequest,
    search_service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    """Search a tenant's active chunks (vector, lexical, keyword or hybrid)."""
    return await search_service.search(request)
