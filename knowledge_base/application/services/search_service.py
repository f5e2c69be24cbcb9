"""
Search service.

Validates search requests against configured bounds and delegates to the
hybrid retrieval engine.

Dependencies: knowledge_base.core.retrieval, knowledge_base.configs
System role: Retrieval orchestration for the API
"""

from knowledge_base.configs.retrieval import RetrievalSettings
from knowledge_base.core.exceptions import ValidationError
from knowledge_base.core.retrieval.hybrid_retriever import HybridRetrievalEngine
from knowledge_base.models.search import SearchRequest, SearchResponse


class SearchService:
    """Search orchestration over the hybrid retrieval engine."""

    def __init__(self, engine: HybridRetrievalEngine, settings: RetrievalSettings | None = None) -> None:
        self._engine = engine
        self._settings = settings or RetrievalSettings()

    async def search(self, request: SearchRequest) -> SearchResponse:
        """
        Execute a search request.

        Args:
            request: Validated search request

        Returns:
            SearchResponse: Ranked hits

        Raises:
            ValidationError: When the query is blank or limit exceeds the configured maximum
        """
        if not request.query.strip():
            raise ValidationError("query must not be blank", field="query")
        if request.limit > self._settings.max_limit:
            raise ValidationError(
                f"limit must be at most {self._settings.max_limit}",
                field="limit",
            )

        hits = await self._engine.search(
            request.tenant_id,
            request.query,
            limit=request.limit,
            mode=request.mode,
            filters=request.filters,
        )
        return SearchResponse(
            tenant_id=request.tenant_id,
            query=request.query,
            mode=request.mode,
            count=len(hits),
            results=hits,
            filters_applied=any(
                value is not None for value in request.filters.model_dump().values()
            ),
        )
