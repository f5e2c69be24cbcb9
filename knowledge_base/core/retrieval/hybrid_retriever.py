"""
Hybrid retrieval engine.

Four search modes over a tenant's active chunk records:

  - VECTOR: cosine similarity over a bounded candidate set
  - LEXICAL: structured filters plus text match, ranked by term coverage then recency
  - KEYWORD: term coverage over substring matches
  - HYBRID: VECTOR and KEYWORD concurrently, merged without duplicates

Dependencies: asyncio, knowledge_base.boundary.db.store, knowledge_base.core.interfaces
System role: Retrieval entry point for search requests
"""

import asyncio
import logging
import math

from knowledge_base.boundary.db.store import ChunkRecordStore
from knowledge_base.core.exceptions import RetrievalError
from knowledge_base.core.interfaces import EmbeddingProvider
from knowledge_base.core.retrieval.similarity import cosine_similarity
from knowledge_base.models.chunk_record import ChunkFilter, ChunkRecord, SortOrder
from knowledge_base.models.search import SearchFilters, SearchHit, SearchMode

logger = logging.getLogger(__name__)


def query_terms(query: str) -> list[str]:
    """Lower-cased, whitespace-split query terms in order, repeats kept."""
    return query.lower().split()


def keyword_score(content: str, terms: list[str]) -> float:
    """
    Fraction of terms found as a substring of some token of the content.

    Args:
        content: Chunk text
        terms: Lower-cased query terms

    Returns:
        float: Score in [0, 1]; 0 when there are no terms
    """
    if not terms:
        return 0.0
    tokens = set(content.lower().split())
    matched = sum(1 for term in terms if any(term in token for token in tokens))
    return matched / len(terms)


def _to_hit(record: ChunkRecord, score: float) -> SearchHit:
    return SearchHit(
        content=record.content,
        document_id=record.document_id,
        chunk_index=record.chunk_index,
        source_title=record.source.title,
        source_uri=record.source.uri,
        source_type=record.source.type,
        score=round(score, 6),
    )


class HybridRetrievalEngine:
    """Multi-mode search over active chunk records."""

    def __init__(
        self,
        store: ChunkRecordStore,
        embedding_provider: EmbeddingProvider,
        candidate_multiplier: int = 5,
    ) -> None:
        """
        Initialize engine.

        Args:
            store: Chunk record store
            embedding_provider: Provider used to embed queries
            candidate_multiplier: Vector candidates scanned per requested result
        """
        self._store = store
        self._embedding_provider = embedding_provider
        self._candidate_multiplier = candidate_multiplier

    @staticmethod
    def _base_filter(tenant_id: str, filters: SearchFilters | None, **extra) -> ChunkFilter:
        filters = filters or SearchFilters()
        return ChunkFilter(
            tenant_id=tenant_id,
            is_active=True,
            source_type=filters.source_type,
            file_type=filters.file_type,
            date_from=filters.date_from,
            date_to=filters.date_to,
            **extra,
        )

    async def search(
        self,
        tenant_id: str,
        query: str,
        limit: int = 10,
        mode: SearchMode = SearchMode.HYBRID,
        filters: SearchFilters | None = None,
    ) -> list[SearchHit]:
        """
        Search a tenant's active chunks.

        Args:
            tenant_id: Tenant to search
            query: Free-text query
            limit: Maximum number of hits
            mode: Search strategy
            filters: Optional structured filters

        Returns:
            list[SearchHit]: Hits ordered by score descending

        Raises:
            RetrievalError: When the request is invalid
            EmbeddingError: When VECTOR mode cannot embed the query
            StoreError: When the store fails outside HYBRID mode
        """
        if not tenant_id or not tenant_id.strip():
            raise RetrievalError("tenant_id is required")
        if not query or not query.strip():
            raise RetrievalError("query must not be blank", tenant_id=tenant_id)
        if limit < 1:
            raise RetrievalError("limit must be positive", tenant_id=tenant_id)

        handlers = {
            SearchMode.VECTOR: self.vector_search,
            SearchMode.LEXICAL: self.lexical_search,
            SearchMode.KEYWORD: self.keyword_search,
            SearchMode.HYBRID: self.hybrid_search,
        }
        hits = await handlers[SearchMode(mode)](tenant_id, query, limit, filters)
        logger.info(
            "Search completed",
            extra={"tenant_id": tenant_id, "mode": SearchMode(mode).value, "limit": limit, "hits": len(hits)},
        )
        return hits

    async def vector_search(
        self,
        tenant_id: str,
        query: str,
        limit: int,
        filters: SearchFilters | None = None,
    ) -> list[SearchHit]:
        """Cosine similarity over the most recent limit * multiplier active chunks."""
        query_embedding = await self._embedding_provider.embed_query(query)
        candidates = await self._store.find(
            self._base_filter(tenant_id, filters),
            sort=[("processing_date", SortOrder.DESC)],
            limit=limit * self._candidate_multiplier,
        )
        scored = [
            (cosine_similarity(query_embedding, record.embedding), record)
            for record in candidates
            if record.embedding
        ]
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [_to_hit(record, score) for score, record in scored[:limit]]

    async def lexical_search(
        self,
        tenant_id: str,
        query: str,
        limit: int,
        filters: SearchFilters | None = None,
    ) -> list[SearchHit]:
        """Filtered text match ranked by term coverage, then recency."""
        terms = query_terms(query)
        records = await self._store.find(
            self._base_filter(tenant_id, filters, text_terms=terms),
            sort=[("processing_date", SortOrder.DESC)],
        )
        scored = [(keyword_score(record.content, terms), record) for record in records]
        # stable sort keeps recency order among equal scores
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [_to_hit(record, score) for score, record in scored[:limit]]

    async def keyword_search(
        self,
        tenant_id: str,
        query: str,
        limit: int,
        filters: SearchFilters | None = None,
    ) -> list[SearchHit]:
        """Case-insensitive substring match scored by term coverage."""
        terms = query_terms(query)
        records = await self._store.find(self._base_filter(tenant_id, filters, text_terms=terms))
        scored = [(keyword_score(record.content, terms), record) for record in records]
        scored = [pair for pair in scored if pair[0] > 0]
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [_to_hit(record, score) for score, record in scored[:limit]]

    async def hybrid_search(
        self,
        tenant_id: str,
        query: str,
        limit: int,
        filters: SearchFilters | None = None,
    ) -> list[SearchHit]:
        """
        Run VECTOR and KEYWORD concurrently and merge.

        Each sub-search is capped at ceil(limit / 2). A failing sub-search
        contributes no hits. Keyword hits already present as vector hits
        under the same (document_id, chunk_index) are dropped.
        """
        half = math.ceil(limit / 2)
        vector_result, keyword_result = await asyncio.gather(
            self.vector_search(tenant_id, query, half, filters),
            self.keyword_search(tenant_id, query, half, filters),
            return_exceptions=True,
        )

        sub_results: list[list[SearchHit]] = []
        for name, outcome in (("vector", vector_result), ("keyword", keyword_result)):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.warning(
                    "Hybrid sub-search failed, continuing without it",
                    extra={
                        "tenant_id": tenant_id,
                        "sub_search": name,
                        "error_type": type(outcome).__name__,
                        "error_msg": str(outcome),
                    },
                )
                sub_results.append([])
            else:
                sub_results.append(outcome)

        vector_hits, keyword_hits = sub_results
        merged = list(vector_hits)
        seen = {(hit.document_id, hit.chunk_index) for hit in merged}
        for hit in keyword_hits:
            key = (hit.document_id, hit.chunk_index)
            if key not in seen:
                seen.add(key)
                merged.append(hit)

        merged.sort(key=lambda hit: hit.score, reverse=True)
        return merged[:limit]
