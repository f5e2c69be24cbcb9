"""Hybrid retrieval engine and similarity scoring."""

from knowledge_base.core.retrieval.hybrid_retriever import (
    HybridRetrievalEngine,
    keyword_score,
    query_terms,
)
from knowledge_base.core.retrieval.similarity import cosine_similarity

__all__ = ["HybridRetrievalEngine", "cosine_similarity", "keyword_score", "query_terms"]
