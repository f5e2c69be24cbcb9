"""Embedding boundary."""

from knowledge_base.boundary.embeddings.provider import LangChainEmbeddingProvider

__all__ = ["LangChainEmbeddingProvider"]
