"""
Embedding provider over any LangChain Embeddings implementation.

Runs the synchronous embed calls in a worker thread so the configured
model's overrides (such as the fixed output dimension) always apply.

Dependencies: langchain_core
System role: Embedding boundary for ingestion and vector search
"""

import asyncio
import logging

from langchain_core.embeddings import Embeddings

from knowledge_base.configs.ingestion import IngestionSettings
from knowledge_base.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)


class LangChainEmbeddingProvider:
    """EmbeddingProvider backed by a LangChain Embeddings object."""

    def __init__(self, embeddings: Embeddings, model_name: str | None = None) -> None:
        """
        Initialize provider.

        Args:
            embeddings: LangChain embeddings model
            model_name: Model identifier recorded on chunk metadata
        """
        self._embeddings = embeddings
        self.model_name = model_name or getattr(embeddings, "model", type(embeddings).__name__)

    @classmethod
    def from_settings(cls, settings: IngestionSettings) -> "LangChainEmbeddingProvider":
        """Build the default Google embeddings provider from settings."""
        from knowledge_base.boundary.embeddings.embeddings_wrapper import FixedDimensionEmbeddings

        embeddings = FixedDimensionEmbeddings(
            model=settings.embedding_model,
            output_dimensionality=settings.embedding_dimension,
        )
        return cls(embeddings, model_name=settings.embedding_model)

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """
        Embed a batch of texts in one provider call.

        Args:
            texts: Chunk texts

        Returns:
            list[list[float]]: One vector per text

        Raises:
            EmbeddingError: When the provider call fails
        """
        if not texts:
            return []
        try:
            return await asyncio.to_thread(self._embeddings.embed_documents, texts)
        except Exception as e:
            raise EmbeddingError(
                f"Failed to generate embeddings: {e}",
                details={"model": self.model_name, "batch_size": len(texts)},
            ) from e

    async def embed_query(self, text: str) -> list[float]:
        """
        Embed a search query.

        Raises:
            EmbeddingError: When the provider call fails
        """
        try:
            return await asyncio.to_thread(self._embeddings.embed_query, text)
        except Exception as e:
            raise EmbeddingError(
                f"Failed to embed query: {e}",
                details={"model": self.model_name},
            ) from e
