"""
Embedding generation task.

Embeds every chunk of one item in a single provider call and checks that
the provider returned exactly one vector per chunk.

Dependencies: knowledge_base.core.interfaces
System role: Embedding stage of document ingestion
"""

from knowledge_base.core.exceptions import EmbeddingError
from knowledge_base.core.interfaces import EmbeddingProvider


class EmbeddingTask:
    """Generate and verify embeddings for chunk texts."""

    def __init__(self, provider: EmbeddingProvider) -> None:
        """
        Initialize embedding task.

        Args:
            provider: Embedding provider
        """
        self._provider = provider

    @property
    def model_name(self) -> str:
        return getattr(self._provider, "model_name", "unknown")

    async def embed(self, chunks: list[str]) -> list[list[float]]:
        """
        Generate embeddings for chunks.

        Args:
            chunks: Chunk texts

        Returns:
            list[list[float]]: One vector per chunk, same order

        Raises:
            EmbeddingError: When the provider fails or the count differs
        """
        if not chunks:
            return []

        try:
            embeddings = await self._provider.embed(chunks)
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Failed to generate embeddings: {e}") from e

        if len(embeddings) != len(chunks):
            raise EmbeddingError(
                f"Embedding count mismatch: expected {len(chunks)}, got {len(embeddings)}",
                details={"expected": len(chunks), "received": len(embeddings)},
            )
        return [list(vector) for vector in embeddings]
