"""
Google Generative AI embeddings pinned to one dimension and retrieval task types.

GoogleGenerativeAIEmbeddings does not apply output_dimensionality given at
construction, so every call passes it explicitly. Chunks are embedded as
RETRIEVAL_DOCUMENT and queries as RETRIEVAL_QUERY unless a caller asks
otherwise.

Dependencies: langchain_google_genai
System role: Default embedding model for chunk and query vectors
"""

import logging
from typing import List

from langchain_google_genai import GoogleGenerativeAIEmbeddings

logger = logging.getLogger(__name__)

DOCUMENT_TASK_TYPE = "RETRIEVAL_DOCUMENT"
QUERY_TASK_TYPE = "RETRIEVAL_QUERY"


class FixedDimensionEmbeddings(GoogleGenerativeAIEmbeddings):
    """
    Google embeddings with a fixed vector size.

    Stored chunk vectors and query vectors must share a dimension for cosine
    similarity to be meaningful.
    """

    _output_dimensionality: int = 1024

    def __init__(
        self,
        model: str = "models/gemini-embedding-001",
        output_dimensionality: int = 1024,
        **kwargs,
    ) -> None:
        """
        Args:
            model: Google embedding model ID
            output_dimensionality: Dimension of every returned vector
            **kwargs: Passed to GoogleGenerativeAIEmbeddings
        """
        super().__init__(model=model, **kwargs)
        self._output_dimensionality = output_dimensionality
        logger.info(
            "Embedding model ready",
            extra={"model": model, "output_dimensionality": output_dimensionality},
        )

    @property
    def dimension(self) -> int:
        return self._output_dimensionality

    def embed_documents(
        self,
        texts: List[str],
        *,
        batch_size: int = 100,
        task_type: str | None = None,
        titles: List[str] | None = None,
        output_dimensionality: int | None = None,
    ) -> List[List[float]]:
        """Embed chunk texts as retrieval documents."""
        return super().embed_documents(
            texts,
            batch_size=batch_size,
            task_type=task_type or DOCUMENT_TASK_TYPE,
            titles=titles,
            output_dimensionality=output_dimensionality or self._output_dimensionality,
        )

    def embed_query(
        self,
        text: str,
        task_type: str | None = None,
        title: str | None = None,
        output_dimensionality: int | None = None,
    ) -> List[float]:
        """Embed a search query as a retrieval query."""
        return super().embed_query(
            text,
            task_type=task_type or QUERY_TASK_TYPE,
            title=title,
            output_dimensionality=output_dimensionality or self._output_dimensionality,
        )
