"""Ingestion pipeline tasks: chunking and embedding."""

from knowledge_base.core.document_processing.tasks.chunking_task import ChunkingTask, split
from knowledge_base.core.document_processing.tasks.embedding_task import EmbeddingTask

__all__ = ["ChunkingTask", "EmbeddingTask", "split"]
