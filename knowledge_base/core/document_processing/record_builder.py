"""
Chunk record construction.

Turns one document's chunks and embeddings into ChunkRecords with
contiguous chunk indexes and shared source, lineage and bot configuration.

Dependencies: knowledge_base.models
System role: Record assembly for ingestion and content regeneration
"""

import uuid
from datetime import datetime
from typing import Any

from knowledge_base.models.chunk_record import (
    BotConfig,
    ChunkRecord,
    Lineage,
    ProcessingState,
    ProcessingStatus,
    SourceInfo,
    utc_now,
)


def new_document_id() -> str:
    """Generate a fresh document id."""
    return str(uuid.uuid4())


def build_chunk_records(
    *,
    tenant_id: str,
    document_id: str,
    chunks: list[str],
    embeddings: list[list[float]],
    source: SourceInfo,
    lineage: Lineage,
    description: str | None = None,
    bot_config: BotConfig | None = None,
    extra_metadata: dict[str, Any] | None = None,
    custom_metadata: dict[str, Any] | None = None,
    processing_date: datetime | None = None,
) -> list[ChunkRecord]:
    """
    Build one ChunkRecord per chunk.

    Args:
        tenant_id: Owning tenant
        document_id: Shared id of every chunk in this document
        chunks: Chunk texts in document order
        embeddings: One vector per chunk
        source: Source info copied into every record
        lineage: Lineage copied into every record
        description: Document description
        bot_config: Bot configuration copied into every record
        extra_metadata: Document-level pipeline facts
        custom_metadata: Caller-supplied metadata
        processing_date: Shared processing timestamp (now if None)

    Returns:
        list[ChunkRecord]: Records with chunk_index 0..N-1

    Raises:
        ValueError: When chunk and embedding counts differ
    """
    if len(chunks) != len(embeddings):
        raise ValueError(f"{len(chunks)} chunks but {len(embeddings)} embeddings")

    processed_at = processing_date or utc_now()
    total = len(chunks)
    base_metadata = dict(extra_metadata or {})

    return [
        ChunkRecord(
            tenant_id=tenant_id,
            document_id=document_id,
            chunk_index=index,
            content=chunk,
            embedding=embedding,
            source=source.model_copy(),
            lineage=lineage.model_copy(),
            status=ProcessingState(is_processed=True, processing_status=ProcessingStatus.COMPLETED),
            description=description,
            bot_config=(bot_config or BotConfig()).model_copy(deep=True),
            extra_metadata={
                **base_metadata,
                "total_chunks": total,
                "chunk_position": index + 1,
                "content_length": len(chunk),
            },
            custom_metadata=dict(custom_metadata or {}),
            processing_date=processed_at,
        )
        for index, (chunk, embedding) in enumerate(zip(chunks, embeddings))
    ]
