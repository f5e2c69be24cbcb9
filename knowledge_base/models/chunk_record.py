"""
Chunk record domain model.

A chunk record is the only persisted entity: one retrievable piece of text
plus its embedding, scoped to a tenant and grouped by document_id. Source,
lineage and processing state are nested value objects here and flattened to
columns by the ORM layer.

Dependencies: pydantic
System role: Chunk record data structure shared by every core module
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


class SourceType(str, enum.Enum):
    """Where a document's content came from."""

    FILE = "file"
    URL = "url"
    FILE_URL = "file_url"


class ProcessingStatus(str, enum.Enum):
    """
    Document processing lifecycle states.

    PENDING: Created, awaiting processing
    PROCESSING: Being parsed, chunked or embedded
    COMPLETED: Chunks stored and searchable
    FAILED: Processing error
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class SortOrder(str, enum.Enum):
    """Sort direction for store queries."""

    ASC = "asc"
    DESC = "desc"


class SourceInfo(BaseModel):
    """Origin of a document."""

    type: SourceType = Field(description="file, url or file_url")
    title: str = Field(description="Display title")
    uri: str = Field(description="Blob URL, source URL or file name")
    file_name: str | None = Field(default=None, description="Logical file name (lineage key)")
    file_type: str | None = Field(default=None, description="Lower-cased extension, e.g. '.pdf'")
    blob_ref: str | None = Field(default=None, description="Blob store reference for the raw file")
    blob_url: str | None = Field(default=None, description="Blob store URL for the raw file")


class Lineage(BaseModel):
    """Version lineage of a document within (tenant_id, file_name)."""

    content_hash: str | None = Field(default=None, description="SHA-256 of the ingested payload")
    version_number: int = Field(default=1, ge=1)
    is_active: bool = True
    replaced_date: datetime | None = None
    replaced_reason: str | None = None
    replaced_by_document_id: str | None = None


class ProcessingState(BaseModel):
    """Processing flags of a document."""

    is_processed: bool = False
    processing_status: ProcessingStatus = ProcessingStatus.PENDING


class BotConfig(BaseModel):
    """Per-document assistant configuration carried with every chunk."""

    inbox_ids: list[str] = Field(default_factory=list)
    system_prompt: str | None = None
    bot_api_key: str | None = None
    api_key: str | None = None


class ChunkRecord(BaseModel):
    """Single stored chunk."""

    id: uuid.UUID | None = Field(default=None, description="Row identifier, set by the store")
    tenant_id: str
    document_id: str
    chunk_index: int = Field(ge=0)
    content: str
    embedding: list[float] = Field(default_factory=list)
    source: SourceInfo
    lineage: Lineage = Field(default_factory=Lineage)
    status: ProcessingState = Field(default_factory=ProcessingState)
    description: str | None = None
    bot_config: BotConfig = Field(default_factory=BotConfig)
    extra_metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Pipeline facts: total_chunks, content_length, embedding_model, ...",
    )
    custom_metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Caller-supplied metadata, merged on metadata updates",
    )
    processing_date: datetime = Field(default_factory=utc_now)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ChunkFilter(BaseModel):
    """
    Equality and range predicates over chunk records.

    tenant_id is mandatory so that no query can cross tenants. Unset fields
    do not constrain the query.
    """

    tenant_id: str = Field(min_length=1)
    document_id: str | None = None
    document_ids: list[str] | None = None
    file_name: str | None = None
    content_hash: str | None = None
    is_active: bool | None = None
    source_type: SourceType | None = None
    file_type: str | None = None
    chunk_index: int | None = None
    date_from: datetime | None = Field(default=None, description="Inclusive lower bound on processing_date")
    date_to: datetime | None = Field(default=None, description="Inclusive upper bound on processing_date")
    text_terms: list[str] | None = Field(
        default=None,
        description="Case-insensitive substring terms; a record matches if any term occurs",
    )
