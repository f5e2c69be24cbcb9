"""
Document domain models and schemas.

Request/response schemas for document maintenance operations: updates,
deletion, listing, statistics, version history and upload analysis.

Dependencies: pydantic
System role: Document API contracts
"""

import enum
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from knowledge_base.models.chunk_record import (
    ChunkRecord,
    ProcessingStatus,
    SortOrder,
    SourceType,
)
from knowledge_base.models.storage import BlobDeletion


class DocumentUpdate(BaseModel):
    """Fields accepted by a document update; unset fields are left alone."""

    title: str | None = None
    description: str | None = None
    system_prompt: str | None = None
    bot_api_key: str | None = None
    api_key: str | None = None
    inbox_ids: list[str] | None = None
    is_active: bool | None = None
    metadata: dict[str, Any] | None = None
    content: str | None = Field(
        default=None,
        description="New full text; triggers re-chunking and re-embedding",
    )


class DocumentUpdateRequest(DocumentUpdate):
    """Request schema for PUT /documents/{document_id}."""

    tenant_id: str = Field(min_length=1)


class DocumentUpdateResult(BaseModel):
    """Outcome of a metadata or content update."""

    tenant_id: str
    document_id: str
    content_updated: bool
    chunks_updated: int
    updated_fields: list[str]


class StatusUpdateRequest(BaseModel):
    """Request schema for PATCH /documents/{document_id}/status."""

    tenant_id: str = Field(min_length=1)
    status: ProcessingStatus


class StatusUpdateResult(BaseModel):
    """Outcome of a status update."""

    tenant_id: str
    document_id: str
    status: ProcessingStatus
    modified_count: int


class DeleteResult(BaseModel):
    """Outcome of deleting one document."""

    tenant_id: str
    document_id: str
    chunks_deleted: int
    blobs_deleted: int
    blob_results: list[BlobDeletion] = Field(default_factory=list)


class BulkDeleteRequest(BaseModel):
    """Request schema for POST /documents/bulk-delete."""

    tenant_id: str = Field(min_length=1)
    document_ids: list[str] = Field(min_length=1)
    delete_blobs: bool = True


class BulkDeleteError(BaseModel):
    """Failure entry of a bulk delete."""

    document_id: str
    error: str


class BulkDeleteResult(BaseModel):
    """Aggregate outcome of a bulk delete."""

    tenant_id: str
    total_requested: int
    successful_deletions: int
    failed_deletions: int
    results: list[DeleteResult] = Field(default_factory=list)
    errors: list[BulkDeleteError] = Field(default_factory=list)


class ChunkView(BaseModel):
    """Chunk record projection without the embedding vector."""

    document_id: str
    chunk_index: int
    content: str
    source_type: SourceType
    source_title: str
    source_uri: str
    file_name: str | None
    file_type: str | None
    description: str | None
    version_number: int
    is_active: bool
    processing_status: ProcessingStatus
    processing_date: datetime

    @classmethod
    def from_record(cls, record: ChunkRecord) -> "ChunkView":
        return cls(
            document_id=record.document_id,
            chunk_index=record.chunk_index,
            content=record.content,
            source_type=record.source.type,
            source_title=record.source.title,
            source_uri=record.source.uri,
            file_name=record.source.file_name,
            file_type=record.source.file_type,
            description=record.description,
            version_number=record.lineage.version_number,
            is_active=record.lineage.is_active,
            processing_status=record.status.processing_status,
            processing_date=record.processing_date,
        )


class DocumentListQuery(BaseModel):
    """Filters and paging for listing a tenant's active chunks."""

    source_type: SourceType | None = None
    file_type: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    limit: int = Field(default=50, ge=1, le=500)
    offset: int = Field(default=0, ge=0)
    sort_by: str = "processing_date"
    sort_order: SortOrder = SortOrder.DESC


class DocumentStats(BaseModel):
    """Aggregate statistics over a tenant's active chunks."""

    tenant_id: str
    total_chunks: int = 0
    unique_documents: int = 0
    source_types: list[str] = Field(default_factory=list)
    file_types: list[str] = Field(default_factory=list)
    avg_chunk_size: float = 0.0
    total_content_length: int = 0
    latest_upload: datetime | None = None
    oldest_upload: datetime | None = None


class VersionSummary(BaseModel):
    """One version of a file within its lineage."""

    document_id: str
    version_number: int
    file_name: str
    source_title: str
    content_hash: str | None
    processing_date: datetime
    is_active: bool
    total_chunks: int
    blob_url: str | None = None
    replaced_date: datetime | None = None
    replaced_reason: str | None = None
    replaced_by_document_id: str | None = None


class FileHistory(BaseModel):
    """Version history of one file name within a tenant."""

    tenant_id: str
    file_name: str
    versions: list[VersionSummary] = Field(default_factory=list)
    total_versions: int = 0
    active_versions: int = 0


class ConflictStatus(str, enum.Enum):
    """Outcome of checking an upload against existing lineage."""

    NEW = "new"
    IDENTICAL_CONTENT = "identical_content"
    SAME_NAME_DIFFERENT_CONTENT = "same_name_different_content"


class FileAnalysis(BaseModel):
    """Pre-upload analysis of one file."""

    file_name: str
    file_size: int
    mime_type: str
    content_hash: str
    conflict_status: ConflictStatus
    action_required: str = Field(description="upload, skip or replace_or_version")
    existing_document_id: str | None = None
    existing_version_number: int | None = None
    existing_processing_date: datetime | None = None


class AnalysisSummary(BaseModel):
    """Counts over a file analysis."""

    total_files: int
    new_files: int
    identical_files: int
    conflicting_files: int
    safe_to_upload: bool
    requires_attention: bool


class AnalysisResult(BaseModel):
    """Pre-upload analysis of a batch of files."""

    tenant_id: str
    analysis: list[FileAnalysis]
    summary: AnalysisSummary
