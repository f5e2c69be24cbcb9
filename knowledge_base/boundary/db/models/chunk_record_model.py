"""
Chunk record ORM model.

One row per chunk. Nested source/lineage/status value objects of the
domain model are flattened into columns so that every field in a
ChunkFilter is a plain column predicate.

Dependencies: sqlalchemy, knowledge_base.boundary.db.base, knowledge_base.models
System role: Chunk persistence for ingestion and retrieval
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from knowledge_base.boundary.db.base import Base, TimestampMixin, UUIDMixin
from knowledge_base.models.chunk_record import (
    BotConfig,
    ChunkRecord,
    Lineage,
    ProcessingState,
    ProcessingStatus,
    SourceInfo,
    SourceType,
)


def as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ChunkRecordModel(Base, UUIDMixin, TimestampMixin):
    """
    Chunk record ORM model.

    Attributes:
        tenant_id: Owning tenant; every query is scoped by it
        document_id: Groups all chunks of one ingestion event
        chunk_index: Position within document_id (contiguous from 0)
        content / embedding: Chunk text and its vector (JSON list)
        source_*: Origin of the document (file, url, file_url)
        content_hash / version_number / is_active / replaced_*: Version lineage
        is_processed / processing_status: Processing state
        processing_date: When the chunk set was produced

    Constraints:
        (tenant_id, document_id, chunk_index) unique
        (tenant_id, file_name) indexed for lineage lookups
    """

    __tablename__ = "chunk_records"
    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "document_id", "chunk_index", name="uq_chunk_records_document_chunk"
        ),
        Index("ix_chunk_records_tenant_file_name", "tenant_id", "file_name"),
        Index("ix_chunk_records_tenant_active", "tenant_id", "is_active"),
    )

    tenant_id: Mapped[str] = mapped_column(String(128), nullable=False)
    document_id: Mapped[str] = mapped_column(String(64), nullable=False)
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)
    embedding: Mapped[list[float]] = mapped_column(JSON, nullable=False, default=list)

    # Source
    source_type: Mapped[SourceType] = mapped_column(
        Enum(SourceType, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    source_title: Mapped[str] = mapped_column(String(512), nullable=False)
    source_uri: Mapped[str] = mapped_column(String(2048), nullable=False)
    file_name: Mapped[str | None] = mapped_column(String(512), nullable=True)
    file_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    blob_ref: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    blob_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    # Lineage
    content_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    version_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    replaced_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    replaced_reason: Mapped[str | None] = mapped_column(String(64), nullable=True)
    replaced_by_document_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Processing state
    is_processed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    processing_status: Mapped[ProcessingStatus] = mapped_column(
        Enum(ProcessingStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ProcessingStatus.PENDING,
    )
    processing_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Document-level metadata repeated on every chunk
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    inbox_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    system_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    bot_api_key: Mapped[str | None] = mapped_column(String(256), nullable=True)
    api_key: Mapped[str | None] = mapped_column(String(256), nullable=True)
    extra_metadata: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    custom_metadata: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    @classmethod
    def from_record(cls, record: ChunkRecord) -> "ChunkRecordModel":
        """Flatten a domain record into a new ORM row."""
        return cls(
            tenant_id=record.tenant_id,
            document_id=record.document_id,
            chunk_index=record.chunk_index,
            content=record.content,
            embedding=list(record.embedding),
            source_type=record.source.type,
            source_title=record.source.title,
            source_uri=record.source.uri,
            file_name=record.source.file_name,
            file_type=record.source.file_type,
            blob_ref=record.source.blob_ref,
            blob_url=record.source.blob_url,
            content_hash=record.lineage.content_hash,
            version_number=record.lineage.version_number,
            is_active=record.lineage.is_active,
            replaced_date=record.lineage.replaced_date,
            replaced_reason=record.lineage.replaced_reason,
            replaced_by_document_id=record.lineage.replaced_by_document_id,
            is_processed=record.status.is_processed,
            processing_status=record.status.processing_status,
            processing_date=record.processing_date,
            description=record.description,
            inbox_ids=list(record.bot_config.inbox_ids),
            system_prompt=record.bot_config.system_prompt,
            bot_api_key=record.bot_config.bot_api_key,
            api_key=record.bot_config.api_key,
            extra_metadata=dict(record.extra_metadata),
            custom_metadata=dict(record.custom_metadata),
        )

    def to_record(self) -> ChunkRecord:
        """Rebuild the nested domain record from this row."""
        return ChunkRecord(
            id=self.id,
            tenant_id=self.tenant_id,
            document_id=self.document_id,
            chunk_index=self.chunk_index,
            content=self.content,
            embedding=list(self.embedding or []),
            source=SourceInfo(
                type=self.source_type,
                title=self.source_title,
                uri=self.source_uri,
                file_name=self.file_name,
                file_type=self.file_type,
                blob_ref=self.blob_ref,
                blob_url=self.blob_url,
            ),
            lineage=Lineage(
                content_hash=self.content_hash,
                version_number=self.version_number,
                is_active=self.is_active,
                replaced_date=as_utc(self.replaced_date),
                replaced_reason=self.replaced_reason,
                replaced_by_document_id=self.replaced_by_document_id,
            ),
            status=ProcessingState(
                is_processed=self.is_processed,
                processing_status=self.processing_status,
            ),
            description=self.description,
            bot_config=BotConfig(
                inbox_ids=list(self.inbox_ids or []),
                system_prompt=self.system_prompt,
                bot_api_key=self.bot_api_key,
                api_key=self.api_key,
            ),
            extra_metadata=dict(self.extra_metadata or {}),
            custom_metadata=dict(self.custom_metadata or {}),
            processing_date=as_utc(self.processing_date),
            created_at=as_utc(self.created_at),
            updated_at=as_utc(self.updated_at),
        )
