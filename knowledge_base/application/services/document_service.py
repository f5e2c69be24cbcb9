"""
Document service orchestrator.

Coordinates ingestion, pre-upload analysis, content and metadata updates,
status changes, deletion, listing, statistics and version history for a
tenant's documents.

Dependencies: knowledge_base.core, knowledge_base.boundary.db.store
System role: Document management orchestration
"""

import logging

from knowledge_base.boundary.db.CRUD.chunk_record_crud import SORTABLE_FIELDS
from knowledge_base.boundary.db.store import ChunkRecordStore
from knowledge_base.core.document_processing.ingestion_coordinator import IngestionCoordinator
from knowledge_base.core.document_processing.record_builder import build_chunk_records
from knowledge_base.core.document_processing.tasks.chunking_task import ChunkingTask
from knowledge_base.core.document_processing.tasks.embedding_task import EmbeddingTask
from knowledge_base.core.document_processing.versioning import compute_content_hash
from knowledge_base.core.exceptions import (
    BlobStorageError,
    DocumentNotFoundError,
    KnowledgeBaseError,
    ValidationError,
)
from knowledge_base.core.interfaces import BlobStore, EmbeddingProvider
from knowledge_base.core.version_history import VersionHistoryTracker
from knowledge_base.models.chunk_record import (
    ChunkFilter,
    ChunkRecord,
    ProcessingStatus,
    SortOrder,
    utc_now,
)
from knowledge_base.models.common import PaginatedResponse
from knowledge_base.models.document import (
    AnalysisResult,
    BulkDeleteError,
    BulkDeleteResult,
    ChunkView,
    DeleteResult,
    DocumentListQuery,
    DocumentStats,
    DocumentUpdate,
    DocumentUpdateResult,
    FileHistory,
    StatusUpdateResult,
)
from knowledge_base.models.ingestion import FileItem, IngestionOptions, IngestionResult
from knowledge_base.models.storage import BlobDeletion

logger = logging.getLogger(__name__)

# DocumentUpdate field -> chunk record column
_METADATA_COLUMNS = {
    "title": "source_title",
    "description": "description",
    "system_prompt": "system_prompt",
    "bot_api_key": "bot_api_key",
    "api_key": "api_key",
    "inbox_ids": "inbox_ids",
    "is_active": "is_active",
}


def _require_tenant(tenant_id: str) -> None:
    if not tenant_id or not tenant_id.strip():
        raise ValidationError("tenant_id is required", field="tenant_id")


class DocumentService:
    """
    Document service orchestrator.

    Ingestion is delegated to IngestionCoordinator, history to
    VersionHistoryTracker; maintenance operations run directly against the
    chunk record store.
    """

    def __init__(
        self,
        store: ChunkRecordStore,
        coordinator: IngestionCoordinator,
        blob_store: BlobStore,
        embedding_provider: EmbeddingProvider,
        chunking_task: ChunkingTask | None = None,
        history_tracker: VersionHistoryTracker | None = None,
    ) -> None:
        """
        Initialize document service.

        Args:
            store: Chunk record store
            coordinator: Ingestion coordinator
            blob_store: Raw file storage, used when deleting documents
            embedding_provider: Provider used when regenerating content
            chunking_task: Splitter used when regenerating content
            history_tracker: Version history tracker (built over store if None)
        """
        self._store = store
        self._coordinator = coordinator
        self._blob_store = blob_store
        self._embedder = EmbeddingTask(embedding_provider)
        self._chunker = chunking_task or ChunkingTask()
        self._history = history_tracker or VersionHistoryTracker(store)

    async def ingest(
        self,
        tenant_id: str,
        files: list[FileItem] | None = None,
        urls: list[str] | None = None,
        file_url: str | None = None,
        options: IngestionOptions | None = None,
    ) -> IngestionResult:
        """Ingest files, URLs and an optional remote file for a tenant."""
        return await self._coordinator.ingest(
            tenant_id,
            files=files,
            urls=urls,
            file_url=file_url,
            options=options,
        )

    async def analyze_files(self, tenant_id: str, files: list[FileItem]) -> AnalysisResult:
        """
        Check files against existing lineage without writing anything.

        Raises:
            ValidationError: When tenant_id is blank or no files are given
        """
        _require_tenant(tenant_id)
        if not files:
            raise ValidationError("At least one file is required", field="files")
        return await self._coordinator.resolver.analyze(tenant_id, files)

    async def _first_chunk(self, tenant_id: str, document_id: str, active_only: bool) -> ChunkRecord:
        first = await self._store.find_one(
            ChunkFilter(
                tenant_id=tenant_id,
                document_id=document_id,
                is_active=True if active_only else None,
            ),
            sort=[("chunk_index", SortOrder.ASC)],
        )
        if first is None:
            raise DocumentNotFoundError(tenant_id, document_id)
        return first

    async def update_document(
        self,
        tenant_id: str,
        document_id: str,
        update: DocumentUpdate,
    ) -> DocumentUpdateResult:
        """
        Apply an update; new content triggers regeneration, otherwise a field patch.

        Raises:
            ValidationError: When nothing would change
            DocumentNotFoundError: When the document does not exist
        """
        _require_tenant(tenant_id)
        if update.content is not None:
            return await self.update_content(tenant_id, document_id, update.content, update)
        return await self.update_metadata(tenant_id, document_id, update)

    async def update_content(
        self,
        tenant_id: str,
        document_id: str,
        content: str,
        fields: DocumentUpdate | None = None,
    ) -> DocumentUpdateResult:
        """
        Replace a document's content under the same document_id.

        Splits and embeds the new content first, then deletes every existing
        chunk and inserts the new set. Between the two writes the document
        has no chunks. Fields not given are inherited from the prior first
        chunk. Content whose hash matches the stored content_hash is not
        regenerated; other given fields are still patched.

        Args:
            tenant_id: Owning tenant
            document_id: Document to regenerate
            content: New full text
            fields: Optional metadata overrides

        Returns:
            DocumentUpdateResult: Number of chunks written

        Raises:
            ValidationError: When content is blank
            DocumentNotFoundError: When no active first chunk exists
            EmbeddingError: When embedding fails (nothing is deleted)
        """
        _require_tenant(tenant_id)
        if not content or not content.strip():
            raise ValidationError("content must not be empty", field="content")
        fields = fields or DocumentUpdate()

        prior = await self._store.find_one(
            ChunkFilter(tenant_id=tenant_id, document_id=document_id, is_active=True, chunk_index=0)
        )
        if prior is None:
            raise DocumentNotFoundError(tenant_id, document_id)

        content_hash = compute_content_hash(content)
        if prior.lineage.content_hash == content_hash:
            if fields.model_dump(exclude_none=True, exclude={"content"}):
                return await self.update_metadata(tenant_id, document_id, fields)
            logger.info(
                "Document content unchanged",
                extra={"tenant_id": tenant_id, "document_id": document_id},
            )
            return DocumentUpdateResult(
                tenant_id=tenant_id,
                document_id=document_id,
                content_updated=False,
                chunks_updated=0,
                updated_fields=[],
            )

        chunks = self._chunker.split(content)
        embeddings = await self._embedder.embed(chunks)

        source = prior.source.model_copy()
        if fields.title is not None:
            source.title = fields.title
        lineage = prior.lineage.model_copy(update={"content_hash": content_hash})
        if fields.is_active is not None:
            lineage.is_active = fields.is_active
        bot_config = prior.bot_config.model_copy(
            update={
                key: value
                for key, value in {
                    "inbox_ids": fields.inbox_ids,
                    "system_prompt": fields.system_prompt,
                    "bot_api_key": fields.bot_api_key,
                    "api_key": fields.api_key,
                }.items()
                if value is not None
            }
        )
        extra_metadata = {
            key: value
            for key, value in prior.extra_metadata.items()
            if key not in ("total_chunks", "chunk_position", "content_length")
        }
        extra_metadata.update(
            {
                "original_text_length": len(content),
                "chunk_size": self._chunker.chunk_size,
                "chunk_overlap": self._chunker.chunk_overlap,
                "embedding_model": self._embedder.model_name,
                "content_updated_at": utc_now().isoformat(),
            }
        )

        records = build_chunk_records(
            tenant_id=tenant_id,
            document_id=document_id,
            chunks=chunks,
            embeddings=embeddings,
            source=source,
            lineage=lineage,
            description=fields.description if fields.description is not None else prior.description,
            bot_config=bot_config,
            extra_metadata=extra_metadata,
            custom_metadata={**prior.custom_metadata, **(fields.metadata or {})},
        )

        deleted = await self._store.delete_many(ChunkFilter(tenant_id=tenant_id, document_id=document_id))
        await self._store.insert_many(records)

        logger.info(
            "Document content regenerated",
            extra={
                "tenant_id": tenant_id,
                "document_id": document_id,
                "chunks_deleted": deleted,
                "chunks_created": len(records),
            },
        )
        return DocumentUpdateResult(
            tenant_id=tenant_id,
            document_id=document_id,
            content_updated=True,
            chunks_updated=len(records),
            updated_fields=["content", *sorted(fields.model_dump(exclude_none=True, exclude={"content"}))],
        )

    async def update_metadata(
        self,
        tenant_id: str,
        document_id: str,
        fields: DocumentUpdate,
    ) -> DocumentUpdateResult:
        """
        Patch metadata on every chunk of a document without re-embedding.

        User metadata is merged into the existing custom metadata.

        Raises:
            ValidationError: When no field is given
            DocumentNotFoundError: When the document does not exist
        """
        _require_tenant(tenant_id)
        given = fields.model_dump(exclude_none=True, exclude={"content"})
        if not given:
            raise ValidationError("No fields to update", field="update")

        values = {_METADATA_COLUMNS[key]: value for key, value in given.items() if key in _METADATA_COLUMNS}
        first = await self._first_chunk(tenant_id, document_id, active_only=False)
        if fields.metadata is not None:
            values["custom_metadata"] = {**first.custom_metadata, **fields.metadata}

        modified = await self._store.update_many(
            ChunkFilter(tenant_id=tenant_id, document_id=document_id),
            values,
        )
        if modified == 0:
            raise DocumentNotFoundError(tenant_id, document_id)

        logger.info(
            "Document metadata updated",
            extra={"tenant_id": tenant_id, "document_id": document_id, "fields": sorted(given), "chunks": modified},
        )
        return DocumentUpdateResult(
            tenant_id=tenant_id,
            document_id=document_id,
            content_updated=False,
            chunks_updated=modified,
            updated_fields=sorted(given),
        )

    async def update_status(
        self,
        tenant_id: str,
        document_id: str,
        status: ProcessingStatus,
    ) -> StatusUpdateResult:
        """
        Set processing_status on every chunk of a document.

        Raises:
            DocumentNotFoundError: When the document does not exist
        """
        _require_tenant(tenant_id)
        modified = await self._store.update_many(
            ChunkFilter(tenant_id=tenant_id, document_id=document_id),
            {
                "processing_status": ProcessingStatus(status),
                "is_processed": ProcessingStatus(status) == ProcessingStatus.COMPLETED,
            },
        )
        if modified == 0:
            raise DocumentNotFoundError(tenant_id, document_id)
        return StatusUpdateResult(
            tenant_id=tenant_id,
            document_id=document_id,
            status=status,
            modified_count=modified,
        )

    async def delete_document(
        self,
        tenant_id: str,
        document_id: str,
        delete_blobs: bool = True,
    ) -> DeleteResult:
        """
        Delete every chunk of a document, then its blobs.

        Blob deletions are independent; a failed one is recorded and does not
        fail the delete.

        Raises:
            DocumentNotFoundError: When the document has no chunks
        """
        _require_tenant(tenant_id)
        document_filter = ChunkFilter(tenant_id=tenant_id, document_id=document_id)
        records = await self._store.find(document_filter)
        if not records:
            raise DocumentNotFoundError(tenant_id, document_id)

        blob_refs = sorted({r.source.blob_ref for r in records if r.source.blob_ref})
        deleted = await self._store.delete_many(document_filter)

        blob_results: list[BlobDeletion] = []
        if delete_blobs:
            for blob_ref in blob_refs:
                try:
                    await self._blob_store.delete(blob_ref)
                    blob_results.append(BlobDeletion(blob_ref=blob_ref, status="deleted"))
                except BlobStorageError as e:
                    logger.warning(
                        "Blob left orphaned after document delete",
                        extra={"tenant_id": tenant_id, "document_id": document_id, "blob_ref": blob_ref, "error_msg": e.message},
                    )
                    blob_results.append(BlobDeletion(blob_ref=blob_ref, status="failed", error=e.message))

        logger.info(
            "Document deleted",
            extra={"tenant_id": tenant_id, "document_id": document_id, "chunks_deleted": deleted},
        )
        return DeleteResult(
            tenant_id=tenant_id,
            document_id=document_id,
            chunks_deleted=deleted,
            blobs_deleted=sum(1 for b in blob_results if b.status == "deleted"),
            blob_results=blob_results,
        )

    async def bulk_delete(
        self,
        tenant_id: str,
        document_ids: list[str],
        delete_blobs: bool = True,
    ) -> BulkDeleteResult:
        """
        Delete several documents independently.

        Raises:
            ValidationError: When no document ids are given
        """
        _require_tenant(tenant_id)
        unique_ids = list(dict.fromkeys(d for d in document_ids if d))
        if not unique_ids:
            raise ValidationError("At least one document_id is required", field="document_ids")

        results: list[DeleteResult] = []
        errors: list[BulkDeleteError] = []
        for document_id in unique_ids:
            try:
                results.append(await self.delete_document(tenant_id, document_id, delete_blobs))
            except KnowledgeBaseError as e:
                errors.append(BulkDeleteError(document_id=document_id, error=e.message))

        return BulkDeleteResult(
            tenant_id=tenant_id,
            total_requested=len(unique_ids),
            successful_deletions=len(results),
            failed_deletions=len(errors),
            results=results,
            errors=errors,
        )

    async def list_documents(
        self,
        tenant_id: str,
        query: DocumentListQuery | None = None,
    ) -> PaginatedResponse[ChunkView]:
        """
        Page through a tenant's active chunks.

        Raises:
            ValidationError: When sort_by is not a sortable field
        """
        _require_tenant(tenant_id)
        query = query or DocumentListQuery()
        if query.sort_by not in SORTABLE_FIELDS:
            raise ValidationError(
                f"Cannot sort by {query.sort_by}",
                field="sort_by",
                details={"allowed": sorted(SORTABLE_FIELDS)},
            )

        chunk_filter = ChunkFilter(
            tenant_id=tenant_id,
            is_active=True,
            source_type=query.source_type,
            file_type=query.file_type,
            date_from=query.date_from,
            date_to=query.date_to,
        )
        total = await self._store.count(chunk_filter)
        records = await self._store.find(
            chunk_filter,
            sort=[(query.sort_by, query.sort_order)],
            limit=query.limit,
            offset=query.offset,
        )
        return PaginatedResponse[ChunkView](
            items=[ChunkView.from_record(r) for r in records],
            total=total,
            limit=query.limit,
            offset=query.offset,
            has_more=query.offset + len(records) < total,
        )

    async def get_stats(self, tenant_id: str) -> DocumentStats:
        """Aggregate statistics over a tenant's active chunks."""
        _require_tenant(tenant_id)
        stats = await self._store.stats(ChunkFilter(tenant_id=tenant_id, is_active=True))
        return DocumentStats(tenant_id=tenant_id, **stats)

    async def get_file_history(
        self,
        tenant_id: str,
        file_name: str,
        include_inactive: bool = False,
    ) -> FileHistory:
        """Version history of one file name."""
        return await self._history.history(tenant_id, file_name, include_inactive)
