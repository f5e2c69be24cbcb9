"""
Version history projection.

Groups a file name's chunk records by document_id and projects one summary
per version, newest first.

Dependencies: knowledge_base.boundary.db.store
System role: Read model over version lineage
"""

from knowledge_base.boundary.db.store import ChunkRecordStore
from knowledge_base.core.exceptions import ValidationError
from knowledge_base.models.chunk_record import ChunkFilter, ChunkRecord, SortOrder
from knowledge_base.models.document import FileHistory, VersionSummary


def summarize_versions(records: list[ChunkRecord]) -> list[VersionSummary]:
    """
    Project chunk records into per-document version summaries.

    Args:
        records: Chunk records of one file name, any order

    Returns:
        list[VersionSummary]: Ordered by version_number desc, then processing_date desc
    """
    groups: dict[str, list[ChunkRecord]] = {}
    for record in records:
        groups.setdefault(record.document_id, []).append(record)

    summaries = []
    for document_id, chunks in groups.items():
        first = min(chunks, key=lambda r: r.chunk_index)
        summaries.append(
            VersionSummary(
                document_id=document_id,
                version_number=first.lineage.version_number,
                file_name=first.source.file_name or "",
                source_title=first.source.title,
                content_hash=first.lineage.content_hash,
                processing_date=first.processing_date,
                is_active=first.lineage.is_active,
                total_chunks=len(chunks),
                blob_url=first.source.blob_url,
                replaced_date=first.lineage.replaced_date,
                replaced_reason=first.lineage.replaced_reason,
                replaced_by_document_id=first.lineage.replaced_by_document_id,
            )
        )

    summaries.sort(key=lambda s: (s.version_number, s.processing_date), reverse=True)
    return summaries


class VersionHistoryTracker:
    """Version history of files within a tenant."""

    def __init__(self, store: ChunkRecordStore) -> None:
        self._store = store

    async def history(
        self,
        tenant_id: str,
        file_name: str,
        include_inactive: bool = False,
    ) -> FileHistory:
        """
        Version history of one file name.

        Args:
            tenant_id: Owning tenant
            file_name: Logical file name
            include_inactive: Include superseded versions

        Returns:
            FileHistory: Versions newest first with total and active counts

        Raises:
            ValidationError: When tenant_id or file_name is blank
        """
        if not tenant_id or not tenant_id.strip():
            raise ValidationError("tenant_id is required", field="tenant_id")
        if not file_name or not file_name.strip():
            raise ValidationError("file_name is required", field="file_name")

        records = await self._store.find(
            ChunkFilter(
                tenant_id=tenant_id,
                file_name=file_name,
                is_active=None if include_inactive else True,
            ),
            sort=[("version_number", SortOrder.DESC), ("processing_date", SortOrder.DESC)],
        )
        versions = summarize_versions(records)
        return FileHistory(
            tenant_id=tenant_id,
            file_name=file_name,
            versions=versions,
            total_versions=len(versions),
            active_versions=sum(1 for v in versions if v.is_active),
        )
