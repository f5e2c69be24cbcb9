"""
Deduplication and version resolution.

Decides, per (tenant_id, file_name), whether an uploaded file is new, an
identical re-upload to skip, or a content change that replaces the active
version. Also marks superseded versions inactive and powers the read-only
pre-upload analysis.

The lookup-then-act sequence is not serialized: two concurrent ingestions of
the same file name can both pass the lookup and leave two active versions.

Dependencies: hashlib, knowledge_base.boundary.db.store
System role: Lineage state machine for file ingestion
"""

import enum
import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime

from knowledge_base.boundary.db.store import ChunkRecordStore
from knowledge_base.models.chunk_record import ChunkFilter, ChunkRecord, SortOrder, utc_now
from knowledge_base.models.document import (
    AnalysisResult,
    AnalysisSummary,
    ConflictStatus,
    FileAnalysis,
)
from knowledge_base.models.ingestion import FileItem

logger = logging.getLogger(__name__)

REPLACED_REASON_CONTENT_CHANGED = "content_changed"


def compute_content_hash(data: bytes | str) -> str:
    """SHA-256 hex digest of raw bytes (str is UTF-8 encoded first)."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


class VersionAction(str, enum.Enum):
    """What to do with an uploaded file."""

    NEW = "new"
    REPLACE = "replace"
    SKIP = "skip"


@dataclass(frozen=True)
class VersionDecision:
    """Resolver outcome for one file."""

    action: VersionAction
    content_hash: str
    version_number: int
    existing: ChunkRecord | None = None

    @property
    def previous_document_id(self) -> str | None:
        return self.existing.document_id if self.existing else None


class VersionResolver:
    """Resolves uploads against the active lineage of their file name."""

    def __init__(self, store: ChunkRecordStore) -> None:
        self._store = store

    async def find_active_by_name(self, tenant_id: str, file_name: str) -> ChunkRecord | None:
        """Most recent active chunk for a file name."""
        return await self._store.find_one(
            ChunkFilter(tenant_id=tenant_id, file_name=file_name, is_active=True),
            sort=[("processing_date", SortOrder.DESC)],
        )

    async def find_active_by_hash(
        self, tenant_id: str, file_name: str, content_hash: str
    ) -> ChunkRecord | None:
        """Active chunk for a file name carrying the given content hash."""
        return await self._store.find_one(
            ChunkFilter(
                tenant_id=tenant_id,
                file_name=file_name,
                content_hash=content_hash,
                is_active=True,
            ),
            sort=[("processing_date", SortOrder.DESC)],
        )

    async def next_version_number(self, tenant_id: str, file_name: str) -> int:
        """One past the highest version recorded for a file name, active or not."""
        latest = await self._store.find_one(
            ChunkFilter(tenant_id=tenant_id, file_name=file_name),
            sort=[("version_number", SortOrder.DESC), ("processing_date", SortOrder.DESC)],
        )
        return latest.lineage.version_number + 1 if latest else 1

    async def resolve(self, tenant_id: str, file_name: str, content_hash: str) -> VersionDecision:
        """
        Classify an upload.

        Args:
            tenant_id: Owning tenant
            file_name: Logical file name (lineage key)
            content_hash: SHA-256 of the uploaded bytes

        Returns:
            VersionDecision: SKIP with the identical active version, REPLACE
            with the active version to supersede, or NEW
        """
        identical = await self.find_active_by_hash(tenant_id, file_name, content_hash)
        if identical is not None:
            logger.info(
                "Identical content already active",
                extra={"tenant_id": tenant_id, "file_name": file_name, "document_id": identical.document_id},
            )
            return VersionDecision(
                action=VersionAction.SKIP,
                content_hash=content_hash,
                version_number=identical.lineage.version_number,
                existing=identical,
            )

        active = await self.find_active_by_name(tenant_id, file_name)
        version_number = await self.next_version_number(tenant_id, file_name)
        if active is not None:
            logger.info(
                "Content changed, replacing active version",
                extra={
                    "tenant_id": tenant_id,
                    "file_name": file_name,
                    "previous_document_id": active.document_id,
                    "version_number": version_number,
                },
            )
            return VersionDecision(
                action=VersionAction.REPLACE,
                content_hash=content_hash,
                version_number=version_number,
                existing=active,
            )

        return VersionDecision(
            action=VersionAction.NEW,
            content_hash=content_hash,
            version_number=version_number,
        )

    async def supersede(
        self,
        tenant_id: str,
        previous_document_id: str,
        new_document_id: str,
        replaced_at: datetime | None = None,
    ) -> int:
        """
        Deactivate every chunk of a replaced version.

        Returns:
            Number of chunks deactivated
        """
        modified = await self._store.update_many(
            ChunkFilter(tenant_id=tenant_id, document_id=previous_document_id, is_active=True),
            {
                "is_active": False,
                "replaced_reason": REPLACED_REASON_CONTENT_CHANGED,
                "replaced_by_document_id": new_document_id,
                "replaced_date": replaced_at or utc_now(),
            },
        )
        logger.info(
            "Previous version deactivated",
            extra={
                "tenant_id": tenant_id,
                "document_id": previous_document_id,
                "replaced_by": new_document_id,
                "chunks": modified,
            },
        )
        return modified

    async def analyze(self, tenant_id: str, files: list[FileItem]) -> AnalysisResult:
        """
        Classify files against existing lineage without writing anything.

        Args:
            tenant_id: Owning tenant
            files: Candidate uploads

        Returns:
            AnalysisResult: Per-file conflict status and a batch summary
        """
        analysis: list[FileAnalysis] = []
        for item in files:
            content_hash = compute_content_hash(item.data)
            identical = await self.find_active_by_hash(tenant_id, item.file_name, content_hash)
            existing = identical or await self.find_active_by_name(tenant_id, item.file_name)

            if identical is not None:
                status, action = ConflictStatus.IDENTICAL_CONTENT, "skip"
            elif existing is not None:
                status, action = ConflictStatus.SAME_NAME_DIFFERENT_CONTENT, "replace_or_version"
            else:
                status, action = ConflictStatus.NEW, "upload"

            analysis.append(
                FileAnalysis(
                    file_name=item.file_name,
                    file_size=len(item.data),
                    mime_type=item.mime_type,
                    content_hash=content_hash,
                    conflict_status=status,
                    action_required=action,
                    existing_document_id=existing.document_id if existing else None,
                    existing_version_number=existing.lineage.version_number if existing else None,
                    existing_processing_date=existing.processing_date if existing else None,
                )
            )

        new_files = sum(1 for a in analysis if a.conflict_status == ConflictStatus.NEW)
        identical_files = sum(1 for a in analysis if a.conflict_status == ConflictStatus.IDENTICAL_CONTENT)
        conflicting = sum(
            1 for a in analysis if a.conflict_status == ConflictStatus.SAME_NAME_DIFFERENT_CONTENT
        )
        return AnalysisResult(
            tenant_id=tenant_id,
            analysis=analysis,
            summary=AnalysisSummary(
                total_files=len(analysis),
                new_files=new_files,
                identical_files=identical_files,
                conflicting_files=conflicting,
                safe_to_upload=conflicting == 0,
                requires_attention=conflicting > 0,
            ),
        )
