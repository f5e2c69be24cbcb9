"""
Document ingestion pipeline.

Exports:
  - IngestionCoordinator: Per-item orchestration
  - VersionResolver, compute_content_hash: Deduplication and lineage
  - build_chunk_records: Chunk record assembly
"""

from knowledge_base.core.document_processing.ingestion_coordinator import IngestionCoordinator
from knowledge_base.core.document_processing.record_builder import build_chunk_records, new_document_id
from knowledge_base.core.document_processing.versioning import (
    VersionAction,
    VersionDecision,
    VersionResolver,
    compute_content_hash,
)

__all__ = [
    "IngestionCoordinator",
    "VersionAction",
    "VersionDecision",
    "VersionResolver",
    "build_chunk_records",
    "compute_content_hash",
    "new_document_id",
]
