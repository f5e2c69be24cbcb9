"""
Domain models and API schemas.

Exports the chunk record entity and the request/response contracts of
ingestion, retrieval and document maintenance.
"""

from knowledge_base.models.chunk_record import (
    BotConfig,
    ChunkFilter,
    ChunkRecord,
    Lineage,
    ProcessingState,
    ProcessingStatus,
    SortOrder,
    SourceInfo,
    SourceType,
)
from knowledge_base.models.ingestion import (
    FileItem,
    IngestionOptions,
    IngestionResult,
    ItemError,
    ItemResult,
    ItemStatus,
)
from knowledge_base.models.search import SearchFilters, SearchHit, SearchMode
from knowledge_base.models.storage import BlobDeletion, BlobInfo

__all__ = [
    "BlobDeletion",
    "BlobInfo",
    "BotConfig",
    "ChunkFilter",
    "ChunkRecord",
    "FileItem",
    "IngestionOptions",
    "IngestionResult",
    "ItemError",
    "ItemResult",
    "ItemStatus",
    "Lineage",
    "ProcessingState",
    "ProcessingStatus",
    "SearchFilters",
    "SearchHit",
    "SearchMode",
    "SortOrder",
    "SourceInfo",
    "SourceType",
]
