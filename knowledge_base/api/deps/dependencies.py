"""
Dependency injection container.

Builds the engine, store, adapters and services once per process and hands
them to routes through FastAPI Depends factories.

Dependencies: knowledge_base.configs, knowledge_base.application, knowledge_base.boundary
System role: DI container for service injection
"""

from functools import lru_cache

from fastapi import Depends

from knowledge_base.application.services import DocumentService, SearchService
from knowledge_base.boundary.db.connection import get_async_engine, get_async_session_factory
from knowledge_base.boundary.db.store import ChunkRecordStore
from knowledge_base.configs import Settings, get_settings


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings
        self._engine = None
        self._store = None
        self._blob_store = None
        self._embedding_provider = None
        self._extractor = None
        self._chunking_task = None
        self._document_service = None
        self._search_service = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def engine(self):
        """Get cached async engine."""
        if self._engine is None:
            self._engine = get_async_engine(self.settings.database)
        return self._engine

    @property
    def store(self) -> ChunkRecordStore:
        """Get cached chunk record store."""
        if self._store is None:
            self._store = ChunkRecordStore(get_async_session_factory(self.engine))
        return self._store

    @property
    def blob_store(self):
        """Get cached S3 blob store."""
        if self._blob_store is None:
            from knowledge_base.boundary.storage.s3_blob_store import S3BlobStore

            self._blob_store = S3BlobStore(self.settings.blob_storage)
        return self._blob_store

    @property
    def embedding_provider(self):
        """Get cached embedding provider."""
        if self._embedding_provider is None:
            from knowledge_base.boundary.embeddings.provider import LangChainEmbeddingProvider

            self._embedding_provider = LangChainEmbeddingProvider.from_settings(self.settings.ingestion)
        return self._embedding_provider

    @property
    def extractor(self):
        """Get cached text extractor."""
        if self._extractor is None:
            from knowledge_base.boundary.extraction.text_extractor import DefaultTextExtractor

            self._extractor = DefaultTextExtractor.from_settings(self.settings.ingestion)
        return self._extractor

    @property
    def chunking_task(self):
        """Get cached chunking task."""
        if self._chunking_task is None:
            from knowledge_base.core.document_processing.tasks.chunking_task import ChunkingTask

            ingestion = self.settings.ingestion
            self._chunking_task = ChunkingTask(ingestion.chunk_size, ingestion.chunk_overlap)
        return self._chunking_task

    @property
    def document_service(self) -> DocumentService:
        """Get cached document service."""
        if self._document_service is None:
            from knowledge_base.core.document_processing.ingestion_coordinator import IngestionCoordinator

            ingestion = self.settings.ingestion
            coordinator = IngestionCoordinator(
                store=self.store,
                extractor=self.extractor,
                embedding_provider=self.embedding_provider,
                blob_store=self.blob_store,
                chunking_task=self.chunking_task,
                item_timeout=ingestion.item_timeout_seconds,
                max_files=ingestion.max_files_per_request,
            )
            self._document_service = DocumentService(
                store=self.store,
                coordinator=coordinator,
                blob_store=self.blob_store,
                embedding_provider=self.embedding_provider,
                chunking_task=self.chunking_task,
            )
        return self._document_service

    @property
    def search_service(self) -> SearchService:
        """Get cached search service."""
        if self._search_service is None:
            from knowledge_base.core.retrieval.hybrid_retriever import HybridRetrievalEngine

            retrieval = self.settings.retrieval
            engine = HybridRetrievalEngine(
                store=self.store,
                embedding_provider=self.embedding_provider,
                candidate_multiplier=retrieval.candidate_multiplier,
            )
            self._search_service = SearchService(engine, retrieval)
        return self._search_service

    async def aclose(self) -> None:
        """Dispose the engine and clear all cached instances."""
        if self._engine is not None:
            await self._engine.dispose()
        self.clear()

    def clear(self) -> None:
        """Clear all cached instances."""
        self._engine = None
        self._store = None
        self._blob_store = None
        self._embedding_provider = None
        self._extractor = None
        self._chunking_task = None
        self._document_service = None
        self._search_service = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_store(cache: ServiceCache = Depends(get_service_cache)) -> ChunkRecordStore:
    """
    Get chunk record store.

    Returns:
        ChunkRecordStore: Store bound to the process-wide engine
    """
    return cache.store


def get_document_service(cache: ServiceCache = Depends(get_service_cache)) -> DocumentService:
    """
    Get document service instance.

    Returns:
        DocumentService: Document service wired to the store and adapters
    """
    return cache.document_service


def get_search_service(cache: ServiceCache = Depends(get_service_cache)) -> SearchService:
    """
    Get search service instance.

    Returns:
        SearchService: Search service over the hybrid retrieval engine
    """
    return cache.search_service
