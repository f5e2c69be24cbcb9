"""
Shared test fixtures and configuration for entire test suite.

Provides: SQLite-backed chunk record store, in-memory collaborator fakes
(embedding provider, blob store, text extractor), record factories
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import string
from datetime import datetime, timedelta, timezone

import pytest

from knowledge_base.core.exceptions import ExtractionError, NoContentError
from knowledge_base.models.chunk_record import (
    ChunkRecord,
    Lineage,
    ProcessingState,
    ProcessingStatus,
    SourceInfo,
    SourceType,
)
from knowledge_base.models.storage import BlobInfo


def letter_vector(text: str) -> list[float]:
    """Deterministic 26-dimensional letter-frequency embedding."""
    lowered = text.lower()
    return [float(lowered.count(ch)) for ch in string.ascii_lowercase]


class FakeEmbeddingProvider:
    """Embedding provider returning letter-frequency vectors."""

    model_name = "fake-embedding"

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.query_calls: list[str] = []

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [letter_vector(t) for t in texts]

    async def embed_query(self, text: str) -> list[float]:
        self.query_calls.append(text)
        return letter_vector(text)


class FakeBlobStore:
    """In-memory blob store."""

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.uploads: list[str] = []
        self.deleted: list[str] = []
        self._counter = 0

    async def upload(self, data: bytes, name: str, mime_type: str) -> BlobInfo:
        self._counter += 1
        blob_ref = f"uploads/{self._counter}-{name}"
        self.blobs[blob_ref] = data
        self.uploads.append(blob_ref)
        return BlobInfo(
            url=f"https://blobs.test/{blob_ref}",
            blob_ref=blob_ref,
            original_name=name,
            size=len(data),
            mime_type=mime_type,
        )

    async def delete(self, blob_ref: str) -> bool:
        self.deleted.append(blob_ref)
        self.blobs.pop(blob_ref, None)
        return True


class FakeTextExtractor:
    """Extractor that decodes bytes as UTF-8 and serves URLs from a dict."""

    def __init__(self, pages: dict[str, str] | None = None, remote_files: dict | None = None) -> None:
        self.pages = pages or {}
        self.remote_files = remote_files or {}

    async def extract_file(self, data: bytes, file_name: str, mime_type: str | None = None) -> str:
        text = data.decode("utf-8")
        if not text.strip():
            raise NoContentError("No text content could be extracted", source=file_name)
        return text

    async def extract_url(self, url: str) -> str:
        if url not in self.pages:
            raise ExtractionError("Fetch failed with status 404", source=url)
        text = self.pages[url]
        if not text.strip():
            raise NoContentError("No text content could be extracted", source=url)
        return text

    async def download_file(self, url: str) -> tuple[bytes, str, str]:
        if url not in self.remote_files:
            raise ExtractionError("Fetch failed with status 404", source=url)
        return self.remote_files[url]


@pytest.fixture
async def db_engine(tmp_path):
    """
    File-backed SQLite async engine with the schema created.

    A file database lets concurrent sessions (hybrid sub-searches) share data.
    """
    from sqlalchemy.ext.asyncio import create_async_engine

    from knowledge_base.boundary.db.base import Base

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'knowledge_base.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def store(db_engine):
    """ChunkRecordStore over the test engine."""
    from knowledge_base.boundary.db.connection import get_async_session_factory
    from knowledge_base.boundary.db.store import ChunkRecordStore

    return ChunkRecordStore(get_async_session_factory(db_engine))


@pytest.fixture
def embedding_provider() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider()


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def extractor() -> FakeTextExtractor:
    return FakeTextExtractor()


@pytest.fixture
def make_record():
    """
    Factory for ChunkRecords with sensible defaults.

    Usage:
        record = make_record(content="hello", embedding=[1.0, 0.0])
    """
    base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _make(
        *,
        tenant_id: str = "42",
        document_id: str = "doc-1",
        chunk_index: int = 0,
        content: str = "sample chunk content",
        embedding: list[float] | None = None,
        source_type: SourceType = SourceType.FILE,
        title: str = "Sample",
        file_name: str | None = "sample.txt",
        file_type: str | None = ".txt",
        blob_ref: str | None = None,
        content_hash: str | None = "hash-1",
        version_number: int = 1,
        is_active: bool = True,
        minutes: int = 0,
    ) -> ChunkRecord:
        return ChunkRecord(
            tenant_id=tenant_id,
            document_id=document_id,
            chunk_index=chunk_index,
            content=content,
            embedding=embedding if embedding is not None else letter_vector(content),
            source=SourceInfo(
                type=source_type,
                title=title,
                uri=file_name or "https://example.com",
                file_name=file_name,
                file_type=file_type,
                blob_ref=blob_ref,
            ),
            lineage=Lineage(content_hash=content_hash, version_number=version_number, is_active=is_active),
            status=ProcessingState(is_processed=True, processing_status=ProcessingStatus.COMPLETED),
            processing_date=base_time + timedelta(minutes=minutes),
        )

    return _make


@pytest.fixture
def extractor_factory():
    """FakeTextExtractor class, for tests that need pages, remote files or a subclass."""
    return FakeTextExtractor
