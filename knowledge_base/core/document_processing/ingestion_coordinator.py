"""
Ingestion coordinator.

Runs every item of an ingestion request (uploaded files, crawled URLs, one
optional remote file) through extract, resolve, upload, split, embed and
persist. Items are isolated: an item-level failure becomes an error entry and
the next item proceeds. StoreError is systemic and aborts the request.

Items run sequentially (files, then URLs, then the remote file), so success
entries come back in input order.

Dependencies: asyncio, knowledge_base.core.document_processing, knowledge_base.core.interfaces
System role: Orchestrator of the ingestion pipeline
"""

import asyncio
import logging
import time
from pathlib import PurePosixPath
from typing import Awaitable, Callable
from urllib.parse import urlparse

from knowledge_base.boundary.db.store import ChunkRecordStore
from knowledge_base.core.document_processing.record_builder import (
    build_chunk_records,
    new_document_id,
)
from knowledge_base.core.document_processing.tasks.chunking_task import ChunkingTask
from knowledge_base.core.document_processing.tasks.embedding_task import EmbeddingTask
from knowledge_base.core.document_processing.versioning import (
    VersionAction,
    VersionResolver,
    compute_content_hash,
)
from knowledge_base.core.exceptions import KnowledgeBaseError, StoreError, ValidationError
from knowledge_base.core.interfaces import BlobStore, EmbeddingProvider, TextExtractor
from knowledge_base.models.chunk_record import Lineage, SourceInfo, SourceType, utc_now
from knowledge_base.models.ingestion import (
    FileItem,
    IngestionOptions,
    IngestionResult,
    ItemError,
    ItemResult,
    ItemStatus,
)
from knowledge_base.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

HASH_PREFIX_LENGTH = 16


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class IngestionCoordinator:
    """Per-item ingestion orchestration with error isolation."""

    def __init__(
        self,
        store: ChunkRecordStore,
        extractor: TextExtractor,
        embedding_provider: EmbeddingProvider,
        blob_store: BlobStore,
        chunking_task: ChunkingTask | None = None,
        resolver: VersionResolver | None = None,
        item_timeout: float | None = None,
        max_files: int | None = None,
    ) -> None:
        """
        Initialize coordinator.

        Args:
            store: Chunk record store
            extractor: Text extractor for files and URLs
            embedding_provider: Embedding provider
            blob_store: Raw file storage
            chunking_task: Splitter (1000/200 defaults if None)
            resolver: Version resolver (built over store if None)
            item_timeout: Seconds before a single item is aborted (None disables)
            max_files: Upper bound on files per request (None disables)
        """
        self._store = store
        self._extractor = extractor
        self._blob_store = blob_store
        self._chunker = chunking_task or ChunkingTask()
        self._embedder = EmbeddingTask(embedding_provider)
        self._resolver = resolver or VersionResolver(store)
        self._item_timeout = item_timeout
        self._max_files = max_files

    @property
    def resolver(self) -> VersionResolver:
        return self._resolver

    def _validate(
        self,
        tenant_id: str,
        files: list[FileItem],
        urls: list[str],
        file_url: str | None,
    ) -> None:
        if not tenant_id or not tenant_id.strip():
            raise ValidationError("tenant_id is required", field="tenant_id")
        if not files and not urls and not file_url:
            raise ValidationError("At least one file, URL or file_url is required", field="items")
        if self._max_files is not None and len(files) > self._max_files:
            raise ValidationError(
                f"Too many files: {len(files)} (maximum {self._max_files})",
                field="files",
            )
        invalid = [u for u in [*urls, *([file_url] if file_url else [])] if not _is_http_url(u)]
        if invalid:
            raise ValidationError(
                "URLs must be absolute http(s) URLs",
                field="urls",
                details={"invalid": invalid},
            )

    async def ingest(
        self,
        tenant_id: str,
        files: list[FileItem] | None = None,
        urls: list[str] | None = None,
        file_url: str | None = None,
        options: IngestionOptions | None = None,
    ) -> IngestionResult:
        """
        Ingest a batch of items for one tenant.

        Args:
            tenant_id: Owning tenant
            files: Uploaded files
            urls: Web pages to crawl
            file_url: Remote file to download
            options: Titles, descriptions and bot configuration

        Returns:
            IngestionResult: Counts plus per-item results and errors

        Raises:
            ValidationError: When the request itself is invalid (no work done)
            StoreError: When the record store fails
        """
        files = list(files or [])
        urls = [u.strip() for u in (urls or []) if u and u.strip()]
        file_url = file_url.strip() if file_url and file_url.strip() else None
        options = options or IngestionOptions()
        self._validate(tenant_id, files, urls, file_url)

        jobs: list[tuple[str, SourceType, Callable[[], Awaitable[ItemResult]]]] = []
        for index, item in enumerate(files):
            jobs.append(
                (item.file_name, SourceType.FILE, lambda i=index, f=item: self._ingest_file(tenant_id, i, f, options))
            )
        for url in urls:
            jobs.append((url, SourceType.URL, lambda u=url: self._ingest_url(tenant_id, u, options)))
        if file_url:
            jobs.append(
                (file_url, SourceType.FILE_URL, lambda: self._ingest_file_url(tenant_id, file_url, options))
            )

        logger.info(
            "Ingestion started",
            extra={"tenant_id": tenant_id, "files": len(files), "urls": len(urls), "file_url": bool(file_url)},
        )

        results: list[ItemResult] = []
        errors: list[ItemError] = []
        for label, source_type, run in jobs:
            try:
                results.append(await self._run_item(run))
            except StoreError:
                raise
            except asyncio.TimeoutError:
                logger.warning(
                    "Item timed out",
                    extra={"tenant_id": tenant_id, "item": label, "timeout_s": self._item_timeout},
                )
                errors.append(
                    ItemError(
                        item=label,
                        type=source_type,
                        error=f"Processing timed out after {self._item_timeout}s",
                        error_type="TimeoutError",
                    )
                )
            except KnowledgeBaseError as e:
                logger.warning(
                    "Item failed",
                    extra={"tenant_id": tenant_id, "item": label, "error_type": type(e).__name__, "error_msg": e.message},
                )
                errors.append(ItemError(item=label, type=source_type, error=e.message, error_type=type(e).__name__))
            except Exception as e:
                log_exception_with_context(logger, "Unexpected item failure", e, tenant_id=tenant_id, item=label)
                errors.append(ItemError(item=label, type=source_type, error=str(e), error_type=type(e).__name__))

        result = IngestionResult(
            tenant_id=tenant_id,
            total_items=len(jobs),
            success_count=len(results),
            error_count=len(errors),
            results=results,
            errors=errors,
        )
        result.message = (
            f"Processed {result.success_count} of {result.total_items} items "
            f"({result.new_count} new, {result.replaced_count} replaced, "
            f"{result.skipped_count} skipped, {result.error_count} failed)"
        )
        logger.info(
            "Ingestion finished",
            extra={
                "tenant_id": tenant_id,
                "success_count": result.success_count,
                "error_count": result.error_count,
            },
        )
        return result

    async def _run_item(self, run: Callable[[], Awaitable[ItemResult]]) -> ItemResult:
        if self._item_timeout:
            return await asyncio.wait_for(run(), timeout=self._item_timeout)
        return await run()

    async def _discard_blob(self, blob_ref: str, reason: str) -> None:
        """Best-effort blob delete; failures are logged only."""
        try:
            await self._blob_store.delete(blob_ref)
            logger.info("Blob discarded", extra={"blob_ref": blob_ref, "reason": reason})
        except Exception as e:
            logger.warning(
                "Blob cleanup failed",
                extra={"blob_ref": blob_ref, "reason": reason, "error_type": type(e).__name__, "error_msg": str(e)},
            )

    async def _split_and_embed(self, text: str) -> tuple[list[str], list[list[float]]]:
        chunks = self._chunker.split(text)
        embeddings = await self._embedder.embed(chunks)
        return chunks, embeddings

    def _pipeline_metadata(self, extraction_method: str, text: str) -> dict:
        return {
            "chunk_size": self._chunker.chunk_size,
            "chunk_overlap": self._chunker.chunk_overlap,
            "embedding_model": self._embedder.model_name,
            "extraction_method": extraction_method,
            "original_text_length": len(text),
        }

    async def _ingest_file(
        self,
        tenant_id: str,
        index: int,
        item: FileItem,
        options: IngestionOptions,
    ) -> ItemResult:
        started = time.perf_counter()
        text = await self._extractor.extract_file(item.data, item.file_name, item.mime_type)
        if not text or not text.strip():
            raise ValidationError("No text content could be extracted from the file", field="text")

        content_hash = compute_content_hash(item.data)
        decision = await self._resolver.resolve(tenant_id, item.file_name, content_hash)

        if decision.action == VersionAction.SKIP:
            existing = decision.existing
            return ItemResult(
                item=item.file_name,
                type=SourceType.FILE,
                document_id=existing.document_id,
                chunks_created=0,
                status=ItemStatus.SKIPPED_DUPLICATE,
                version_number=existing.lineage.version_number,
                blob_url=existing.source.blob_url,
                blob_ref=existing.source.blob_ref,
                content_hash=content_hash[:HASH_PREFIX_LENGTH],
                text_length=len(text),
                processing_time_ms=_elapsed_ms(started),
            )

        replacing = decision.action == VersionAction.REPLACE
        document_id = new_document_id()
        blob = await self._blob_store.upload(item.data, item.file_name, item.mime_type)
        try:
            chunks, embeddings = await self._split_and_embed(text)
            records = build_chunk_records(
                tenant_id=tenant_id,
                document_id=document_id,
                chunks=chunks,
                embeddings=embeddings,
                source=SourceInfo(
                    type=SourceType.FILE,
                    title=options.title_for(index) or item.file_name,
                    uri=blob.url,
                    file_name=item.file_name,
                    file_type=PurePosixPath(item.file_name).suffix.lower() or None,
                    blob_ref=blob.blob_ref,
                    blob_url=blob.url,
                ),
                lineage=Lineage(content_hash=content_hash, version_number=decision.version_number),
                description=options.description_for(index)
                or f"{'Updated' if replacing else 'Uploaded'} file: {item.file_name}",
                bot_config=options.bot_config,
                extra_metadata={
                    **self._pipeline_metadata("file_parser", text),
                    "mime_type": item.mime_type,
                    "file_size": len(item.data),
                },
            )
            if replacing:
                await self._resolver.supersede(tenant_id, decision.previous_document_id, document_id, utc_now())
            await self._store.insert_many(records)
        except (Exception, asyncio.CancelledError):
            await self._discard_blob(blob.blob_ref, reason="compensation")
            raise

        if replacing and decision.existing.source.blob_ref:
            await self._discard_blob(decision.existing.source.blob_ref, reason="replaced")

        logger.info(
            "File ingested",
            extra={
                "tenant_id": tenant_id,
                "file_name": item.file_name,
                "document_id": document_id,
                "chunks": len(records),
                "version_number": decision.version_number,
                "action": decision.action.value,
            },
        )
        return ItemResult(
            item=item.file_name,
            type=SourceType.FILE,
            document_id=document_id,
            chunks_created=len(records),
            status=ItemStatus.REPLACED if replacing else ItemStatus.SUCCESS,
            version_number=decision.version_number,
            replaced_document_id=decision.previous_document_id if replacing else None,
            blob_url=blob.url,
            blob_ref=blob.blob_ref,
            content_hash=content_hash[:HASH_PREFIX_LENGTH],
            text_length=len(text),
            processing_time_ms=_elapsed_ms(started),
        )

    async def _ingest_url(self, tenant_id: str, url: str, options: IngestionOptions) -> ItemResult:
        started = time.perf_counter()
        text = await self._extractor.extract_url(url)
        if not text or not text.strip():
            raise ValidationError("No text content could be extracted from the URL", field="text")

        document_id = new_document_id()
        chunks, embeddings = await self._split_and_embed(text)
        records = build_chunk_records(
            tenant_id=tenant_id,
            document_id=document_id,
            chunks=chunks,
            embeddings=embeddings,
            source=SourceInfo(type=SourceType.URL, title=options.title or f"Content from {url}", uri=url),
            lineage=Lineage(version_number=1),
            description=options.description,
            bot_config=options.bot_config,
            extra_metadata={**self._pipeline_metadata("web_crawl", text), "source_url": url},
        )
        await self._store.insert_many(records)

        logger.info(
            "URL ingested",
            extra={"tenant_id": tenant_id, "url": url, "document_id": document_id, "chunks": len(records)},
        )
        return ItemResult(
            item=url,
            type=SourceType.URL,
            document_id=document_id,
            chunks_created=len(records),
            text_length=len(text),
            processing_time_ms=_elapsed_ms(started),
        )

    async def _ingest_file_url(self, tenant_id: str, file_url: str, options: IngestionOptions) -> ItemResult:
        started = time.perf_counter()
        data, remote_name, mime_type = await self._extractor.download_file(file_url)
        text = await self._extractor.extract_file(data, remote_name, mime_type)
        if not text or not text.strip():
            raise ValidationError("No text content could be extracted from the remote file", field="text")

        content_hash = compute_content_hash(data)
        document_id = new_document_id()
        chunks, embeddings = await self._split_and_embed(text)
        records = build_chunk_records(
            tenant_id=tenant_id,
            document_id=document_id,
            chunks=chunks,
            embeddings=embeddings,
            source=SourceInfo(
                type=SourceType.FILE_URL,
                title=options.title or f"File from {file_url}",
                uri=file_url,
                file_type=PurePosixPath(remote_name).suffix.lower() or None,
            ),
            lineage=Lineage(content_hash=content_hash, version_number=1),
            description=options.description,
            bot_config=options.bot_config,
            extra_metadata={
                **self._pipeline_metadata("file_parser", text),
                "source_url": file_url,
                "remote_file_name": remote_name,
                "mime_type": mime_type,
                "file_size": len(data),
            },
        )
        await self._store.insert_many(records)

        logger.info(
            "Remote file ingested",
            extra={"tenant_id": tenant_id, "url": file_url, "document_id": document_id, "chunks": len(records)},
        )
        return ItemResult(
            item=file_url,
            type=SourceType.FILE_URL,
            document_id=document_id,
            chunks_created=len(records),
            content_hash=content_hash[:HASH_PREFIX_LENGTH],
            text_length=len(text),
            processing_time_ms=_elapsed_ms(started),
        )
