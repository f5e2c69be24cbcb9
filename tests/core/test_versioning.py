"""
Tests for the deduplication and versioning resolver.

System role: Verification of lineage decisions and pre-upload analysis
"""

import hashlib

import pytest

from knowledge_base.core.document_processing.versioning import (
    REPLACED_REASON_CONTENT_CHANGED,
    VersionAction,
    VersionResolver,
    compute_content_hash,
)
from knowledge_base.models.chunk_record import ChunkFilter
from knowledge_base.models.document import ConflictStatus
from knowledge_base.models.ingestion import FileItem


@pytest.fixture
def resolver(store) -> VersionResolver:
    return VersionResolver(store)


class TestComputeContentHash:
    """Test compute_content_hash."""

    def test_is_sha256_hex_of_bytes(self) -> None:
        assert compute_content_hash(b"abc") == hashlib.sha256(b"abc").hexdigest()

    def test_str_is_utf8_encoded(self) -> None:
        assert compute_content_hash("héllo") == compute_content_hash("héllo".encode("utf-8"))


class TestResolve:
    """Test VersionResolver.resolve."""

    async def test_new_file_gets_version_one(self, resolver) -> None:
        decision = await resolver.resolve("42", "report.pdf", "H1")

        assert decision.action == VersionAction.NEW
        assert decision.version_number == 1
        assert decision.existing is None

    async def test_identical_hash_is_skip(self, resolver, store, make_record) -> None:
        # Arrange
        await store.insert_many([make_record(document_id="d1", file_name="report.pdf", content_hash="H1")])

        # Act
        decision = await resolver.resolve("42", "report.pdf", "H1")

        # Assert
        assert decision.action == VersionAction.SKIP
        assert decision.previous_document_id == "d1"

    async def test_different_hash_is_replace_with_next_version(self, resolver, store, make_record) -> None:
        await store.insert_many(
            [make_record(document_id="d1", file_name="report.pdf", content_hash="H1", version_number=1)]
        )

        decision = await resolver.resolve("42", "report.pdf", "H2")

        assert decision.action == VersionAction.REPLACE
        assert decision.version_number == 2
        assert decision.previous_document_id == "d1"

    async def test_other_tenant_is_invisible(self, resolver, store, make_record) -> None:
        await store.insert_many([make_record(tenant_id="7", file_name="report.pdf", content_hash="H1")])

        decision = await resolver.resolve("42", "report.pdf", "H1")

        assert decision.action == VersionAction.NEW

    async def test_inactive_identical_hash_is_not_skipped(self, resolver, store, make_record) -> None:
        await store.insert_many(
            [make_record(document_id="old", file_name="report.pdf", content_hash="H1", is_active=False)]
        )

        decision = await resolver.resolve("42", "report.pdf", "H1")

        assert decision.action == VersionAction.NEW

    async def test_new_after_deactivation_continues_numbering(self, resolver, store, make_record) -> None:
        await store.insert_many(
            [
                make_record(document_id="v1", file_name="a.txt", content_hash="H1", version_number=1, is_active=False),
                make_record(document_id="v2", file_name="a.txt", content_hash="H2", version_number=2, is_active=False),
            ]
        )

        decision = await resolver.resolve("42", "a.txt", "H3")

        assert decision.action == VersionAction.NEW
        assert decision.version_number == 3


class TestSupersede:
    """Test VersionResolver.supersede."""

    async def test_marks_previous_set_inactive(self, resolver, store, make_record) -> None:
        # Arrange
        await store.insert_many(
            [make_record(document_id="d1", chunk_index=i, file_name="report.pdf") for i in range(3)]
        )

        # Act
        modified = await resolver.supersede("42", "d1", "d2")

        # Assert
        assert modified == 3
        records = await store.find(ChunkFilter(tenant_id="42", document_id="d1"))
        assert all(not r.lineage.is_active for r in records)
        assert all(r.lineage.replaced_reason == REPLACED_REASON_CONTENT_CHANGED for r in records)
        assert all(r.lineage.replaced_by_document_id == "d2" for r in records)
        assert all(r.lineage.replaced_date is not None for r in records)


class TestAnalyze:
    """Test VersionResolver.analyze."""

    async def test_classifies_new_identical_and_conflicting(self, resolver, store, make_record) -> None:
        # Arrange
        same_bytes = b"same content"
        await store.insert_many(
            [
                make_record(document_id="d1", file_name="same.txt", content_hash=compute_content_hash(same_bytes)),
                make_record(document_id="d2", file_name="changed.txt", content_hash="old-hash", version_number=4),
            ]
        )
        files = [
            FileItem(file_name="new.txt", data=b"brand new", mime_type="text/plain"),
            FileItem(file_name="same.txt", data=same_bytes, mime_type="text/plain"),
            FileItem(file_name="changed.txt", data=b"new content", mime_type="text/plain"),
        ]

        # Act
        result = await resolver.analyze("42", files)

        # Assert
        by_name = {a.file_name: a for a in result.analysis}
        assert by_name["new.txt"].conflict_status == ConflictStatus.NEW
        assert by_name["new.txt"].action_required == "upload"
        assert by_name["same.txt"].conflict_status == ConflictStatus.IDENTICAL_CONTENT
        assert by_name["same.txt"].action_required == "skip"
        assert by_name["same.txt"].existing_document_id == "d1"
        assert by_name["changed.txt"].conflict_status == ConflictStatus.SAME_NAME_DIFFERENT_CONTENT
        assert by_name["changed.txt"].action_required == "replace_or_version"
        assert by_name["changed.txt"].existing_version_number == 4
        assert result.summary.total_files == 3
        assert result.summary.new_files == 1
        assert result.summary.identical_files == 1
        assert result.summary.conflicting_files == 1
        assert result.summary.requires_attention is True
        assert result.summary.safe_to_upload is False

    async def test_analysis_writes_nothing(self, resolver, store) -> None:
        await resolver.analyze("42", [FileItem(file_name="a.txt", data=b"x")])

        assert await store.count(ChunkFilter(tenant_id="42")) == 0
