"""
Integration tests for ChunkRecordStore over SQLite.

Tests insert/find/update/delete, sorting and paging, tenant scoping,
statistics and StoreError wrapping against a real async engine.

System role: Verification of the record store boundary
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from knowledge_base.boundary.db.connection import get_async_session_factory
from knowledge_base.boundary.db.store import ChunkRecordStore
from knowledge_base.core.exceptions import StoreError
from knowledge_base.models.chunk_record import (
    ChunkFilter,
    ProcessingStatus,
    SortOrder,
    SourceType,
)


class TestInsertAndFind:
    """Test suite for insert_many() and find()."""

    async def test_round_trips_nested_record(self, store, make_record) -> None:
        # Arrange
        record = make_record(content="hello world", embedding=[0.5, 0.5], blob_ref="uploads/x")
        record.custom_metadata = {"team": "support"}
        record.bot_config.inbox_ids = ["inbox-1"]

        # Act
        inserted = await store.insert_many([record])
        found = await store.find(ChunkFilter(tenant_id="42"))

        # Assert
        assert inserted == 1
        assert len(found) == 1
        stored = found[0]
        assert stored.id is not None
        assert stored.content == "hello world"
        assert stored.embedding == [0.5, 0.5]
        assert stored.source.blob_ref == "uploads/x"
        assert stored.custom_metadata == {"team": "support"}
        assert stored.bot_config.inbox_ids == ["inbox-1"]
        assert stored.processing_date.tzinfo is not None

    async def test_insert_nothing_returns_zero(self, store) -> None:
        assert await store.insert_many([]) == 0

    async def test_find_is_tenant_scoped(self, store, make_record) -> None:
        await store.insert_many([make_record(tenant_id="42"), make_record(tenant_id="7")])

        found = await store.find(ChunkFilter(tenant_id="7"))

        assert [r.tenant_id for r in found] == ["7"]

    async def test_equality_filters(self, store, make_record) -> None:
        await store.insert_many(
            [
                make_record(document_id="a", file_name="a.txt", content_hash="h-a"),
                make_record(document_id="b", file_name="b.txt", content_hash="h-b", is_active=False),
            ]
        )

        by_name = await store.find(ChunkFilter(tenant_id="42", file_name="b.txt"))
        by_hash = await store.find(ChunkFilter(tenant_id="42", content_hash="h-a"))
        active = await store.find(ChunkFilter(tenant_id="42", is_active=True))
        by_ids = await store.find(ChunkFilter(tenant_id="42", document_ids=["a", "b"]))

        assert [r.document_id for r in by_name] == ["b"]
        assert [r.document_id for r in by_hash] == ["a"]
        assert [r.document_id for r in active] == ["a"]
        assert len(by_ids) == 2

    async def test_text_terms_match_any_case_insensitive(self, store, make_record) -> None:
        await store.insert_many(
            [
                make_record(document_id="a", content="Refund POLICY"),
                make_record(document_id="b", content="shipping"),
                make_record(document_id="c", content="contact us"),
            ]
        )

        found = await store.find(ChunkFilter(tenant_id="42", text_terms=["policy", "shipping"]))

        assert {r.document_id for r in found} == {"a", "b"}

    async def test_duplicate_chunk_raises_store_error(self, store, make_record) -> None:
        await store.insert_many([make_record()])

        with pytest.raises(StoreError) as exc_info:
            await store.insert_many([make_record()])

        assert exc_info.value.details["operation"] == "insert"


class TestSortingAndPaging:
    """Test suite for sort, limit and offset."""

    async def test_sort_limit_offset(self, store, make_record) -> None:
        # Arrange
        await store.insert_many([make_record(document_id=f"d{i}", minutes=i) for i in range(5)])

        # Act
        page = await store.find(
            ChunkFilter(tenant_id="42"),
            sort=[("processing_date", SortOrder.DESC)],
            limit=2,
            offset=1,
        )

        # Assert
        assert [r.document_id for r in page] == ["d3", "d2"]

    async def test_find_one_returns_first_or_none(self, store, make_record) -> None:
        await store.insert_many([make_record(document_id="v1", version_number=1), make_record(document_id="v2", version_number=2)])

        latest = await store.find_one(ChunkFilter(tenant_id="42"), sort=[("version_number", SortOrder.DESC)])
        missing = await store.find_one(ChunkFilter(tenant_id="99"))

        assert latest.document_id == "v2"
        assert missing is None

    async def test_unknown_sort_field_raises_value_error(self, store) -> None:
        with pytest.raises(ValueError):
            await store.find(ChunkFilter(tenant_id="42"), sort=[("embedding", SortOrder.ASC)])


class TestUpdateAndDelete:
    """Test suite for update_many() and delete_many()."""

    async def test_update_many_patches_matching_records(self, store, make_record) -> None:
        # Arrange
        await store.insert_many([make_record(document_id="a", chunk_index=i) for i in range(3)])
        replaced_at = datetime(2024, 2, 1, tzinfo=timezone.utc)

        # Act
        updated = await store.update_many(
            ChunkFilter(tenant_id="42", document_id="a"),
            {"is_active": False, "replaced_date": replaced_at, "replaced_reason": "content_changed"},
        )
        records = await store.find(ChunkFilter(tenant_id="42", document_id="a"))

        # Assert
        assert updated == 3
        assert all(not r.lineage.is_active for r in records)
        assert all(r.lineage.replaced_date == replaced_at for r in records)

    async def test_update_processing_status(self, store, make_record) -> None:
        await store.insert_many([make_record()])

        await store.update_many(
            ChunkFilter(tenant_id="42"),
            {"processing_status": ProcessingStatus.FAILED, "is_processed": False},
        )
        record = await store.find_one(ChunkFilter(tenant_id="42"))

        assert record.status.processing_status == ProcessingStatus.FAILED

    async def test_update_rejects_unknown_fields(self, store) -> None:
        with pytest.raises(ValueError):
            await store.update_many(ChunkFilter(tenant_id="42"), {"tenant_id": "7"})

    async def test_update_other_tenant_matches_nothing(self, store, make_record) -> None:
        await store.insert_many([make_record(tenant_id="42")])

        updated = await store.update_many(ChunkFilter(tenant_id="7"), {"is_active": False})

        assert updated == 0
        assert (await store.find_one(ChunkFilter(tenant_id="42"))).lineage.is_active

    async def test_delete_many(self, store, make_record) -> None:
        await store.insert_many([make_record(document_id="a"), make_record(document_id="b")])

        deleted = await store.delete_many(ChunkFilter(tenant_id="42", document_id="a"))

        assert deleted == 1
        assert await store.count(ChunkFilter(tenant_id="42")) == 1


class TestStats:
    """Test suite for stats()."""

    async def test_stats_aggregates(self, store, make_record) -> None:
        # Arrange
        await store.insert_many(
            [
                make_record(document_id="a", chunk_index=0, content="abcd", file_type=".txt", minutes=1),
                make_record(document_id="a", chunk_index=1, content="ab", file_type=".txt", minutes=1),
                make_record(
                    document_id="b",
                    content="abcdef",
                    source_type=SourceType.URL,
                    file_name=None,
                    file_type=None,
                    minutes=5,
                ),
            ]
        )

        # Act
        stats = await store.stats(ChunkFilter(tenant_id="42", is_active=True))

        # Assert
        assert stats["total_chunks"] == 3
        assert stats["unique_documents"] == 2
        assert stats["total_content_length"] == 12
        assert stats["avg_chunk_size"] == 4.0
        assert stats["source_types"] == ["file", "url"]
        assert stats["file_types"] == [".txt"]
        assert stats["latest_upload"] == datetime(2024, 1, 1, 0, 5, tzinfo=timezone.utc)
        assert stats["oldest_upload"] == datetime(2024, 1, 1, 0, 1, tzinfo=timezone.utc)

    async def test_stats_empty_tenant(self, store) -> None:
        stats = await store.stats(ChunkFilter(tenant_id="nobody"))

        assert stats["total_chunks"] == 0
        assert stats["latest_upload"] is None


class TestFailures:
    """Test suite for StoreError wrapping and health checks."""

    @pytest.fixture
    async def schemaless_store(self, tmp_path):
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
        yield ChunkRecordStore(get_async_session_factory(engine)), engine
        await engine.dispose()

    async def test_missing_table_surfaces_store_error(self, schemaless_store) -> None:
        store, _ = schemaless_store

        with pytest.raises(StoreError) as exc_info:
            await store.find(ChunkFilter(tenant_id="42"))

        assert exc_info.value.details["operation"] == "find"

    async def test_create_schema_then_ping(self, schemaless_store) -> None:
        store, engine = schemaless_store

        await store.create_schema(engine)

        assert await store.ping() is True
        assert await store.count(ChunkFilter(tenant_id="42")) == 0
