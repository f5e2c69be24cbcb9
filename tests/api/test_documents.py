"""
Tests for document endpoints.

Services are replaced with AsyncMocks through dependency_overrides.

System role: Verification of document HTTP API and error mapping
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from knowledge_base.api.deps.dependencies import get_document_service
from knowledge_base.api.main import create_app
from knowledge_base.core.exceptions import (
    DocumentNotFoundError,
    StoreError,
    ValidationError,
)
from knowledge_base.models.chunk_record import ProcessingStatus, SourceType
from knowledge_base.models.common import PaginatedResponse
from knowledge_base.models.document import (
    BulkDeleteResult,
    ChunkView,
    DeleteResult,
    DocumentStats,
    DocumentUpdateResult,
    FileHistory,
    StatusUpdateResult,
)
from knowledge_base.models.ingestion import IngestionResult, ItemResult


@pytest.fixture
def mock_document_service():
    return AsyncMock()


@pytest.fixture
def client(mock_document_service):
    app = create_app()
    app.dependency_overrides[get_document_service] = lambda: mock_document_service
    return TestClient(app)


class TestUpload:
    """Test suite for POST /documents/upload."""

    def test_upload_files_and_urls(self, client, mock_document_service):
        # Arrange
        mock_document_service.ingest.return_value = IngestionResult(
            tenant_id="42",
            total_items=2,
            success_count=2,
            error_count=0,
            results=[
                ItemResult(item="a.txt", type=SourceType.FILE, document_id="d1", chunks_created=1),
                ItemResult(item="https://example.com", type=SourceType.URL, document_id="d2", chunks_created=3),
            ],
            message="Processed 2 of 2 items (2 new, 0 replaced, 0 skipped, 0 failed)",
        )

        # Act
        response = client.post(
            "/api/v1/documents/upload",
            data={
                "tenant_id": "42",
                "urls": '["https://example.com"]',
                "titles": ["Notes"],
                "inbox_ids": "inbox-1,inbox-2",
            },
            files=[("files", ("a.txt", b"hello", "text/plain"))],
        )

        # Assert
        assert response.status_code == 200
        assert response.json()["success_count"] == 2
        args, kwargs = mock_document_service.ingest.call_args
        assert args == ("42",)
        assert [f.file_name for f in kwargs["files"]] == ["a.txt"]
        assert kwargs["files"][0].data == b"hello"
        assert kwargs["urls"] == ["https://example.com"]
        assert kwargs["options"].titles == ["Notes"]
        assert kwargs["options"].bot_config.inbox_ids == ["inbox-1", "inbox-2"]

    def test_upload_without_items_is_400(self, client, mock_document_service):
        mock_document_service.ingest.side_effect = ValidationError("At least one file or URL is required")

        response = client.post("/api/v1/documents/upload", data={"tenant_id": "42"})

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "At least one file or URL is required"
        assert response.json()["detail"]["success"] is False

    def test_store_failure_is_503(self, client, mock_document_service):
        mock_document_service.ingest.side_effect = StoreError("Record store insert failed", operation="insert")

        response = client.post(
            "/api/v1/documents/upload",
            data={"tenant_id": "42", "urls": "https://example.com"},
        )

        assert response.status_code == 503

    def test_unexpected_failure_is_500(self, client, mock_document_service):
        mock_document_service.ingest.side_effect = RuntimeError("boom")

        response = client.post(
            "/api/v1/documents/upload",
            data={"tenant_id": "42", "urls": "https://example.com"},
        )

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "An internal error occurred"

    def test_missing_tenant_is_422(self, client):
        response = client.post("/api/v1/documents/upload", data={"urls": "https://example.com"})

        assert response.status_code == 422


class TestMaintenance:
    """Test suite for update, status and delete endpoints."""

    def test_update_document(self, client, mock_document_service):
        mock_document_service.update_document.return_value = DocumentUpdateResult(
            tenant_id="42", document_id="doc", content_updated=False, chunks_updated=3, updated_fields=["title"]
        )

        response = client.put("/api/v1/documents/doc", json={"tenant_id": "42", "title": "New"})

        assert response.status_code == 200
        assert response.json()["chunks_updated"] == 3
        tenant_id, document_id, update = mock_document_service.update_document.call_args.args
        assert (tenant_id, document_id, update.title) == ("42", "doc", "New")

    def test_update_unknown_document_is_404(self, client, mock_document_service):
        mock_document_service.update_document.side_effect = DocumentNotFoundError("42", "ghost")

        response = client.put("/api/v1/documents/ghost", json={"tenant_id": "42", "title": "New"})

        assert response.status_code == 404

    def test_update_status(self, client, mock_document_service):
        mock_document_service.update_status.return_value = StatusUpdateResult(
            tenant_id="42", document_id="doc", status=ProcessingStatus.FAILED, modified_count=2
        )

        response = client.patch("/api/v1/documents/doc/status", json={"tenant_id": "42", "status": "failed"})

        assert response.status_code == 200
        mock_document_service.update_status.assert_awaited_once_with("42", "doc", ProcessingStatus.FAILED)

    def test_update_status_rejects_unknown_value(self, client):
        response = client.patch("/api/v1/documents/doc/status", json={"tenant_id": "42", "status": "done"})

        assert response.status_code == 422

    def test_delete_document(self, client, mock_document_service):
        mock_document_service.delete_document.return_value = DeleteResult(
            tenant_id="42", document_id="doc", chunks_deleted=4, blobs_deleted=1
        )

        response = client.delete("/api/v1/documents/doc", params={"tenant_id": "42"})

        assert response.status_code == 200
        assert response.json()["chunks_deleted"] == 4
        mock_document_service.delete_document.assert_awaited_once_with("42", "doc", True)

    def test_bulk_delete(self, client, mock_document_service):
        mock_document_service.bulk_delete.return_value = BulkDeleteResult(
            tenant_id="42", total_requested=2, successful_deletions=2, failed_deletions=0
        )

        response = client.post(
            "/api/v1/documents/bulk-delete",
            json={"tenant_id": "42", "document_ids": ["a", "b"], "delete_blobs": False},
        )

        assert response.status_code == 200
        mock_document_service.bulk_delete.assert_awaited_once_with("42", ["a", "b"], False)


class TestQueries:
    """Test suite for list, stats and history endpoints."""

    def test_list_documents(self, client, mock_document_service):
        # Arrange
        view = ChunkView(
            document_id="doc",
            chunk_index=0,
            content="hello",
            source_type=SourceType.FILE,
            source_title="Notes",
            source_uri="https://blobs.test/uploads/1-a.txt",
            file_name="a.txt",
            file_type=".txt",
            description=None,
            version_number=1,
            is_active=True,
            processing_status=ProcessingStatus.COMPLETED,
            processing_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        mock_document_service.list_documents.return_value = PaginatedResponse[ChunkView](
            items=[view], total=1, limit=10, offset=0
        )

        # Act
        response = client.get(
            "/api/v1/documents",
            params={"tenant_id": "42", "source_type": "file", "limit": 10, "sort_by": "chunk_index"},
        )

        # Assert
        assert response.status_code == 200
        assert response.json()["items"][0]["document_id"] == "doc"
        tenant_id, query = mock_document_service.list_documents.call_args.args
        assert tenant_id == "42"
        assert query.source_type == SourceType.FILE
        assert query.sort_by == "chunk_index"

    def test_stats(self, client, mock_document_service):
        mock_document_service.get_stats.return_value = DocumentStats(tenant_id="42", total_chunks=7)

        response = client.get("/api/v1/documents/stats", params={"tenant_id": "42"})

        assert response.status_code == 200
        assert response.json()["total_chunks"] == 7

    def test_history(self, client, mock_document_service):
        mock_document_service.get_file_history.return_value = FileHistory(tenant_id="42", file_name="a.txt")

        response = client.get(
            "/api/v1/documents/history",
            params={"tenant_id": "42", "file_name": "a.txt", "include_inactive": "true"},
        )

        assert response.status_code == 200
        mock_document_service.get_file_history.assert_awaited_once_with("42", "a.txt", True)
