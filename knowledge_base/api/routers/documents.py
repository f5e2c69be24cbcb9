"""
Document API endpoints.

Routes:
  POST   /documents/upload
  POST   /documents/analyze
  PUT    /documents/{document_id}
  PATCH  /documents/{document_id}/status
  DELETE /documents/{document_id}
  POST   /documents/bulk-delete
  GET    /documents
  GET    /documents/stats
  GET    /documents/history

Dependencies: knowledge_base.application.services.document_service, knowledge_base.models
System role: Document HTTP API
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from knowledge_base.api.deps import get_document_service
from knowledge_base.api.routers.router_utils import (
    handle_service_errors,
    parse_list_field,
    parse_positional_field,
    read_upload_files,
)
from knowledge_base.application.services.document_service import DocumentService
from knowledge_base.models.chunk_record import BotConfig, SortOrder, SourceType
from knowledge_base.models.common import PaginatedResponse
from knowledge_base.models.document import (
    AnalysisResult,
    BulkDeleteRequest,
    BulkDeleteResult,
    ChunkView,
    DeleteResult,
    DocumentListQuery,
    DocumentStats,
    DocumentUpdateRequest,
    DocumentUpdateResult,
    FileHistory,
    StatusUpdateRequest,
    StatusUpdateResult,
)
from knowledge_base.models.ingestion import IngestionOptions, IngestionResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("/upload", response_model=IngestionResult)
@handle_service_errors
async def upload_documents(
    tenant_id: str = Form(...),
    files: list[UploadFile] | None = File(None),
    urls: list[str] | None = Form(None),
    file_url: str | None = Form(None),
    title: str | None = Form(None),
    description: str | None = Form(None),
    titles: list[str] | None = Form(None),
    descriptions: list[str] | None = Form(None),
    inbox_ids: list[str] | None = Form(None),
    system_prompt: str | None = Form(None),
    bot_api_key: str | None = Form(None),
    api_key: str | None = Form(None),
    document_service: DocumentService = Depends(get_document_service),
) -> IngestionResult:
    """
    Ingest uploaded files, URLs and an optional remote file.

    Per-item failures are reported in the result's errors list; the request
    only fails as a whole on validation or record store errors.

    Raises:
        HTTPException(400): Missing tenant_id or no items
        HTTPException(503): Record store unavailable
    """
    items = await read_upload_files(files)
    url_list = parse_list_field(urls)
    logger.info(
        "Upload request received",
        extra={"tenant_id": tenant_id, "files": len(items), "urls": len(url_list), "file_url": bool(file_url)},
    )

    options = IngestionOptions(
        title=title,
        description=description,
        titles=parse_positional_field(titles),
        descriptions=parse_positional_field(descriptions),
        bot_config=BotConfig(
            inbox_ids=parse_list_field(inbox_ids),
            system_prompt=system_prompt,
            bot_api_key=bot_api_key,
            api_key=api_key,
        ),
    )
    return await document_service.ingest(
        tenant_id,
        files=items,
        urls=url_list,
        file_url=file_url,
        options=options,
    )


@router.post("/analyze", response_model=AnalysisResult)
@handle_service_errors
async def analyze_files(
    tenant_id: str = Form(...),
    files: list[UploadFile] = File(...),
    document_service: DocumentService = Depends(get_document_service),
) -> AnalysisResult:
    """Classify files as new, identical or conflicting before uploading."""
    items = await read_upload_files(files)
    return await document_service.analyze_files(tenant_id, items)


@router.get("/stats", response_model=DocumentStats)
@handle_service_errors
async def get_stats(
    tenant_id: str = Query(..., min_length=1),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentStats:
    """Aggregate statistics over a tenant's active chunks."""
    return await document_service.get_stats(tenant_id)


@router.get("/history", response_model=FileHistory)
@handle_service_errors
async def get_file_history(
    tenant_id: str = Query(..., min_length=1),
    file_name: str = Query(..., min_length=1),
    include_inactive: bool = Query(False),
    document_service: DocumentService = Depends(get_document_service),
) -> FileHistory:
    """Version history of one file name."""
    return await document_service.get_file_history(tenant_id, file_name, include_inactive)


@router.get("", response_model=PaginatedResponse[ChunkView])
@handle_service_errors
async def list_documents(
    tenant_id: str = Query(..., min_length=1),
    source_type: SourceType | None = Query(None),
    file_type: str | None = Query(None),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    sort_by: str = Query("processing_date"),
    sort_order: SortOrder = Query(SortOrder.DESC),
    document_service: DocumentService = Depends(get_document_service),
) -> PaginatedResponse[ChunkView]:
    """List a tenant's active chunks with filters and paging."""
    query = DocumentListQuery(
        source_type=source_type,
        file_type=file_type,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
        offset=offset,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return await document_service.list_documents(tenant_id, query)


@router.put("/{document_id}", response_model=DocumentUpdateResult)
@handle_service_errors
async def update_document(
    document_id: str,
    request: DocumentUpdateRequest,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentUpdateResult:
    """
    Update a document.

    With content: re-chunk and re-embed under the same document_id.
    Without content: patch metadata on every chunk.
    """
    return await document_service.update_document(request.tenant_id, document_id, request)


@router.patch("/{document_id}/status", response_model=StatusUpdateResult)
@handle_service_errors
async def update_status(
    document_id: str,
    request: StatusUpdateRequest,
    document_service: DocumentService = Depends(get_document_service),
) -> StatusUpdateResult:
    """Set a document's processing status."""
    return await document_service.update_status(request.tenant_id, document_id, request.status)


@router.delete("/{document_id}", response_model=DeleteResult)
@handle_service_errors
async def delete_document(
    document_id: str,
    tenant_id: str = Query(..., min_length=1),
    delete_blobs: bool = Query(True),
    document_service: DocumentService = Depends(get_document_service),
) -> DeleteResult:
    """Delete a document's chunks and, optionally, its blobs."""
    return await document_service.delete_document(tenant_id, document_id, delete_blobs)


@router.post("/bulk-delete", response_model=BulkDeleteResult)
@handle_service_errors
async def bulk_delete(
    request: BulkDeleteRequest,
    document_service: DocumentService = Depends(get_document_service),
) -> BulkDeleteResult:
    """Delete several documents independently."""
    return await document_service.bulk_delete(
        request.tenant_id,
        request.document_ids,
        request.delete_blobs,
    )
