"""
Health check API endpoints.

Routes: GET /health, GET /health/db

Dependencies: knowledge_base.boundary.db.store
System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from knowledge_base.api.deps import get_store
from knowledge_base.boundary.db.store import ChunkRecordStore
from knowledge_base.core.exceptions import StoreError


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy")


@router.get("/db", response_model=HealthResponse)
async def health_check_db(store: ChunkRecordStore = Depends(get_store)) -> HealthResponse:
    """Record store health check."""
    try:
        await store.ping()
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=e.message,
        ) from e
    return HealthResponse(status="healthy", message="Database connection OK")
