"""
CRUD operations for database models.

Exports base CRUD class and the chunk record CRUD with a pre-instantiated
singleton for direct use.

Usage:
    from knowledge_base.boundary.db.CRUD import chunk_record_crud

    rows = await chunk_record_crud.find(session, ChunkFilter(tenant_id="42"))
"""

from knowledge_base.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_base.boundary.db.CRUD.chunk_record_crud import (
    ChunkRecordCRUD,
    build_conditions,
    chunk_record_crud,
)

__all__ = [
    "BaseCRUD",
    "ChunkRecordCRUD",
    "build_conditions",
    "chunk_record_crud",
]
