"""
Database boundary layer: ORM model, CRUD operations, connection management
and the chunk record store.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(): Async connection management
  - ChunkRecordModel: Chunk record ORM model
  - ChunkRecordCRUD, chunk_record_crud: CRUD operations
  - ChunkRecordStore: Session-owning store used by the core

Dependencies: sqlalchemy, knowledge_base.configs
System role: Persistent storage for chunk records
"""

from knowledge_base.boundary.db.base import Base, TimestampMixin, UUIDMixin
from knowledge_base.boundary.db.connection import get_async_engine, get_async_session_factory
from knowledge_base.boundary.db.models.chunk_record_model import ChunkRecordModel
from knowledge_base.boundary.db.CRUD import BaseCRUD, ChunkRecordCRUD, chunk_record_crud
from knowledge_base.boundary.db.store import ChunkRecordStore

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "get_async_engine",
    "get_async_session_factory",
    "ChunkRecordModel",
    "BaseCRUD",
    "ChunkRecordCRUD",
    "chunk_record_crud",
    "ChunkRecordStore",
]
