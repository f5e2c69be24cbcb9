"""
Database models package.

Exports:
  - ChunkRecordModel: Chunk record ORM model

Dependencies: sqlalchemy, knowledge_base.boundary.db.base
System role: Database model definitions for domain entities
"""

from knowledge_base.boundary.db.models.chunk_record_model import ChunkRecordModel

__all__ = ["ChunkRecordModel"]
