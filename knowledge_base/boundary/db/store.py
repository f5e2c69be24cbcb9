"""
Chunk record store.

Session-owning facade over ChunkRecordCRUD. Each operation runs in its own
session and commits on success, so independent callers (for example the two
halves of a hybrid search) can run concurrently. Every SQLAlchemy failure
surfaces as StoreError.

Dependencies: sqlalchemy, knowledge_base.boundary.db.CRUD, knowledge_base.core.exceptions
System role: Record store boundary used by every core module
"""

import logging
from typing import Any, Sequence

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from knowledge_base.boundary.db.base import Base
from knowledge_base.boundary.db.CRUD.chunk_record_crud import ChunkRecordCRUD, chunk_record_crud
from knowledge_base.boundary.db.models.chunk_record_model import ChunkRecordModel
from knowledge_base.core.exceptions import StoreError
from knowledge_base.models.chunk_record import ChunkFilter, ChunkRecord, SortOrder

logger = logging.getLogger(__name__)


class ChunkRecordStore:
    """Record store over an async session factory."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        crud: ChunkRecordCRUD | None = None,
    ) -> None:
        """
        Initialize store.

        Args:
            session_factory: Factory producing AsyncSessions
            crud: CRUD implementation (module singleton if None)
        """
        self._session_factory = session_factory
        self._crud = crud or chunk_record_crud

    @staticmethod
    def _fail(operation: str, error: Exception) -> StoreError:
        logger.error(
            "Record store operation failed",
            extra={"operation": operation, "error_type": type(error).__name__, "error_msg": str(error)},
        )
        return StoreError(f"Record store {operation} failed: {error}", operation=operation)

    async def create_schema(self, engine: AsyncEngine) -> None:
        """Create the chunk_records table if it does not exist."""
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise self._fail("create_schema", e) from e

    async def ping(self) -> bool:
        """Run SELECT 1 against the store."""
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            raise self._fail("ping", e) from e

    async def insert_many(self, records: Sequence[ChunkRecord]) -> int:
        """
        Insert chunk records in one transaction.

        Args:
            records: Domain records to persist

        Returns:
            Number of records inserted

        Raises:
            StoreError: When the insert fails
        """
        if not records:
            return 0
        try:
            async with self._session_factory() as session:
                inserted = await self._crud.create_many(
                    session, [ChunkRecordModel.from_record(r) for r in records]
                )
                await session.commit()
                return inserted
        except SQLAlchemyError as e:
            raise self._fail("insert", e) from e

    async def find(
        self,
        chunk_filter: ChunkFilter,
        sort: Sequence[tuple[str, SortOrder]] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[ChunkRecord]:
        """
        Find chunk records matching a filter.

        Args:
            chunk_filter: Tenant-scoped filter
            sort: (field, order) pairs
            limit: Maximum number of records
            offset: Number of records to skip

        Returns:
            list[ChunkRecord]: Matching records in sort order

        Raises:
            StoreError: When the query fails
        """
        try:
            async with self._session_factory() as session:
                rows = await self._crud.find(session, chunk_filter, sort, limit, offset)
                return [row.to_record() for row in rows]
        except SQLAlchemyError as e:
            raise self._fail("find", e) from e

    async def find_one(
        self,
        chunk_filter: ChunkFilter,
        sort: Sequence[tuple[str, SortOrder]] | None = None,
    ) -> ChunkRecord | None:
        """First record matching a filter in sort order, or None."""
        records = await self.find(chunk_filter, sort=sort, limit=1)
        return records[0] if records else None

    async def update_many(self, chunk_filter: ChunkFilter, values: dict[str, Any]) -> int:
        """
        Patch fields on every matching record.

        Args:
            chunk_filter: Tenant-scoped filter
            values: Column name to new value

        Returns:
            Number of records updated

        Raises:
            StoreError: When the update fails
        """
        try:
            async with self._session_factory() as session:
                updated = await self._crud.update_many(session, chunk_filter, values)
                await session.commit()
                return updated
        except SQLAlchemyError as e:
            raise self._fail("update", e) from e

    async def delete_many(self, chunk_filter: ChunkFilter) -> int:
        """
        Delete every matching record.

        Args:
            chunk_filter: Tenant-scoped filter

        Returns:
            Number of records deleted

        Raises:
            StoreError: When the delete fails
        """
        try:
            async with self._session_factory() as session:
                deleted = await self._crud.delete_many(session, chunk_filter)
                await session.commit()
                return deleted
        except SQLAlchemyError as e:
            raise self._fail("delete", e) from e

    async def count(self, chunk_filter: ChunkFilter) -> int:
        """Count matching records."""
        try:
            async with self._session_factory() as session:
                return await self._crud.count(session, chunk_filter)
        except SQLAlchemyError as e:
            raise self._fail("count", e) from e

    async def stats(self, chunk_filter: ChunkFilter) -> dict[str, Any]:
        """Aggregate statistics over matching records."""
        try:
            async with self._session_factory() as session:
                return await self._crud.stats(session, chunk_filter)
        except SQLAlchemyError as e:
            raise self._fail("stats", e) from e
