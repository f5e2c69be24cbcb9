"""
Chunk record CRUD operations.

Translates ChunkFilter predicates into SQLAlchemy clauses and provides the
bulk operations the record store contract needs: insert-many, filtered find
with sort/limit/skip, update-many, delete-many, count and statistics.

Dependencies: sqlalchemy, knowledge_base.boundary.db.models, knowledge_base.models
System role: Chunk record persistence operations
"""

from typing import Any, Sequence

from sqlalchemy import ColumnElement, and_, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_base.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_base.boundary.db.models.chunk_record_model import ChunkRecordModel, as_utc
from knowledge_base.models.chunk_record import ChunkFilter, SortOrder

SORTABLE_FIELDS = frozenset(
    {
        "processing_date",
        "version_number",
        "chunk_index",
        "created_at",
        "updated_at",
        "source_title",
        "file_name",
        "document_id",
    }
)

UPDATABLE_FIELDS = frozenset(
    {
        "source_title",
        "description",
        "inbox_ids",
        "system_prompt",
        "bot_api_key",
        "api_key",
        "is_active",
        "replaced_date",
        "replaced_reason",
        "replaced_by_document_id",
        "is_processed",
        "processing_status",
        "custom_metadata",
    }
)


def build_conditions(chunk_filter: ChunkFilter) -> list[ColumnElement[bool]]:
    """
    Build WHERE clauses for a filter.

    Args:
        chunk_filter: Tenant-scoped filter

    Returns:
        list of SQLAlchemy boolean clauses, tenant scope first
    """
    model = ChunkRecordModel
    conditions: list[ColumnElement[bool]] = [model.tenant_id == chunk_filter.tenant_id]

    if chunk_filter.document_id is not None:
        conditions.append(model.document_id == chunk_filter.document_id)
    if chunk_filter.document_ids is not None:
        conditions.append(model.document_id.in_(chunk_filter.document_ids))
    if chunk_filter.file_name is not None:
        conditions.append(model.file_name == chunk_filter.file_name)
    if chunk_filter.content_hash is not None:
        conditions.append(model.content_hash == chunk_filter.content_hash)
    if chunk_filter.is_active is not None:
        conditions.append(model.is_active == chunk_filter.is_active)
    if chunk_filter.source_type is not None:
        conditions.append(model.source_type == chunk_filter.source_type)
    if chunk_filter.file_type is not None:
        conditions.append(model.file_type == chunk_filter.file_type)
    if chunk_filter.chunk_index is not None:
        conditions.append(model.chunk_index == chunk_filter.chunk_index)
    if chunk_filter.date_from is not None:
        conditions.append(model.processing_date >= chunk_filter.date_from)
    if chunk_filter.date_to is not None:
        conditions.append(model.processing_date <= chunk_filter.date_to)
    if chunk_filter.text_terms:
        terms = dict.fromkeys(chunk_filter.text_terms)
        conditions.append(or_(*(model.content.icontains(term, autoescape=True) for term in terms)))

    return conditions


class ChunkRecordCRUD(BaseCRUD[ChunkRecordModel]):
    """
    CRUD operations for ChunkRecordModel.

    Every operation takes a ChunkFilter, so every statement is tenant-scoped.
    """

    def __init__(self) -> None:
        """Initialize ChunkRecordCRUD with ChunkRecordModel."""
        super().__init__(ChunkRecordModel)

    async def find(
        self,
        session: AsyncSession,
        chunk_filter: ChunkFilter,
        sort: Sequence[tuple[str, SortOrder]] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[ChunkRecordModel]:
        """
        Retrieve chunk records matching a filter.

        Args:
            session: Async database session
            chunk_filter: Tenant-scoped filter
            sort: (field, order) pairs applied in sequence
            limit: Maximum number of records to return (None for all)
            offset: Number of records to skip

        Returns:
            Sequence of matching ChunkRecordModels

        Raises:
            ValueError: When a sort field is not sortable
        """
        stmt = select(ChunkRecordModel).where(and_(*build_conditions(chunk_filter)))

        for field, order in sort or ():
            if field not in SORTABLE_FIELDS:
                raise ValueError(f"Cannot sort by {field}")
            column = getattr(ChunkRecordModel, field)
            stmt = stmt.order_by(column.desc() if order == SortOrder.DESC else column.asc())
        # Stable tail ordering so paging is deterministic
        stmt = stmt.order_by(ChunkRecordModel.document_id, ChunkRecordModel.chunk_index)

        stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count(self, session: AsyncSession, chunk_filter: ChunkFilter) -> int:
        """
        Count chunk records matching a filter.

        Args:
            session: Async database session
            chunk_filter: Tenant-scoped filter

        Returns:
            Number of matching records
        """
        stmt = (
            select(func.count())
            .select_from(ChunkRecordModel)
            .where(and_(*build_conditions(chunk_filter)))
        )
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def update_many(
        self,
        session: AsyncSession,
        chunk_filter: ChunkFilter,
        values: dict[str, Any],
    ) -> int:
        """
        Patch fields on every chunk record matching a filter.

        Args:
            session: Async database session
            chunk_filter: Tenant-scoped filter
            values: Column name to new value

        Returns:
            Number of rows updated

        Raises:
            ValueError: When a field is not updatable
        """
        unknown = set(values) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")
        if not values:
            return 0

        stmt = (
            update(ChunkRecordModel)
            .where(and_(*build_conditions(chunk_filter)))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def delete_many(self, session: AsyncSession, chunk_filter: ChunkFilter) -> int:
        """
        Delete every chunk record matching a filter.

        Args:
            session: Async database session
            chunk_filter: Tenant-scoped filter

        Returns:
            Number of rows deleted
        """
        stmt = (
            delete(ChunkRecordModel)
            .where(and_(*build_conditions(chunk_filter)))
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def stats(self, session: AsyncSession, chunk_filter: ChunkFilter) -> dict[str, Any]:
        """
        Aggregate statistics over matching chunk records.

        Args:
            session: Async database session
            chunk_filter: Tenant-scoped filter

        Returns:
            dict with total_chunks, unique_documents, avg_chunk_size,
            total_content_length, latest_upload, oldest_upload,
            source_types and file_types
        """
        conditions = and_(*build_conditions(chunk_filter))
        content_length = func.length(ChunkRecordModel.content)

        totals_stmt = select(
            func.count(),
            func.count(func.distinct(ChunkRecordModel.document_id)),
            func.avg(content_length),
            func.sum(content_length),
            func.max(ChunkRecordModel.processing_date),
            func.min(ChunkRecordModel.processing_date),
        ).where(conditions)
        totals = (await session.execute(totals_stmt)).one()

        source_types_stmt = select(ChunkRecordModel.source_type).where(conditions).distinct()
        file_types_stmt = (
            select(ChunkRecordModel.file_type)
            .where(conditions, ChunkRecordModel.file_type.is_not(None))
            .distinct()
        )
        source_types = (await session.execute(source_types_stmt)).scalars().all()
        file_types = (await session.execute(file_types_stmt)).scalars().all()

        return {
            "total_chunks": int(totals[0] or 0),
            "unique_documents": int(totals[1] or 0),
            "avg_chunk_size": round(float(totals[2] or 0.0), 2),
            "total_content_length": int(totals[3] or 0),
            "latest_upload": as_utc(totals[4]),
            "oldest_upload": as_utc(totals[5]),
            "source_types": sorted(str(getattr(s, "value", s)) for s in source_types),
            "file_types": sorted(file_types),
        }


chunk_record_crud = ChunkRecordCRUD()
