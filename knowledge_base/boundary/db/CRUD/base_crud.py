"""
Generic bulk persistence shared by model-specific CRUD classes.

Dependencies: sqlalchemy
System role: Base of the CRUD layer
"""

from typing import Generic, Sequence, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_base.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Bulk insert for one ORM model.

    Subclasses add filtered reads and writes. Methods flush but never
    commit; the caller owns the transaction.
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create_many(
        self,
        session: AsyncSession,
        instances: Sequence[ModelT],
    ) -> int:
        """
        Stage rows and flush them in one round trip.

        Args:
            session: Async database session
            instances: Unsaved model instances

        Returns:
            Number of rows flushed

        Raises:
            TypeError: When an instance is not of this CRUD's model
        """
        rows = list(instances)
        for row in rows:
            if not isinstance(row, self.model):
                raise TypeError(f"Expected {self.model.__name__}, got {type(row).__name__}")
        session.add_all(rows)
        await session.flush()
        return len(rows)
