"""Base repository for database operations."""

from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from blog.errors.database import DatabaseError, DuplicateEntryError


class BaseRepository[ModelT: SQLModel]:
    """
    Base repository implementing common lookups.

    Subclasses set ``model`` and, when the primary key is not ``id``,
    ``id_field``.

    Attributes:
        model: The SQLModel database model type.
        id_field: The name of the primary key field (default: "id").
    """

    model: type[ModelT]
    id_field: str = "id"

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize repository with database session.

        Args:
            session: Async database session
        """
        self.session = session

    async def get_by_id(self, record_id: UUID) -> ModelT | None:
        """
        Get a record by its ID.

        Args:
            record_id: Record UUID

        Returns:
            ModelT | None: Record if found, None otherwise
        """
        id_column = getattr(self.model, self.id_field)
        result = await self.session.execute(select(self.model).where(id_column == record_id))
        return result.scalar_one_or_none()

    async def get_by_field(self, field_name: str, value: Any) -> ModelT | None:
        """Get the first record whose ``field_name`` equals ``value``."""
        field = getattr(self.model, field_name)
        result = await self.session.execute(select(self.model).where(field == value).limit(1))
        return result.scalar_one_or_none()

    async def count(self) -> int:
        """Count total records."""
        result = await self.session.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()

    async def _add_and_flush(self, db_obj: ModelT) -> ModelT:
        """
        Add an object and flush it so database defaults and constraints apply.

        Raises:
            DuplicateEntryError: On a unique constraint violation.
            DatabaseError: On any other integrity error.
        """
        self.session.add(db_obj)
        try:
            await self.session.flush()
        except IntegrityError as e:
            error_msg = str(e.orig) if e.orig else str(e)
            if "unique" in error_msg.lower() or "duplicate" in error_msg.lower():
                raise DuplicateEntryError(
                    detail=f"{self.model.__name__} already exists",
                ) from e
            raise DatabaseError(detail=f"Database integrity error: {error_msg}") from e
        return db_obj
