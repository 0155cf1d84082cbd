"""Shared persistence helpers for the policy repositories."""

from typing import Generic, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from policy_reconciler.core.exceptions import DatabaseError
from policy_reconciler.utils.logging import get_logger

ModelType = TypeVar("ModelType")

LOGGER = get_logger(__name__)


class BaseRepository(Generic[ModelType]):
    """Lookup and insert by primary key for one mapped class.

    Any driver failure rolls the session back and is re-raised as
    DatabaseError.
    """

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        self.session = session
        self.model = model
        self.logger = LOGGER

    async def _fail(self, action: str, error: SQLAlchemyError) -> None:
        table = self.model.__tablename__
        await self.session.rollback()
        self.logger.error(
            f"Database error while {action} {table}",
            exc_info=True,
            extra={"table": table, "error": str(error)},
        )
        raise DatabaseError(f"Database error while {action} {table}", original_error=error)

    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        """Fetch one row by primary key, or None."""
        try:
            rows = await self.session.execute(select(self.model).where(self.model.id == id))
        except SQLAlchemyError as e:
            await self._fail("reading", e)
        return rows.scalar_one_or_none()

    async def create(self, **values) -> ModelType:
        """Insert a row and commit it.

        Args:
            **values: Column values of the new row

        Returns:
            The inserted instance, with server defaults populated by the flush
        """
        instance = self.model(**values)
        try:
            self.session.add(instance)
            await self.session.flush()
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._fail("inserting into", e)
        return instance
