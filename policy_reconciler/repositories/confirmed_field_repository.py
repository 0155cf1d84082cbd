"""Repository for field confirmations."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from policy_reconciler.core.exceptions import DuplicateConfirmationError
from policy_reconciler.database.models import ConfirmedFieldModel
from policy_reconciler.repositories.base_repository import BaseRepository


class ConfirmedFieldRepository(BaseRepository[ConfirmedFieldModel]):
    """Repository for (record, field) confirmations.

    The (record_id, field_name) pair is unique; entries are inserted and
    deleted, never updated.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session, ConfirmedFieldModel)

    async def list_for_record(self, record_id: UUID) -> List[ConfirmedFieldModel]:
        """Get all confirmations of a record, oldest first."""
        try:
            query = (
                select(ConfirmedFieldModel)
                .where(ConfirmedFieldModel.record_id == record_id)
                .order_by(ConfirmedFieldModel.confirmed_at, ConfirmedFieldModel.field_name)
            )
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            await self._fail("listing", e)

    async def create_confirmation(
        self,
        record_id: UUID,
        field_name: str,
        field_value: str,
        confirmed_by: Optional[str] = None,
    ) -> ConfirmedFieldModel:
        """Insert a confirmation.

        Raises:
            DuplicateConfirmationError: If the field is already confirmed for the record
        """
        try:
            instance = ConfirmedFieldModel(
                record_id=record_id,
                field_name=field_name,
                field_value=field_value,
                confirmed_by=confirmed_by,
            )
            self.session.add(instance)
            await self.session.flush()
            await self.session.refresh(instance)
            await self.session.commit()
            return instance
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateConfirmationError(record_id, field_name, original_error=e)
        except SQLAlchemyError as e:
            await self._fail("creating", e)

    async def delete_confirmation(self, record_id: UUID, field_name: str) -> bool:
        """Delete a confirmation.

        Returns:
            True if an entry was deleted, False if none existed
        """
        stmt = delete(ConfirmedFieldModel).where(
            ConfirmedFieldModel.record_id == record_id,
            ConfirmedFieldModel.field_name == field_name,
        )
        try:
            result = await self.session.execute(stmt)
            await self.session.commit()
            return result.rowcount > 0
        except SQLAlchemyError as e:
            await self._fail("deleting", e)
