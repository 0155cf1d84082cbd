"""Field confirmation registry.

Humans confirm field values to protect them from automated overwrite. The
registry is read by callers before reconciliation and handed to the engine
as plain data, so the engine itself never talks to the store.
"""

from typing import Any, Dict, List, Optional, Protocol
from uuid import UUID

from policy_reconciler.core.exceptions import InvalidConfirmationError, RecordNotFoundError
from policy_reconciler.database.models import ConfirmedFieldModel
from policy_reconciler.models.policy import ConfirmedField, LogicalField
from policy_reconciler.repositories.confirmed_field_repository import ConfirmedFieldRepository
from policy_reconciler.repositories.policy_record_repository import PolicyRecordRepository
from policy_reconciler.services.normalization.field_extractor import FieldExtractor
from policy_reconciler.services.reconciliation.field_rules import DEFAULT_RULES
from policy_reconciler.utils.logging import get_logger

LOGGER = get_logger(__name__)

RULES_BY_FIELD = {rule.field: rule for rule in DEFAULT_RULES}


class ConfirmationRegistry(Protocol):
    """Capability the reconciliation caller needs from the confirmation store."""

    async def list_confirmed(self, record_id: UUID) -> List[ConfirmedField]:
        ...

    async def confirmed_map(self, record_id: UUID) -> Dict[str, ConfirmedField]:
        ...

    async def confirm(
        self, record_id: UUID, field_name: str, value: Any, actor: Optional[str]
    ) -> ConfirmedField:
        ...

    async def unconfirm(self, record_id: UUID, field_name: str) -> bool:
        ...


class ConfirmationService:
    """ConfirmationRegistry backed by the policy_confirmed_fields table."""

    def __init__(
        self,
        confirmed_field_repository: ConfirmedFieldRepository,
        policy_record_repository: Optional[PolicyRecordRepository] = None,
    ):
        """Initialize service with repositories.

        Args:
            confirmed_field_repository: Store of confirmations
            policy_record_repository: Used to reject confirmations for unknown records
        """
        self.confirmed_field_repository = confirmed_field_repository
        self.policy_record_repository = policy_record_repository

    @staticmethod
    def _to_model(entry: ConfirmedFieldModel) -> ConfirmedField:
        return ConfirmedField(
            record_id=entry.record_id,
            field_name=entry.field_name,
            value=entry.field_value,
            confirmed_at=entry.confirmed_at,
            confirmed_by=entry.confirmed_by,
        )

    async def list_confirmed(self, record_id: UUID) -> List[ConfirmedField]:
        """Get every confirmation of a record."""
        entries = await self.confirmed_field_repository.list_for_record(record_id)
        return [self._to_model(entry) for entry in entries]

    async def confirmed_map(self, record_id: UUID) -> Dict[str, ConfirmedField]:
        """Confirmations keyed by field name, as the reconciliation engine takes them."""
        return {entry.field_name: entry for entry in await self.list_confirmed(record_id)}

    async def confirm(
        self,
        record_id: UUID,
        field_name: str,
        value: Any,
        actor: Optional[str] = None,
    ) -> ConfirmedField:
        """Lock a field value against automated overwrite.

        The value is stored as text in its canonical form, the same form the
        record column takes. A value that does not normalize is rejected.

        Args:
            record_id: Record the field belongs to
            field_name: Logical field name
            value: Value the human is confirming
            actor: Who confirmed it

        Returns:
            ConfirmedField: The new confirmation

        Raises:
            InvalidConfirmationError: Unknown field, empty value or a value that does not normalize
            RecordNotFoundError: The record does not exist
            DuplicateConfirmationError: The field is already confirmed (recoverable)
        """
        field = LogicalField.parse(field_name)
        if field is None:
            raise InvalidConfirmationError(f"Unknown field '{field_name}'")

        value = FieldExtractor.unwrap(value)
        if value is None:
            raise InvalidConfirmationError(f"Cannot confirm an empty value for '{field.value}'")

        canonical = RULES_BY_FIELD[field].normalize(value)
        if canonical is None:
            raise InvalidConfirmationError(f"Value {value!r} is not a valid {field.value}")

        if self.policy_record_repository is not None:
            if await self.policy_record_repository.get_by_id(record_id) is None:
                raise RecordNotFoundError(f"Policy record {record_id} not found")

        entry = await self.confirmed_field_repository.create_confirmation(
            record_id=record_id,
            field_name=field.value,
            field_value=str(canonical),
            confirmed_by=actor,
        )

        LOGGER.info(
            "Field confirmed",
            extra={"record_id": str(record_id), "field_name": field.value, "confirmed_by": actor},
        )
        return self._to_model(entry)

    async def unconfirm(self, record_id: UUID, field_name: str) -> bool:
        """Remove a confirmation. Removing a missing one is not an error.

        Returns:
            True if a confirmation was removed
        """
        field = LogicalField.parse(field_name)
        if field is None:
            raise InvalidConfirmationError(f"Unknown field '{field_name}'")

        removed = await self.confirmed_field_repository.delete_confirmation(record_id, field.value)

        LOGGER.info(
            "Field unconfirmed" if removed else "Field was not confirmed",
            extra={"record_id": str(record_id), "field_name": field.value},
        )
        return removed
