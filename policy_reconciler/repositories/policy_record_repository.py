"""Repository for policy records with revision-checked updates."""

from datetime import date
from typing import Any, Dict, Mapping, Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from policy_reconciler.core.exceptions import InvalidCandidateError, RevisionConflictError
from policy_reconciler.database.models import PolicyRecordModel
from policy_reconciler.models.policy import LogicalField
from policy_reconciler.repositories.base_repository import BaseRepository
from policy_reconciler.services.reconciliation.field_rules import DEFAULT_RULES

COLUMN_BY_FIELD = {
    LogicalField.INSURER: "insurer",
    LogicalField.POLICY_NUMBER: "policy_number",
    LogicalField.INSURED_NAME: "insured_name",
    LogicalField.PREMIUM: "premium",
    LogicalField.MONTHLY_AMOUNT: "monthly_amount",
    LogicalField.START_DATE: "start_date",
    LogicalField.END_DATE: "end_date",
    LogicalField.DEDUCTIBLE: "deductible",
}

DATE_FIELDS = frozenset({LogicalField.START_DATE, LogicalField.END_DATE})


class PolicyRecordRepository(BaseRepository[PolicyRecordModel]):
    """Repository for policy records.

    Records are only ever written with a reconciled field set. Updates are
    compare-and-swap on the revision the caller read, so concurrent
    reconciliations of one record cannot silently overwrite each other.
    """

    def __init__(self, session: AsyncSession):
        """Initialize policy record repository.

        Args:
            session: SQLAlchemy async session
        """
        super().__init__(session, PolicyRecordModel)

    @staticmethod
    def to_fields(record: PolicyRecordModel) -> Dict[str, Any]:
        """Logical fields of a stored record, as reconciliation expects them.

        Dates are rendered as ISO strings; empty columns are omitted.
        """
        fields = {}
        for field, column in COLUMN_BY_FIELD.items():
            value = getattr(record, column)
            if value is None:
                continue
            fields[field.value] = value.isoformat() if isinstance(value, date) else value
        return fields

    @staticmethod
    def to_columns(fields: Mapping[str, Any]) -> Dict[str, Any]:
        """Typed column values for a reconciled field set.

        Raises:
            InvalidCandidateError: If a present value cannot be stored in its column
        """
        columns = {}
        for rule in DEFAULT_RULES:
            value = fields.get(rule.field.value)
            column = COLUMN_BY_FIELD[rule.field]
            if value is None:
                columns[column] = None
                continue

            canonical = rule.normalize(value)
            if canonical is None:
                raise InvalidCandidateError(
                    f"Value {value!r} of {rule.field.value} cannot be stored"
                )
            columns[column] = date.fromisoformat(canonical) if rule.field in DATE_FIELDS else canonical
        return columns

    async def create_record(
        self,
        fields: Mapping[str, Any],
        extraction_quality: Optional[int] = None,
        source_reliability: Optional[str] = None,
        owner_id: Optional[str] = None,
    ) -> PolicyRecordModel:
        """Create a record at revision 1 from a reconciled field set.

        Args:
            fields: Merged record keyed by logical field name
            extraction_quality: Quality score of the reconciliation that produced it
            source_reliability: Reliability tier of that reconciliation
            owner_id: Tenant/user owning the record

        Returns:
            PolicyRecordModel: The created record
        """
        record = await self.create(
            owner_id=owner_id,
            revision=1,
            extraction_quality=extraction_quality,
            source_reliability=source_reliability,
            **self.to_columns(fields),
        )

        self.logger.info(
            "Created policy record",
            extra={"record_id": str(record.id), "revision": record.revision},
        )
        return record

    async def update_if_revision(
        self,
        record_id: UUID,
        expected_revision: int,
        fields: Mapping[str, Any],
        extraction_quality: Optional[int] = None,
        source_reliability: Optional[str] = None,
    ) -> int:
        """Write a reconciled field set if the record is still at the read revision.

        Args:
            record_id: Record to update
            expected_revision: Revision the caller reconciled against
            fields: Merged record keyed by logical field name
            extraction_quality: Quality score of the reconciliation
            source_reliability: Reliability tier of the reconciliation

        Returns:
            int: The new revision

        Raises:
            RevisionConflictError: If the record changed (or vanished) since it was read
        """
        new_revision = expected_revision + 1
        stmt = (
            update(PolicyRecordModel)
            .where(PolicyRecordModel.id == record_id)
            .where(PolicyRecordModel.revision == expected_revision)
            .values(
                revision=new_revision,
                extraction_quality=extraction_quality,
                source_reliability=source_reliability,
                **self.to_columns(fields),
            )
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.session.execute(stmt)
            if result.rowcount == 0:
                await self.session.rollback()
                raise RevisionConflictError(
                    f"Policy record {record_id} is no longer at revision {expected_revision}",
                    expected_revision=expected_revision,
                )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._fail("updating", e)

        self.logger.info(
            "Updated policy record",
            extra={"record_id": str(record_id), "revision": new_revision},
        )
        return new_revision
