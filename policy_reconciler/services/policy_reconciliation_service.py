"""Read-reconcile-write transaction around the reconciliation engine."""

from typing import Any, Dict, Mapping, Optional
from uuid import UUID

from policy_reconciler.config import ReconciliationConfig, settings
from policy_reconciler.core.exceptions import (
    InvalidCandidateError,
    RecordNotFoundError,
    RevisionConflictError,
)
from policy_reconciler.database.models import PolicyRecordModel
from policy_reconciler.models.policy import ReconciliationOutcome
from policy_reconciler.repositories.policy_record_repository import (
    COLUMN_BY_FIELD,
    PolicyRecordRepository,
)
from policy_reconciler.services.base_service import BaseService
from policy_reconciler.services.confirmation_service import ConfirmationRegistry
from policy_reconciler.services.reconciliation.reconciliation_engine import ReconciliationEngine


class PolicyReconciliationService(BaseService):
    """Reconcile raw extractions into stored policy records.

    One attempt reads the record and its confirmations, runs the engine and
    writes the merged record with a compare-and-swap on the revision it read.
    A lost race is retried from the read.
    """

    operation = "Policy reconciliation"

    def __init__(
        self,
        policy_record_repository: PolicyRecordRepository,
        confirmation_registry: ConfirmationRegistry,
        engine: Optional[ReconciliationEngine] = None,
        max_attempts: Optional[int] = None,
    ):
        """Initialize service.

        Args:
            policy_record_repository: Store of policy records
            confirmation_registry: Source of confirmed fields
            engine: Reconciliation engine (configured from settings by default)
            max_attempts: Attempts before a revision conflict propagates
        """
        super().__init__(policy_record_repository)
        self.policy_record_repository = policy_record_repository
        self.confirmation_registry = confirmation_registry
        self.engine = engine or ReconciliationEngine(config=ReconciliationConfig.from_settings(settings))
        self.max_attempts = max_attempts or settings.reconcile_max_attempts

    async def reconcile_record(
        self,
        raw: Mapping[str, Any],
        record_id: Optional[UUID] = None,
        owner_id: Optional[str] = None,
    ) -> ReconciliationOutcome:
        """Reconcile a raw candidate into a record, creating it when record_id is None.

        Args:
            raw: Raw candidate payload
            record_id: Existing record to reconcile into
            owner_id: Owner stored on a newly created record

        Returns:
            ReconciliationOutcome: Result plus what was written

        Raises:
            InvalidCandidateError: If raw is not a mapping
            RecordNotFoundError: If record_id does not exist
            RevisionConflictError: If every attempt lost a concurrent update
        """
        return await self.execute(raw, record_id=record_id, owner_id=owner_id)

    def validate(self, raw: Any, record_id: Optional[UUID] = None, owner_id: Optional[str] = None) -> None:
        if not isinstance(raw, Mapping):
            raise InvalidCandidateError(
                f"Raw candidate must be a mapping, got {type(raw).__name__}"
            )

    async def run(
        self,
        raw: Mapping[str, Any],
        record_id: Optional[UUID] = None,
        owner_id: Optional[str] = None,
    ) -> ReconciliationOutcome:
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await self._attempt(raw, record_id, owner_id)
            except RevisionConflictError:
                if attempt >= self.max_attempts:
                    self.logger.error(
                        "Revision conflict persisted, giving up",
                        extra={"record_id": str(record_id), "attempts": attempt},
                    )
                    raise
                self.logger.warning(
                    "Revision conflict, re-reading record",
                    extra={"record_id": str(record_id), "attempt": attempt},
                )

    async def _attempt(
        self,
        raw: Mapping[str, Any],
        record_id: Optional[UUID],
        owner_id: Optional[str],
    ) -> ReconciliationOutcome:
        record = None
        confirmed = {}
        if record_id is not None:
            record = await self.policy_record_repository.get_by_id(record_id)
            if record is None:
                raise RecordNotFoundError(f"Policy record {record_id} not found")
            confirmed = await self.confirmation_registry.confirmed_map(record_id)

        existing = PolicyRecordRepository.to_fields(record) if record is not None else None
        result = self.engine.reconcile(raw, existing=existing, confirmed_fields=confirmed)

        log_extra = {
            "record_id": str(record_id) if record_id else None,
            "is_valid": result.is_valid,
            "extraction_quality": result.metadata.extraction_quality,
            "pending_review": len(result.pending_review),
        }

        if not result.is_valid:
            self.logger.info("Reconciliation produced errors, nothing persisted", extra=log_extra)
            return ReconciliationOutcome(
                record_id=record_id,
                revision=record.revision if record is not None else None,
                result=result,
            )

        quality = result.metadata.extraction_quality
        reliability = result.metadata.source_reliability.value

        if record is None:
            created = await self.policy_record_repository.create_record(
                result.normalized_data,
                extraction_quality=quality,
                source_reliability=reliability,
                owner_id=owner_id,
            )
            self.logger.info("Reconciled into new record", extra={**log_extra, "record_id": str(created.id)})
            return ReconciliationOutcome(
                record_id=created.id,
                revision=created.revision,
                persisted=True,
                created=True,
                result=result,
            )

        if self._unchanged(record, result.normalized_data):
            self.logger.info("Reconciliation changed nothing, no write", extra=log_extra)
            return ReconciliationOutcome(record_id=record_id, revision=record.revision, result=result)

        revision = await self.policy_record_repository.update_if_revision(
            record_id,
            record.revision,
            result.normalized_data,
            extraction_quality=quality,
            source_reliability=reliability,
        )
        self.logger.info("Reconciled into existing record", extra={**log_extra, "revision": revision})
        return ReconciliationOutcome(record_id=record_id, revision=revision, persisted=True, result=result)

    @staticmethod
    def _unchanged(record: PolicyRecordModel, merged: Dict[str, Any]) -> bool:
        columns = PolicyRecordRepository.to_columns(merged)
        return all(getattr(record, column) == columns[column] for column in COLUMN_BY_FIELD.values())
