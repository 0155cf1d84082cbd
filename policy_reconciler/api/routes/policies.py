"""Policy reconciliation routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from policy_reconciler.api.routes.errors import to_http_exception
from policy_reconciler.core.exceptions import AppError
from policy_reconciler.dependencies import get_policy_reconciliation_service
from policy_reconciler.models.policy import ReconciliationOutcome
from policy_reconciler.schemas.reconciliation import ErrorResponse, ReconcileRequest
from policy_reconciler.services.policy_reconciliation_service import PolicyReconciliationService
from policy_reconciler.utils.logging import get_logger

LOGGER = get_logger(__name__)

router = APIRouter()


@router.post(
    "/reconcile",
    response_model=ReconciliationOutcome,
    responses={
        422: {"description": "Malformed candidate", "model": ErrorResponse},
        503: {"description": "Policy store unavailable", "model": ErrorResponse},
        500: {"description": "Internal server error", "model": ErrorResponse},
    },
    summary="Reconcile a raw extraction into a new policy record",
    description=(
        "Normalizes and validates a raw extraction. The record is created only "
        "when the result has no blocking errors; the full report is returned either way."
    ),
    operation_id="reconcile_new_policy",
)
async def reconcile_new_policy(
    request: ReconcileRequest,
    service: Annotated[PolicyReconciliationService, Depends(get_policy_reconciliation_service)],
) -> ReconciliationOutcome:
    """Reconcile a first extraction of a policy."""
    try:
        return await service.reconcile_record(request.raw, owner_id=request.owner_id)
    except AppError as e:
        raise to_http_exception(e, "Failed to reconcile policy")


@router.post(
    "/{record_id}/reconcile",
    response_model=ReconciliationOutcome,
    responses={
        404: {"description": "Record not found", "model": ErrorResponse},
        409: {"description": "Record kept changing concurrently", "model": ErrorResponse},
        422: {"description": "Malformed candidate", "model": ErrorResponse},
    },
    summary="Reconcile a raw extraction into an existing policy record",
    description=(
        "Merges a new extraction into the stored record. Confirmed fields are never "
        "overwritten and stored values are never dropped; divergences are returned "
        "as pending review items."
    ),
    operation_id="reconcile_existing_policy",
)
async def reconcile_existing_policy(
    record_id: UUID,
    request: ReconcileRequest,
    service: Annotated[PolicyReconciliationService, Depends(get_policy_reconciliation_service)],
) -> ReconciliationOutcome:
    """Reconcile a re-extraction of a stored policy."""
    try:
        outcome = await service.reconcile_record(request.raw, record_id=record_id)
    except AppError as e:
        raise to_http_exception(e, "Failed to reconcile policy")

    LOGGER.info(
        "Policy reconciled",
        extra={
            "record_id": str(record_id),
            "persisted": outcome.persisted,
            "revision": outcome.revision,
        },
    )
    return outcome
