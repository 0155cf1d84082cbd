"""Field confirmation routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from policy_reconciler.api.routes.errors import to_http_exception
from policy_reconciler.core.exceptions import AppError
from policy_reconciler.dependencies import get_confirmation_service
from policy_reconciler.models.policy import ConfirmedField
from policy_reconciler.schemas.reconciliation import (
    ConfirmedFieldListResponse,
    ConfirmFieldRequest,
    ErrorResponse,
)
from policy_reconciler.services.confirmation_service import ConfirmationService

router = APIRouter()


@router.get(
    "/{record_id}/confirmed-fields",
    response_model=ConfirmedFieldListResponse,
    summary="List confirmed fields of a policy record",
    operation_id="list_confirmed_fields",
)
async def list_confirmed_fields(
    record_id: UUID,
    service: Annotated[ConfirmationService, Depends(get_confirmation_service)],
) -> ConfirmedFieldListResponse:
    try:
        fields = await service.list_confirmed(record_id)
    except AppError as e:
        raise to_http_exception(e, "Failed to list confirmed fields")
    return ConfirmedFieldListResponse(record_id=record_id, fields=fields)


@router.post(
    "/{record_id}/confirmed-fields",
    response_model=ConfirmedField,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Record not found", "model": ErrorResponse},
        409: {"description": "Field already confirmed", "model": ErrorResponse},
        422: {"description": "Unknown field or empty value", "model": ErrorResponse},
    },
    summary="Confirm a field value",
    description="Locks the value so later reconciliations can never overwrite it.",
    operation_id="confirm_field",
)
async def confirm_field(
    record_id: UUID,
    request: ConfirmFieldRequest,
    service: Annotated[ConfirmationService, Depends(get_confirmation_service)],
) -> ConfirmedField:
    """Confirm a field. Re-confirming requires removing the existing confirmation first."""
    try:
        return await service.confirm(
            record_id, request.field_name, request.value, actor=request.confirmed_by
        )
    except AppError as e:
        raise to_http_exception(e, "Failed to confirm field")


@router.delete(
    "/{record_id}/confirmed-fields/{field_name}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={422: {"description": "Unknown field", "model": ErrorResponse}},
    summary="Remove a field confirmation",
    description="Idempotent: removing a confirmation that does not exist succeeds.",
    operation_id="unconfirm_field",
)
async def unconfirm_field(
    record_id: UUID,
    field_name: str,
    service: Annotated[ConfirmationService, Depends(get_confirmation_service)],
) -> Response:
    try:
        await service.unconfirm(record_id, field_name)
    except AppError as e:
        raise to_http_exception(e, "Failed to remove confirmation")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
