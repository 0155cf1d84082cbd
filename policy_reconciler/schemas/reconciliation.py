"""Request and response models for the policy endpoints."""

from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from policy_reconciler.models.policy import ConfirmedField


class ReconcileRequest(BaseModel):
    """Raw extraction to reconcile."""

    raw: Dict[str, Any] = Field(..., description="Raw candidate payload as produced by extraction")
    owner_id: Optional[str] = Field(None, description="Owner stored on a newly created record")


class ConfirmFieldRequest(BaseModel):
    """Human confirmation of a field value."""

    field_name: str = Field(..., description="Logical field name", examples=["policyNumber"])
    value: Any = Field(..., description="Confirmed value")
    confirmed_by: Optional[str] = Field(None, description="Who confirmed the value")


class ConfirmedFieldListResponse(BaseModel):
    """Confirmations of one record."""

    record_id: UUID = Field(..., description="Policy record ID")
    fields: List[ConfirmedField] = Field(default_factory=list, description="Confirmed fields")


class ErrorResponse(BaseModel):
    """Standardized error response model."""

    error: str = Field(..., description="Error type/code")
    message: str = Field(..., description="Human-readable error message")
    detail: Optional[str] = Field(None, description="Additional error details")


class HealthCheckResponse(BaseModel):
    """Health check response model.

    Attributes:
        status: Service status
        database: Database connectivity status
        version: Application version
        service: Service name
    """

    status: str = Field(
        default="healthy",
        description="Service health status",
        examples=["healthy", "degraded"],
    )
    database: str = Field(default="healthy", description="Database connectivity status")
    version: str = Field(..., description="Application version")
    service: str = Field(..., description="Service name")
