"""Health check endpoint."""

from fastapi import APIRouter

from policy_reconciler.config import settings
from policy_reconciler.database.base import db_client
from policy_reconciler.schemas.reconciliation import HealthCheckResponse

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    tags=["Health"],
    summary="Service and database health",
    description="Reports 'degraded' when the policy store cannot be reached",
    operation_id="get_service_health_status",
)
async def health_check() -> HealthCheckResponse:
    database = await db_client.health_check()
    healthy = database["status"] == "healthy"

    return HealthCheckResponse(
        status="healthy" if healthy else "degraded",
        database=database["status"],
        version=settings.app_version,
        service=settings.app_name,
    )
