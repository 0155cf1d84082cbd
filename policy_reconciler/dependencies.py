"""Centralized dependency injection for the FastAPI application."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from policy_reconciler.database.session import get_async_session
from policy_reconciler.repositories.confirmed_field_repository import ConfirmedFieldRepository
from policy_reconciler.repositories.policy_record_repository import PolicyRecordRepository
from policy_reconciler.services.confirmation_service import ConfirmationService
from policy_reconciler.services.policy_reconciliation_service import PolicyReconciliationService


async def get_policy_record_repository(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> PolicyRecordRepository:
    """Get policy record repository instance.

    Args:
        db_session: Database session from dependency injection

    Returns:
        PolicyRecordRepository: Repository for policy records
    """
    return PolicyRecordRepository(db_session)


async def get_confirmed_field_repository(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> ConfirmedFieldRepository:
    """Get confirmed field repository instance."""
    return ConfirmedFieldRepository(db_session)


async def get_confirmation_service(
    confirmed_field_repository: Annotated[ConfirmedFieldRepository, Depends(get_confirmed_field_repository)],
    policy_record_repository: Annotated[PolicyRecordRepository, Depends(get_policy_record_repository)],
) -> ConfirmationService:
    """Get confirmation service instance.

    Both repositories share the request's session.
    """
    return ConfirmationService(confirmed_field_repository, policy_record_repository)


async def get_policy_reconciliation_service(
    policy_record_repository: Annotated[PolicyRecordRepository, Depends(get_policy_record_repository)],
    confirmation_service: Annotated[ConfirmationService, Depends(get_confirmation_service)],
) -> PolicyReconciliationService:
    """Get policy reconciliation service instance."""
    return PolicyReconciliationService(policy_record_repository, confirmation_service)
