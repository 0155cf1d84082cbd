from fastapi import APIRouter

from policy_reconciler.api.routes import confirmations, policies

api_router = APIRouter()

api_router.include_router(policies.router, prefix="/policies", tags=["Policies"])
api_router.include_router(confirmations.router, prefix="/policies", tags=["Confirmations"])
