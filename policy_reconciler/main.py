"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from policy_reconciler.api.main import api_router
from policy_reconciler.api.routes import health
from policy_reconciler.config import settings
from policy_reconciler.database.base import close_database, init_database
from policy_reconciler.utils.logging import get_logger

LOGGER = get_logger(__name__, level=settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Connect to the database on startup and release the pool on shutdown.

    The service starts even when the database is unreachable; /health then
    reports it as degraded.
    """
    LOGGER.info(
        "Starting application",
        extra={
            "app_name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
        },
    )
    await init_database(create_tables=settings.debug)

    yield

    LOGGER.info("Shutting down application")
    await close_database()


def create_app() -> FastAPI:
    """Build the FastAPI application with routers, middleware and handlers."""
    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Reconciles re-extracted insurance policy data with stored and "
            "human-confirmed values"
        ),
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health.router)
    application.include_router(api_router, prefix=settings.api_v1_prefix)
    return application


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "policy_reconciler.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
