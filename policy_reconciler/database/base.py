"""Engine, session factory and connectivity checks for the policy store."""

from typing import Any, Dict

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from policy_reconciler.config import settings
from policy_reconciler.utils.logging import get_logger

LOGGER = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by the policy tables."""


engine = create_async_engine(
    settings.database_url,
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
    echo=settings.database_echo,
)

async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class DatabaseClient:
    """Wraps the engine with a ping, schema bootstrap and shutdown.

    Attributes:
        engine: Async engine the client pings and disposes
        connected: Result of the most recent ping
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.connected = False

    async def ping(self) -> bool:
        """Run a trivial query and record whether it succeeded."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            LOGGER.error("Policy store unreachable", extra={"error": str(e)})
            self.connected = False
        else:
            self.connected = True
        return self.connected

    async def create_tables(self) -> None:
        """Create missing tables. Alembic migrations stay authoritative."""
        # Registers the mapped classes on Base.metadata
        from policy_reconciler.database import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        LOGGER.info("Policy tables ensured", extra={"tables": sorted(Base.metadata.tables)})

    async def health_check(self) -> Dict[str, Any]:
        reachable = await self.ping()
        return {"status": "healthy" if reachable else "unhealthy", "connected": reachable}

    async def close(self) -> None:
        await self.engine.dispose()
        self.connected = False


db_client = DatabaseClient(engine)


async def init_database(create_tables: bool = True) -> None:
    """Ping the store on startup and optionally bootstrap the schema.

    An unreachable store is logged, not raised, so the API still starts.
    """
    if await db_client.ping():
        LOGGER.info("Connected to policy store")
        if create_tables:
            await db_client.create_tables()


async def close_database() -> None:
    await db_client.close()
    LOGGER.info("Policy store connections released")
