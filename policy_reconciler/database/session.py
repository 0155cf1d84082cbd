"""Request-scoped database sessions."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from policy_reconciler.database.base import async_session_maker


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield one session per request.

    Repositories commit their own writes; anything left uncommitted when the
    request fails is rolled back before the session is closed.
    """
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
