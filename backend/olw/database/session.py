from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get an async database session generator.

    The session factory is built by ``create_app`` and kept on
    ``app.state``; nothing here reaches for a global engine.

    Yields
    ------
        AsyncSession: Database session without automatic commit.
        The service layer should handle commits/rollbacks.
    """
    session_maker: async_sessionmaker[AsyncSession] = request.app.state.session_maker
    async with session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


# Create a reusable dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
