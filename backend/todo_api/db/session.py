"""Async Session Factory — provides async DB sessions for direct usage outside FastAPI.

Invariants:
    - Same session options as DatabaseSessionManager (expire_on_commit=False)
    - Meant for scripts and test fixtures

Design Decisions:
    - Separate from infrastructure/database.py: test fixtures need a raw factory bound
      to their own engine
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the given engine."""
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
