"""Root conftest — shared test configuration and database fixtures.

Invariants:
    - Every test gets a fresh SQLite database file (tmp_path) built from Base.metadata
    - Foreign keys are enforced on every test connection (cascade and owner FK are live)
    - get_db dependency overridden to use the test session factory
    - db_manager patched so the health check sees the test engine

Design Decisions:
    - File-backed SQLite instead of :memory:: separate sessions get separate
      connections, which the concurrency race tests need
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine

import todo_api.infrastructure.database as db_module
import todo_api.models  # noqa: F401
from todo_api.db.base import Base
from todo_api.db.session import create_session_factory
from todo_api.infrastructure.database import (
    DatabaseSessionManager,
    enable_sqlite_foreign_keys,
    get_db,
)
from todo_api.main import app
from todo_api.models.task import Task
from todo_api.models.user import User


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'todo.db'}", echo=False,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def seed_user(test_db):
    """Insert a user directly into the test DB."""
    user = User(name="Ana Silva", email="ana@example.com", occupation="Engineer")
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest.fixture
async def seed_task(test_db, seed_user):
    """Insert a task owned by seed_user."""
    task = Task(title="Write report", status="not_started", user_id=seed_user.id)
    test_db.add(task)
    await test_db.commit()
    await test_db.refresh(task)
    return task


@pytest.fixture
def count_rows(test_session_factory):
    """Count rows of a model in a fresh session (never served from an identity map)."""
    async def _count(model) -> int:
        async with test_session_factory() as session:
            result = await session.execute(select(func.count()).select_from(model))
            return result.scalar_one()
    return _count


@pytest.fixture
def fetch_row(test_session_factory):
    """Load a row in a fresh session, or None."""
    async def _fetch(model, row_id):
        async with test_session_factory() as session:
            return await session.get(model, row_id)
    return _fetch
