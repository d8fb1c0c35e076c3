"""Mutation Executor — tests for create/update/delete against a real SQLite store.

Tests cover:
    - create assigns timestamps and version 1
    - update applies every field, bumps version and updated_at
    - stale client version → ConcurrencyConflictError, row untouched
    - update/delete of a missing row → ResourceNotFoundError (repeatable)
    - deleting a user deletes their tasks (cascade policy), in the executor and in the store
    - ids outside the identifier range are NotFound without a query
    - store errors are classified: unique → DuplicateKeyError, others → DatabaseError
"""

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

import todo_api.services.mutation_executor as executor
from todo_api.core.errors import (
    ConcurrencyConflictError,
    DatabaseError,
    DuplicateKeyError,
    ReferenceNotFoundError,
    ResourceNotFoundError,
)
from todo_api.models.task import Task
from todo_api.models.user import User
from todo_api.services.mutation_executor import (
    _classify_integrity_error,
    create_entity,
    delete_entity,
    load_or_404,
    update_entity,
)


# ─── create ──────────────────────────────────────────────────────

async def test_create_assigns_server_fields(test_db):
    user = await create_entity(test_db, User(name="Ana Silva", email="ana@example.com"))
    assert user.id >= 1
    assert user.version == 1
    assert user.created_at is not None
    assert user.created_at == user.updated_at


async def test_create_duplicate_email_classified(test_db, seed_user, count_rows):
    with pytest.raises(DuplicateKeyError):
        await create_entity(test_db, User(name="Ana Clone", email="ana@example.com"))
    assert await count_rows(User) == 1


async def test_create_store_failure_becomes_database_error(test_db, monkeypatch, count_rows):
    async def failing_commit(self):
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(AsyncSession, "commit", failing_commit)
    with pytest.raises(DatabaseError) as exc_info:
        await create_entity(test_db, User(name="Ana Silva", email="ana@example.com"))
    assert exc_info.value.http_status == 500
    monkeypatch.undo()
    assert await count_rows(User) == 0


# ─── update ──────────────────────────────────────────────────────

async def test_update_applies_fields_and_bumps_version(test_db, seed_task, fetch_row):
    before = seed_task.updated_at
    await update_entity(
        test_db, Task, seed_task.id,
        {"title": "Rewritten", "status": "done", "description": "all done"},
    )
    stored = await fetch_row(Task, seed_task.id)
    assert stored.title == "Rewritten"
    assert stored.status == "done"
    assert stored.version == 2
    assert stored.updated_at >= before


async def test_update_with_current_version_succeeds(test_db, seed_task, fetch_row):
    await update_entity(
        test_db, Task, seed_task.id, {"title": "Fresh"}, expected_version=1,
    )
    assert (await fetch_row(Task, seed_task.id)).version == 2


async def test_update_with_stale_version_conflicts(test_db, seed_task, fetch_row):
    with pytest.raises(ConcurrencyConflictError):
        await update_entity(
            test_db, Task, seed_task.id, {"title": "Too late"}, expected_version=7,
        )
    stored = await fetch_row(Task, seed_task.id)
    assert stored.title == "Write report"
    assert stored.version == 1


async def test_update_missing_row_not_found(test_db):
    with pytest.raises(ResourceNotFoundError) as exc_info:
        await update_entity(test_db, Task, 999, {"title": "Missing"})
    assert exc_info.value.http_status == 404


# ─── delete ──────────────────────────────────────────────────────

async def test_delete_removes_row(test_db, seed_task, fetch_row):
    await delete_entity(test_db, Task, seed_task.id)
    assert await fetch_row(Task, seed_task.id) is None


async def test_delete_missing_row_is_repeatably_not_found(test_db):
    for _ in range(2):
        with pytest.raises(ResourceNotFoundError):
            await delete_entity(test_db, User, 999)


async def test_delete_user_cascades_to_tasks(test_db, seed_task, seed_user, count_rows):
    other = User(name="Bruno Costa", email="bruno@example.com")
    test_db.add(other)
    await test_db.commit()
    test_db.add(Task(title="Keep me", status="done", user_id=other.id))
    await test_db.commit()

    await delete_entity(test_db, User, seed_user.id, dependents=(Task.user_id,))

    assert await count_rows(User) == 1
    assert await count_rows(Task) == 1


async def test_store_cascades_owner_delete_outside_the_executor(
    test_db, seed_task, seed_user, count_rows,
):
    await test_db.execute(text("DELETE FROM users WHERE id = :id"), {"id": seed_user.id})
    await test_db.commit()
    assert await count_rows(Task) == 0


async def test_task_insert_with_missing_owner_is_rejected_by_store(test_db, count_rows):
    with pytest.raises(ReferenceNotFoundError) as exc_info:
        await create_entity(test_db, Task(title="Orphan", status="done", user_id=4242))
    assert "4242" in exc_info.value.message
    assert await count_rows(Task) == 0


async def test_load_or_404(test_db, seed_user):
    assert (await load_or_404(test_db, User, seed_user.id)).email == "ana@example.com"
    with pytest.raises(ResourceNotFoundError):
        await load_or_404(test_db, User, seed_user.id + 1)


@pytest.mark.parametrize("entity_id", [0, -1, 2**31, 10**20])
async def test_load_or_404_rejects_out_of_range_ids_without_query(
    test_db, monkeypatch, entity_id,
):
    async def no_query(*args, **kwargs):
        raise AssertionError("store queried for an impossible id")

    monkeypatch.setattr(executor, "_reload", no_query)
    with pytest.raises(ResourceNotFoundError):
        await load_or_404(test_db, Task, entity_id)
    with pytest.raises(ResourceNotFoundError):
        await delete_entity(test_db, Task, entity_id)


# ─── integrity error classification ──────────────────────────────

def _integrity_error(detail: str) -> IntegrityError:
    return IntegrityError("INSERT", {}, Exception(detail))


def test_classify_foreign_key_violation_names_owner():
    err = _classify_integrity_error(
        _integrity_error('insert or update on table "tasks" violates foreign key constraint'),
        Task, 7,
    )
    assert isinstance(err, ReferenceNotFoundError)
    assert err.http_status == 400
    assert "7" in err.message


def test_classify_unique_violation_without_email():
    err = _classify_integrity_error(
        _integrity_error("UNIQUE constraint failed: tasks.id"), Task, None,
    )
    assert isinstance(err, DuplicateKeyError)


def test_classify_unknown_violation_is_database_error():
    err = _classify_integrity_error(
        _integrity_error("CHECK constraint failed: tasks_status_check"), Task, None,
    )
    assert isinstance(err, DatabaseError)
    assert err.to_response()["message"] == "An unexpected error occurred"
