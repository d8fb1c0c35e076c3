"""Mutation Executor — applies validated, integrity-checked changes with optimistic concurrency.

Invariants:
    - create sets created_at/updated_at to now (UTC); clients never supply them
    - update/delete load the row first: absent or out-of-range id -> ResourceNotFoundError (404)
    - The commit is the concurrency boundary: UPDATE/DELETE carry WHERE version = <loaded>
    - On a stale commit the session is rolled back, THEN existence is re-checked:
      gone -> ResourceNotFoundError, still present -> ConcurrencyConflictError (409)
    - A failed commit never leaves partial writes (rollback before any error is raised)
    - Store errors are caught once: IntegrityError classified, everything else DatabaseError
    - No lock is held across the read-modify-write window

Design Decisions:
    - version_id_col on the mappers instead of store-specific rowversion columns:
      the conflict signal is SQLAlchemy's StaleDataError on any dialect
    - Update split into load_or_404 / apply_changes / commit_update so the race window
      is an explicit seam (update_entity composes them)
    - Delete has no conflict state: a stale DELETE on a row that still exists is retried
      once against the fresh version (last delete wins)
"""

import logging
from datetime import datetime, timezone
from typing import Any, Sequence, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy.orm.exc import StaleDataError

from todo_api.core.domain_types import MAX_IDENTIFIER, ResourceType
from todo_api.core.errors import (
    ConcurrencyConflictError,
    DatabaseError,
    DuplicateKeyError,
    ReferenceNotFoundError,
    ResourceNotFoundError,
    TodoApiError,
)
from todo_api.db.base import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

_DELETE_ATTEMPTS = 2


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _resource(model: type[Base]) -> str:
    return model.__name__


# ─── Create ──────────────────────────────────────────────────────

async def create_entity(db: AsyncSession, entity: ModelT) -> ModelT:
    """Insert a new row with server-assigned timestamps and return it refreshed."""
    now = _utcnow()
    entity.created_at = now
    entity.updated_at = now
    db.add(entity)
    await _commit(db, entity, "insert")
    await db.refresh(entity)
    logger.info(
        f"{_resource(type(entity))} {entity.id} created",
        extra={"resource": _resource(type(entity)), "resource_id": entity.id},
    )
    return entity


# ─── Update ──────────────────────────────────────────────────────

async def load_or_404(
    db: AsyncSession, model: type[ModelT], entity_id: int,
) -> ModelT:
    """Load a row by primary key or raise ResourceNotFoundError.

    Ids outside 1..MAX_IDENTIFIER cannot name a stored row and are rejected
    without a query (the store column would overflow on them).
    """
    in_range = 1 <= entity_id <= MAX_IDENTIFIER
    entity = await _reload(db, model, entity_id) if in_range else None
    if entity is None:
        logger.warning(
            f"{_resource(model)} {entity_id} not found",
            extra={"resource": _resource(model), "resource_id": entity_id},
        )
        raise ResourceNotFoundError(_resource(model), entity_id)
    return entity


def apply_changes(entity: Base, changes: dict[str, Any]) -> None:
    """Write every client-settable field and refresh updated_at."""
    for column, value in changes.items():
        setattr(entity, column, value)
    entity.updated_at = _utcnow()


async def commit_update(
    db: AsyncSession, model: type[Base], entity_id: int,
) -> None:
    """Commit pending changes; classify a stale commit as NotFound or Conflict."""
    try:
        await _commit(db, model, "update")
    except StaleDataError:
        if not await _exists(db, model, entity_id):
            logger.warning(
                f"{_resource(model)} {entity_id} removed during update",
                extra={"resource": _resource(model), "resource_id": entity_id},
            )
            raise ResourceNotFoundError(_resource(model), entity_id) from None
        logger.warning(
            f"Concurrent modification of {_resource(model)} {entity_id}",
            extra={"resource": _resource(model), "resource_id": entity_id},
        )
        raise ConcurrencyConflictError(_resource(model), entity_id) from None
    logger.info(
        f"{_resource(model)} {entity_id} updated",
        extra={"resource": _resource(model), "resource_id": entity_id},
    )


async def update_entity(
    db: AsyncSession,
    model: type[ModelT],
    entity_id: int,
    changes: dict[str, Any],
    expected_version: int | None = None,
) -> ModelT:
    """Load, check the client's version token, apply, and commit."""
    entity = await load_or_404(db, model, entity_id)
    if expected_version is not None and expected_version != entity.version:
        logger.warning(
            f"Stale version {expected_version} for {_resource(model)} {entity_id} "
            f"(current {entity.version})",
            extra={"resource": _resource(model), "resource_id": entity_id},
        )
        raise ConcurrencyConflictError(_resource(model), entity_id)
    apply_changes(entity, changes)
    await commit_update(db, model, entity_id)
    return entity


# ─── Delete ──────────────────────────────────────────────────────

async def delete_entity(
    db: AsyncSession,
    model: type[Base],
    entity_id: int,
    dependents: Sequence[InstrumentedAttribute] = (),
) -> None:
    """Delete a row and every row whose FK column in `dependents` points at it."""
    entity = await load_or_404(db, model, entity_id)
    for attempt in range(1, _DELETE_ATTEMPTS + 1):
        for column in dependents:
            await db.execute(delete(column.class_).where(column == entity_id))
        await db.delete(entity)
        try:
            await _commit(db, model, "delete")
        except StaleDataError as e:
            entity = await _reload(db, model, entity_id)
            if entity is None:
                raise ResourceNotFoundError(_resource(model), entity_id) from None
            if attempt == _DELETE_ATTEMPTS:
                logger.error(
                    f"{_resource(model)} {entity_id} kept changing during delete",
                    extra={"resource": _resource(model), "resource_id": entity_id},
                )
                raise DatabaseError("row kept changing", "delete") from e
            continue
        logger.info(
            f"{_resource(model)} {entity_id} deleted",
            extra={"resource": _resource(model), "resource_id": entity_id},
        )
        return


# ─── Store access ────────────────────────────────────────────────

async def _reload(db: AsyncSession, model: type[ModelT], entity_id: int) -> ModelT | None:
    result = await db.execute(
        select(model)
        .where(model.id == entity_id)
        .execution_options(populate_existing=True),
    )
    return result.scalar_one_or_none()


async def _exists(db: AsyncSession, model: type[Base], entity_id: int) -> bool:
    result = await db.execute(select(model.id).where(model.id == entity_id))
    return result.scalar_one_or_none() is not None


async def _commit(db: AsyncSession, subject: Any, operation: str) -> None:
    """Commit once. Rolls back on failure; StaleDataError is re-raised for the caller."""
    model = subject if isinstance(subject, type) else type(subject)
    owner_id = None if isinstance(subject, type) else getattr(subject, "user_id", None)
    try:
        await db.commit()
    except StaleDataError:
        await db.rollback()
        raise
    except IntegrityError as e:
        await db.rollback()
        raise _classify_integrity_error(e, model, owner_id) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            f"DB {operation} on {_resource(model)} failed: {e}",
            exc_info=True,
            extra={"resource": _resource(model)},
        )
        raise DatabaseError("Database operation failed", operation) from e


def _classify_integrity_error(
    exc: IntegrityError, model: type[Base], owner_id: int | None,
) -> TodoApiError:
    """Map store constraint violations the integrity checks raced past."""
    detail = str(exc.orig).lower()
    if "unique" in detail or "duplicate" in detail:
        logger.warning(f"Unique constraint violated on {_resource(model)}: {detail}")
        if "email" in detail:
            return DuplicateKeyError(
                ResourceType.USER.value, "email",
                "A user with this email already exists.",
            )
        return DuplicateKeyError(_resource(model), "key")
    if "foreign key" in detail:
        logger.warning(f"Foreign key violated on {_resource(model)}: {detail}")
        return ReferenceNotFoundError(
            ResourceType.USER.value, owner_id if owner_id is not None else "unknown",
            field="user_id",
        )
    logger.error(f"Integrity error on {_resource(model)}: {detail}", exc_info=True)
    return DatabaseError("Integrity constraint violated", "commit")
