"""Referential Integrity Checks — cross-entity constraints the field constraints cannot see.

Invariants:
    - Read-only: every check is a SELECT, never a write
    - Return a violation (ReferenceNotFoundError | DuplicateKeyError) or None; never raise
    - Email comparison uses the normalised (stripped, lower-cased) form on both sides

Design Decisions:
    - Run before the mutation executor so a failing check never touches the target row
      and the caller learns WHICH referenced entity was missing
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.core.domain_types import ResourceType, UserId
from todo_api.core.errors import DuplicateKeyError, ReferenceNotFoundError
from todo_api.models.user import User
from todo_api.schemas.user import normalize_email

logger = logging.getLogger(__name__)


async def check_task_owner(
    db: AsyncSession, user_id: UserId,
) -> ReferenceNotFoundError | None:
    """Task create/update: the owning user must exist."""
    result = await db.execute(select(User.id).where(User.id == user_id))
    if result.scalar_one_or_none() is None:
        logger.warning(
            f"Task references missing user {user_id}",
            extra={"resource": ResourceType.USER.value, "resource_id": user_id},
        )
        return ReferenceNotFoundError(ResourceType.USER.value, user_id, field="user_id")
    return None


async def check_email_available(
    db: AsyncSession, email: str, exclude_user_id: UserId | None = None,
) -> DuplicateKeyError | None:
    """User create/update: no OTHER user may hold the email (case-insensitive)."""
    query = select(User.id).where(func.lower(User.email) == normalize_email(email))
    if exclude_user_id is not None:
        query = query.where(User.id != exclude_user_id)
    result = await db.execute(query.limit(1))
    if result.scalar_one_or_none() is not None:
        logger.warning(
            "Email already in use",
            extra={"resource": ResourceType.USER.value, "resource_id": exclude_user_id},
        )
        return DuplicateKeyError(
            ResourceType.USER.value, "email",
            "A user with this email already exists.",
        )
    return None
