"""User Routes — CRUD endpoints sequencing the mutation pipeline for users.

Invariants:
    - Emails are normalised (stripped, lower-cased) before the uniqueness check and the write
    - Update checks email uniqueness against OTHER users only
    - Deleting a user deletes that user's tasks in the same commit (cascade policy)

Design Decisions:
    - Tasks of a user are listed explicitly (GET /{id}/tasks) instead of embedding them
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.core.domain_types import ResourceType, UserId
from todo_api.infrastructure.database import get_db
from todo_api.models.task import Task
from todo_api.models.user import User
from todo_api.schemas.task import TaskResponse
from todo_api.schemas.user import UserCreate, UserResponse, UserUpdate
from todo_api.services.check_integrity import check_email_available
from todo_api.services.mutation_executor import (
    create_entity,
    delete_entity,
    load_or_404,
    update_entity,
)
from todo_api.services.mutation_pipeline import (
    ensure_matching_ids,
    parse_payload,
    raise_violation,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
async def list_users(db: AsyncSession = Depends(get_db)):
    """List all users."""
    result = await db.execute(select(User).order_by(User.id))
    return result.scalars().all()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    return await load_or_404(db, User, user_id)


@router.get("/{user_id}/tasks", response_model=list[TaskResponse])
async def list_user_tasks(user_id: int, db: AsyncSession = Depends(get_db)):
    """List the tasks owned by a user (404 if the user does not exist)."""
    await load_or_404(db, User, user_id)
    result = await db.execute(
        select(Task).where(Task.user_id == user_id).order_by(Task.id),
    )
    return result.scalars().all()


@router.post(
    "", response_model=UserResponse, status_code=status.HTTP_201_CREATED,
)
async def create_user(
    request: Request,
    response: Response,
    payload: Any = Body(...),
    db: AsyncSession = Depends(get_db),
):
    """Create a user with a unique (case-insensitive) email."""
    body = parse_payload(UserCreate, payload)
    raise_violation(await check_email_available(db, body.email))
    user = await create_entity(db, User(**body.changes()))
    response.headers["Location"] = str(request.url_for("get_user", user_id=user.id))
    return user


@router.put("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_user(
    user_id: int,
    payload: Any = Body(...),
    db: AsyncSession = Depends(get_db),
):
    """Replace a user's client-settable fields."""
    body = parse_payload(UserUpdate, payload)
    ensure_matching_ids(ResourceType.USER.value, user_id, body.id)
    raise_violation(
        await check_email_available(
            db, body.email, exclude_user_id=UserId(user_id),
        ),
    )
    await update_entity(
        db, User, user_id, body.changes(), expected_version=body.version,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a user and every task they own."""
    await delete_entity(db, User, user_id, dependents=(Task.user_id,))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
