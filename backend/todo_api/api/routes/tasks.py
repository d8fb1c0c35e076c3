"""Task Routes — CRUD endpoints sequencing the mutation pipeline for tasks.

Invariants:
    - Routes contain no business logic: parse_payload -> ensure_matching_ids ->
      integrity checks -> executor, in that order
    - Every failure is raised as a TodoApiError and rendered by the global handlers
    - The owner is returned as user_id; GET /{id}/user fetches it explicitly

Design Decisions:
    - Body accepted as raw JSON (Any) so validation is the pipeline's explicit first step
    - PUT/DELETE return 204 with no body; POST returns 201 with a Location header
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
from todo_api.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from todo_api.schemas.user import UserResponse
from todo_api.services.check_integrity import check_task_owner
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
router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("", response_model=list[TaskResponse])
async def list_tasks(db: AsyncSession = Depends(get_db)):
    """List all tasks."""
    result = await db.execute(select(Task).order_by(Task.id))
    return result.scalars().all()


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: int, db: AsyncSession = Depends(get_db)):
    return await load_or_404(db, Task, task_id)


@router.get("/{task_id}/user", response_model=UserResponse)
async def get_task_owner(task_id: int, db: AsyncSession = Depends(get_db)):
    """Fetch the user that owns a task."""
    task = await load_or_404(db, Task, task_id)
    return await load_or_404(db, User, task.user_id)


@router.post(
    "", response_model=TaskResponse, status_code=status.HTTP_201_CREATED,
)
async def create_task(
    request: Request,
    response: Response,
    payload: Any = Body(...),
    db: AsyncSession = Depends(get_db),
):
    """Create a task owned by an existing user."""
    body = parse_payload(TaskCreate, payload)
    raise_violation(await check_task_owner(db, UserId(body.user_id)))
    task = await create_entity(db, Task(**body.changes()))
    response.headers["Location"] = str(request.url_for("get_task", task_id=task.id))
    return task


@router.put("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_task(
    task_id: int,
    payload: Any = Body(...),
    db: AsyncSession = Depends(get_db),
):
    """Replace a task's client-settable fields."""
    body = parse_payload(TaskUpdate, payload)
    ensure_matching_ids(ResourceType.TASK.value, task_id, body.id)
    raise_violation(await check_task_owner(db, UserId(body.user_id)))
    await update_entity(
        db, Task, task_id, body.changes(), expected_version=body.version,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: int, db: AsyncSession = Depends(get_db)):
    await delete_entity(db, Task, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
