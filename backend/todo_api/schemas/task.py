"""Task Schemas — DTOs for task create/update and the public task representation.

Invariants:
    - title: 3-100 chars after stripping; description: <= 500 chars, blank -> None
    - status is one of TaskStatus values
    - user_id/id/version are strict integers in 1..MAX_IDENTIFIER
    - TaskCreate/TaskUpdate carry only client-settable fields (id/version only on update)
    - changes() returns exactly the columns an update may write
"""

from datetime import datetime
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from todo_api.core.domain_types import TaskStatus
from todo_api.schemas.payload import (
    BLANK_ERROR,
    FieldMessages,
    Identifier,
    PayloadModel,
    identifier_messages,
    optional_text_messages,
    required_text_messages,
    strip_optional,
    strip_required,
)


class TaskCreate(PayloadModel):
    """Task creation payload."""

    title: str = Field(min_length=3, max_length=100)
    description: str | None = Field(None, max_length=500)
    status: TaskStatus
    user_id: Identifier
    start_date: datetime | None = None
    finish_date: datetime | None = None

    field_messages: ClassVar[FieldMessages] = {
        **PayloadModel.field_messages,
        "title": required_text_messages(
            "title", "The title must be between 3 and 100 characters.",
        ),
        "description": optional_text_messages(
            "description", "The description cannot exceed 500 characters.",
        ),
        "status": {
            "missing": "The status is required.",
            BLANK_ERROR: "The status is required.",
            "*": "Invalid status. Use: not_started, in_progress or done.",
        },
        "user_id": identifier_messages("user ID"),
        "start_date": {"*": "The start date must be an ISO-8601 date-time."},
        "finish_date": {"*": "The finish date must be an ISO-8601 date-time."},
    }

    @field_validator("title", "status", mode="before")
    @classmethod
    def require_text(cls, v):
        return strip_required(v)

    @field_validator("description", "start_date", "finish_date", mode="before")
    @classmethod
    def blank_is_absent(cls, v):
        return strip_optional(v)

    def changes(self) -> dict:
        """Column values written by create and update."""
        return {
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "user_id": self.user_id,
            "start_date": self.start_date,
            "finish_date": self.finish_date,
        }


class TaskUpdate(TaskCreate):
    """Task update payload: id must match the URL, version is the token last read."""
    id: Identifier
    version: Identifier | None = None

    field_messages: ClassVar[FieldMessages] = {
        **TaskCreate.field_messages,
        "id": identifier_messages("ID"),
        "version": identifier_messages("version"),
    }


class TaskResponse(BaseModel):
    """Public task representation (owner as foreign key only)."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None
    status: TaskStatus
    user_id: int
    start_date: datetime | None
    finish_date: datetime | None
    created_at: datetime
    updated_at: datetime
    version: int
