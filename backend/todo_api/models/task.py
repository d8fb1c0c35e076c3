"""Task ORM — persists a unit of work owned by a User.

Invariants:
    - Always belongs to a User (user_id FK); the owner existed when the row was written
    - status is one of TaskStatus values
    - version starts at 1 and increments on every UPDATE (optimistic concurrency token)
    - updated_at refreshed on every successful mutation

Design Decisions:
    - ON DELETE CASCADE on user_id: deleting a user removes their tasks (the executor
      also deletes them explicitly, so the policy holds on stores without FK enforcement)
    - One-directional FK, no relationship(): callers fetch the owner explicitly
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from todo_api.core.domain_types import TaskStatus
from todo_api.db.base import Base


class Task(Base):
    """Task entity, owned by exactly one user."""
    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaskStatus.NOT_STARTED.value,
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    start_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    finish_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "status IN ('not_started', 'in_progress', 'done')",
            name="tasks_status_check",
        ),
    )
    __mapper_args__ = {"version_id_col": version}
