"""User ORM — persists people who own tasks.

Invariants:
    - id is an integer primary key assigned by the store
    - email is stored stripped and lower-cased; the unique index is therefore case-insensitive
    - version starts at 1 and increments on every UPDATE (optimistic concurrency token)
    - created_at / updated_at are set by the mutation executor, never by clients

Design Decisions:
    - No relationship() to Task: the FK lives on Task only, owners and task lists are
      fetched explicitly (no bidirectional object graph to serialize)
    - version_id_col: every UPDATE/DELETE is guarded by WHERE version = <loaded version>
"""

from datetime import date, datetime, timezone

from sqlalchemy import Date, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from todo_api.db.base import Base


class User(Base):
    """User entity, owner of tasks."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    occupation: Mapped[str | None] = mapped_column(String(100), nullable=True)
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

    __mapper_args__ = {"version_id_col": version}
