"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Task references User by foreign key only (one-directional)

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all/autogenerate
"""

from todo_api.models.user import User  # noqa: F401
from todo_api.models.task import Task  # noqa: F401
