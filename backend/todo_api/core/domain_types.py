"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId wraps the positive int the store assigns to a user (owner references)
    - Task status is a closed enumeration; no raw string matching elsewhere
    - Identifiers fit a signed 32-bit column (1..MAX_IDENTIFIER)

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", int)

MAX_IDENTIFIER = 2_147_483_647


# ─── Enums ───────────────────────────────────────────────────────

class TaskStatus(str, Enum):
    """Task progress states, mapped to the DB `status` column."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class ResourceType(str, Enum):
    """Resource names used in error messages and log extras."""
    USER = "User"
    TASK = "Task"
