"""Error Hierarchy — typed, categorized exceptions for every mutation-pipeline failure.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity), http_status
    - to_response() produces the REST envelope {error, message, errors?}
    - 400-level errors carry an actionable message; 500-level errors never carry internal detail
    - The taxonomy is closed: each failure kind maps to exactly one status and one code

Design Decisions:
    - Single hierarchy with TodoApiError base: one global handler catches all (ADR: uniform error shape)
    - Check stages RETURN these instances as typed results; the pipeline decides when to raise
"""

from enum import Enum


class ErrorSeverity(str, Enum):
    """Error severity for observability."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    REFERENTIAL_INTEGRITY = "referential_integrity"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


GENERIC_INTERNAL_MESSAGE = "An unexpected error occurred"


class TodoApiError(Exception):
    """Base exception for all Todo API errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to the standardized REST error body."""
        return {"error": self.code, "message": self.message}


# ─── Client Errors (400-level) ──────────────────────────────────

class FieldValidationError(TodoApiError):
    """One or more payload fields violate their declared rules."""
    def __init__(self, errors: dict[str, list[str]]):
        super().__init__(
            "One or more fields are invalid",
            "VALIDATION_FAILED", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, 400,
        )
        self.errors = errors

    def to_response(self) -> dict:
        body = super().to_response()
        body["errors"] = {field: list(msgs) for field, msgs in self.errors.items()}
        return body


class ReferenceNotFoundError(TodoApiError):
    """A foreign key in the payload names a row that does not exist."""
    def __init__(self, resource_type: str, resource_id: object, field: str | None = None):
        super().__init__(
            f"The referenced {resource_type} with ID {resource_id} does not exist.",
            "REFERENCE_NOT_FOUND", ErrorCategory.REFERENTIAL_INTEGRITY,
            ErrorSeverity.WARNING, 400,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id
        self.field = field


class DuplicateKeyError(TodoApiError):
    """A uniqueness constraint would be violated."""
    def __init__(self, resource_type: str, field: str, message: str | None = None):
        super().__init__(
            message or f"A {resource_type} with this {field} already exists.",
            "DUPLICATE_KEY", ErrorCategory.REFERENTIAL_INTEGRITY,
            ErrorSeverity.WARNING, 400,
        )
        self.resource_type = resource_type
        self.field = field


class IdentifierMismatchError(TodoApiError):
    """The id in the URL differs from the id in the payload."""
    def __init__(self, resource_type: str, path_id: object, payload_id: object):
        super().__init__(
            f"The URL ID ({path_id}) does not match the {resource_type} ID "
            f"in the payload ({payload_id}).",
            "IDENTIFIER_MISMATCH", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, 400,
        )
        self.path_id = path_id
        self.payload_id = payload_id


class ResourceNotFoundError(TodoApiError):
    """Requested resource does not exist."""
    def __init__(self, resource_type: str, resource_id: object):
        super().__init__(
            f"The {resource_type} with ID {resource_id} does not exist.",
            "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConcurrencyConflictError(TodoApiError):
    """The row was modified by another request between load and commit."""
    def __init__(self, resource_type: str, resource_id: object):
        super().__init__(
            f"The {resource_type} with ID {resource_id} was modified by another "
            f"request. Please reload it and try again.",
            "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, 409,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ─── Server Errors (500-level) ──────────────────────────────────

class DatabaseError(TodoApiError):
    """Database operation failed. The message is internal and only logged."""
    def __init__(self, message: str, operation: str):
        super().__init__(
            f"Database {operation} failed: {message}",
            "INTERNAL_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, 500,
        )
        self.operation = operation

    def to_response(self) -> dict:
        return {"error": self.code, "message": GENERIC_INTERNAL_MESSAGE}
