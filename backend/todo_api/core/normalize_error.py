"""Error Normalizer — total mapping from any failure to (HTTP status, structured body).

Invariants:
    - normalize_error is TOTAL: every exception yields a status and a {error, message, errors?} body
    - TodoApiError subclasses carry their own status and body (single source of truth)
    - Anything else is 500 with a generic message; exception text is never echoed
    - All functions are PURE: no IO, no logging (callers log)

Design Decisions:
    - Framework errors (request parsing, unknown routes) are folded into the same body
      shape here, so handlers stay one-liners (ADR: uniform error shape)
"""

from typing import Any, Iterable, Mapping

from todo_api.core.errors import (
    GENERIC_INTERNAL_MESSAGE,
    FieldValidationError,
    TodoApiError,
)

INTERNAL_ERROR_CODE = "INTERNAL_ERROR"

# Field name for errors about the payload as a whole
BODY_FIELD = "body"

_HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
}

# Request-location prefixes FastAPI puts in front of field names
_LOCATION_PREFIXES = {"body", "path", "query", "header"}


def normalize_error(exc: BaseException) -> tuple[int, dict]:
    """Map any failure to (status, body)."""
    if isinstance(exc, TodoApiError):
        return exc.http_status, exc.to_response()
    return 500, {"error": INTERNAL_ERROR_CODE, "message": GENERIC_INTERNAL_MESSAGE}


def field_errors_from_pydantic(
    errors: Iterable[Mapping[str, Any]],
    messages: Mapping[str, Mapping[str, str]] | None = None,
) -> dict[str, list[str]]:
    """Group pydantic/FastAPI error entries by field name, preserving order.

    `messages` maps field -> error type -> fixed message, with "*" as the
    per-field fallback. Fields without an entry keep pydantic's own message.
    Repeated messages for one field are reported once.
    """
    messages = messages or {}
    grouped: dict[str, list[str]] = {}
    for entry in errors:
        field = _field_name(entry.get("loc", ()))
        message = _message_for(messages.get(field, {}), entry)
        field_errors = grouped.setdefault(field, [])
        if message not in field_errors:
            field_errors.append(message)
    return grouped


def validation_error_from_pydantic(
    errors: Iterable[Mapping[str, Any]],
    messages: Mapping[str, Mapping[str, str]] | None = None,
) -> FieldValidationError:
    return FieldValidationError(field_errors_from_pydantic(errors, messages))


def http_error_body(status_code: int, detail: Any) -> dict:
    """Body for framework-level HTTP errors (unknown route, wrong method)."""
    code = _HTTP_ERROR_CODES.get(status_code, "HTTP_ERROR")
    if status_code >= 500:
        return {"error": INTERNAL_ERROR_CODE, "message": GENERIC_INTERNAL_MESSAGE}
    return {"error": code, "message": str(detail)}


def _field_name(loc: Iterable[Any]) -> str:
    parts = [str(part) for part in loc]
    if len(parts) > 1 and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]
    return ".".join(parts) or BODY_FIELD


def _message_for(field_messages: Mapping[str, str], entry: Mapping[str, Any]) -> str:
    default = str(entry.get("msg", "Invalid value"))
    return field_messages.get(entry.get("type"), field_messages.get("*", default))
