"""Payload Base — shared pieces of the request DTOs that validate client payloads.

Invariants:
    - Every request DTO drops unknown and server-assigned keys (extra="ignore")
    - Required text that is missing, null or blank fails with the field's "required" message
    - Optional text is stripped; blank becomes None
    - Identifiers are strict integers in 1..MAX_IDENTIFIER (no "1", 1.5 or true)
    - field_messages maps field -> pydantic error type -> fixed message ("*" = any other type)

Design Decisions:
    - Constraints live on the DTO fields (Field(min_length=..., ge=...)) so pydantic
      reports every violation in one pass; the fixed messages are looked up afterwards
      by error type instead of being written into each validator
"""

from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, StrictInt
from pydantic_core import PydanticCustomError

from todo_api.core.domain_types import MAX_IDENTIFIER

FieldMessages = dict[str, dict[str, str]]

Identifier = Annotated[StrictInt, Field(ge=1, le=MAX_IDENTIFIER)]

BLANK_ERROR = "blank"


def strip_required(value: Any) -> Any:
    """Before-validator for required text: strip, reject null/blank."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise PydanticCustomError(BLANK_ERROR, "Field required")
    return value.strip() if isinstance(value, str) else value


def strip_optional(value: Any) -> Any:
    """Before-validator for optional values: strip text, blank means absent."""
    if isinstance(value, str):
        return value.strip() or None
    return value


def required_text_messages(label: str, length_message: str) -> dict[str, str]:
    return {
        "missing": f"The {label} is required.",
        BLANK_ERROR: f"The {label} is required.",
        "string_type": f"The {label} must be a string.",
        "*": length_message,
    }


def optional_text_messages(label: str, length_message: str) -> dict[str, str]:
    return {"string_type": f"The {label} must be a string.", "*": length_message}


def identifier_messages(label: str) -> dict[str, str]:
    return {
        "missing": f"The {label} is required.",
        "int_type": f"The {label} must be an integer.",
        "*": f"Invalid {label}.",
    }


class PayloadModel(BaseModel):
    """Base for request DTOs."""
    model_config = ConfigDict(extra="ignore")

    field_messages: ClassVar[FieldMessages] = {
        "body": {"model_type": "The request body must be a JSON object."},
    }
