"""User Schemas — DTOs for user create/update and the public user representation.

Invariants:
    - name: 3-100 chars after stripping; occupation: <= 100 chars, blank -> None
    - email: valid syntax (EmailStr), <= 100 chars, stripped and lower-cased on the
      way in (normalise-on-write policy)
    - id/version are strict integers in 1..MAX_IDENTIFIER
"""

from datetime import date, datetime
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic_core import PydanticCustomError

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

MAX_EMAIL_LENGTH = 100


def normalize_email(email: str) -> str:
    """Canonical stored form of an email address."""
    return email.strip().lower()


class UserCreate(PayloadModel):
    """User creation payload."""

    name: str = Field(min_length=3, max_length=100)
    email: EmailStr
    birth_date: date | None = None
    occupation: str | None = Field(None, max_length=100)

    field_messages: ClassVar[FieldMessages] = {
        **PayloadModel.field_messages,
        "name": required_text_messages(
            "name", "The name must be between 3 and 100 characters.",
        ),
        "email": {
            "missing": "The email is required.",
            BLANK_ERROR: "The email is required.",
            "string_type": "The email must be a string.",
            "email_too_long": "The email cannot exceed 100 characters.",
            "*": "Invalid email.",
        },
        "birth_date": {"*": "The birth date must be an ISO-8601 date."},
        "occupation": optional_text_messages(
            "occupation", "The occupation cannot exceed 100 characters.",
        ),
    }

    @field_validator("name", "email", mode="before")
    @classmethod
    def require_text(cls, v):
        return strip_required(v)

    @field_validator("occupation", "birth_date", mode="before")
    @classmethod
    def blank_is_absent(cls, v):
        return strip_optional(v)

    @field_validator("email")
    @classmethod
    def canonical_email(cls, v: str) -> str:
        v = normalize_email(v)
        if len(v) > MAX_EMAIL_LENGTH:
            raise PydanticCustomError("email_too_long", "Email too long")
        return v

    def changes(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "birth_date": self.birth_date,
            "occupation": self.occupation,
        }


class UserUpdate(UserCreate):
    """User update payload: id must match the URL, version is the token last read."""
    id: Identifier
    version: Identifier | None = None

    field_messages: ClassVar[FieldMessages] = {
        **UserCreate.field_messages,
        "id": identifier_messages("ID"),
        "version": identifier_messages("version"),
    }


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    birth_date: date | None
    occupation: str | None
    created_at: datetime
    updated_at: datetime
    version: int
