"""Mutation Pipeline Steps — the explicit, ordered checks every mutating endpoint runs.

Invariants:
    - parse_payload validates the raw payload against the DTO's field constraints FIRST
      and raises one FieldValidationError listing every invalid field
    - ensure_matching_ids never touches the store (runs before any lookup)
    - raise_violation turns a typed check result into the failure it describes
    - Order per request: parse_payload -> ensure_matching_ids -> integrity checks -> executor

Design Decisions:
    - Explicit calls instead of framework-level automatic body validation: the route
      decides when validation runs and receives a typed result
"""

import logging
from typing import Any, TypeVar

from pydantic import ValidationError

from todo_api.core.errors import IdentifierMismatchError, TodoApiError
from todo_api.core.normalize_error import validation_error_from_pydantic
from todo_api.schemas.payload import PayloadModel

logger = logging.getLogger(__name__)

DtoT = TypeVar("DtoT", bound=PayloadModel)


def parse_payload(schema: type[DtoT], payload: Any) -> DtoT:
    """Build the DTO from a raw payload, or raise a per-field validation report."""
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        failure = validation_error_from_pydantic(e.errors(), schema.field_messages)
        logger.warning(
            f"{schema.__name__} rejected: {sorted(failure.errors)}",
            extra={"error_code": failure.code},
        )
        raise failure from e


def ensure_matching_ids(resource_type: str, path_id: int, payload_id: int) -> None:
    if path_id != payload_id:
        logger.warning(
            f"{resource_type} id mismatch: url={path_id} payload={payload_id}",
            extra={"resource": resource_type, "resource_id": path_id},
        )
        raise IdentifierMismatchError(resource_type, path_id, payload_id)


def raise_violation(violation: TodoApiError | None) -> None:
    if violation is not None:
        raise violation
