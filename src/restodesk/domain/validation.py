"""Structural validation helpers shared by every input schema.

Validators never raise: they return either the parsed model or a
:class:`~restodesk.domain.errors.ValidationError` describing the first
problem found, and the orchestrator decides what to do with it.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, StringConstraints
from pydantic import ValidationError as PydanticValidationError

from restodesk.domain.errors import ValidationError

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
"""A string that still has content after surrounding whitespace is removed."""

UuidStr = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True,
        pattern=r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$",
    ),
]
"""Canonical textual UUID; kept as ``str`` so ids compare equal to stored ids."""


def first_error(exc: PydanticValidationError) -> ValidationError:
    """Convert the first pydantic error into a domain ``ValidationError``.

    The error location is joined with ``.`` to form the field path, so a
    bad second attachment surfaces as ``attachments.1``.
    """
    errors = exc.errors(include_url=False)
    if not errors:
        return ValidationError(message="Validation failed")
    err = errors[0]
    path = ".".join(str(part) for part in err.get("loc", ()))
    return ValidationError(message=str(err.get("msg", "Validation failed")), field=path or None)


def parse_input[M: BaseModel](model_cls: type[M], data: Any) -> M | ValidationError:
    """Validate *data* against *model_cls*.

    Accepts an instance of *model_cls* (returned as-is), a mapping, or any
    object pydantic can validate from attributes.
    """
    if isinstance(data, model_cls):
        return data
    try:
        if isinstance(data, BaseModel):
            return model_cls.model_validate(data.model_dump())
        return model_cls.model_validate(data)
    except PydanticValidationError as exc:
        return first_error(exc)


def require_id(value: str | None, field: str, label: str) -> ValidationError | None:
    """Return a ``ValidationError`` when identifier *value* is missing or blank."""
    if value is None or not str(value).strip():
        return ValidationError(message=f"{label} is required", field=field)
    return None


def require_text(value: str | None, field: str, message: str) -> ValidationError | None:
    """Return a ``ValidationError`` with *message* when *value* is blank."""
    if value is None or not value.strip():
        return ValidationError(message=message, field=field)
    return None
