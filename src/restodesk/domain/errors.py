"""Typed error kinds carried by a failed Result.

Errors are values, not exceptions: rule engines and validators return
them, orchestrators wrap them in ``Fail``. Each kind is a distinct model
with a ``kind`` discriminator so callers match on type, never on message
text.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Annotated, Literal

from pydantic import BaseModel, Field


class DomainError(BaseModel, ABC):
    """Base for every error kind. ``message`` is safe to show to users."""

    model_config = {"frozen": True}

    message: str

    @property
    @abstractmethod
    def code(self) -> str:
        """Stable machine-readable code for selective handling."""
        ...


class ValidationError(DomainError):
    """Input or identifier is missing or structurally invalid."""

    kind: Literal["validation"] = "validation"
    field: str | None = None

    @property
    def code(self) -> str:
        return "VALIDATION_FAILED"


class BusinessRuleError(DomainError):
    """Entity exists but its current state forbids the requested action.

    ``rule`` is a stable machine-readable code such as
    ``IMAGE_CANNOT_APPROVE``.
    """

    kind: Literal["business_rule"] = "business_rule"
    rule: str

    @property
    def code(self) -> str:
        return self.rule


class NotFoundError(DomainError):
    """A referenced entity does not exist."""

    kind: Literal["not_found"] = "not_found"
    entity: str
    id: str | None = None

    @property
    def code(self) -> str:
        return "NOT_FOUND"

    @classmethod
    def for_entity(cls, entity: str, entity_id: str | None = None) -> NotFoundError:
        """Build the standard ``"<Entity> with id <id> not found"`` error."""
        label = entity.replace("_", " ").capitalize()
        if entity_id:
            message = f"{label} with id {entity_id} not found"
        else:
            message = f"{label} not found"
        return cls(message=message, entity=entity, id=entity_id)


class UnauthorizedError(DomainError):
    """Caller lacks permission for the action."""

    kind: Literal["unauthorized"] = "unauthorized"
    message: str = "Unauthorized"
    action: str | None = None

    @property
    def code(self) -> str:
        return "UNAUTHORIZED"


class UnexpectedError(DomainError):
    """Any failure from the repository boundary that has no domain meaning."""

    kind: Literal["unexpected"] = "unexpected"
    exception_type: str | None = None

    @property
    def code(self) -> str:
        return "UNEXPECTED"

    @classmethod
    def from_exception(cls, exc: BaseException, fallback: str) -> UnexpectedError:
        """Wrap *exc*, keeping its message (or *fallback* when it has none)."""
        message = str(exc).strip() or fallback
        return cls(message=message, exception_type=type(exc).__name__)


AnyError = Annotated[
    ValidationError | BusinessRuleError | NotFoundError | UnauthorizedError | UnexpectedError,
    Field(discriminator="kind"),
]
