"""Ok / Fail: the universal service contract.

INVARIANT: Every use-case returns ``Result[T] = Ok[T] | Fail``.
``Ok`` carries ``data`` and has no ``error``; ``Fail`` carries ``error``
and has no ``data``. Narrowing on ``result.ok`` therefore excludes the
other branch for type checkers as well as at runtime.
"""

from __future__ import annotations

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field

from restodesk.domain.errors import AnyError, DomainError

T = TypeVar("T")


class Ok(BaseModel, Generic[T]):
    """Successful outcome.

    Attributes:
        ok: Always ``True``; the discriminant.
        op: Name of the operation (e.g. ``"approve_image"``).
        data: Operation-specific payload.
        warnings: Non-fatal issues encountered during the operation.
        meta: Optional metadata (timing, counts, etc.).
    """

    model_config = {"frozen": True}

    ok: Literal[True] = True
    op: str = ""
    data: T
    warnings: list[str] = Field(default_factory=list)
    meta: dict[str, Any] | None = None


class Fail(BaseModel):
    """Failed outcome carrying exactly one typed error."""

    model_config = {"frozen": True}

    ok: Literal[False] = False
    op: str = ""
    error: AnyError
    warnings: list[str] = Field(default_factory=list)
    meta: dict[str, Any] | None = None


type Result[T] = Ok[T] | Fail


def ok(data: T, *, op: str = "", warnings: list[str] | None = None) -> Ok[T]:
    """Wrap *data* in a successful result."""
    return Ok(op=op, data=data, warnings=list(warnings or []))


def fail(error: DomainError, *, op: str = "", warnings: list[str] | None = None) -> Fail:
    """Wrap *error* in a failed result."""
    return Fail(op=op, error=error, warnings=list(warnings or []))
