"""BaseService and the ``use_case`` decorator.

Every service receives a :class:`Backend` at construction time and talks
to storage only through ``backend.repos``. Each public operation is an
``async`` method decorated with :func:`use_case`, which is the single
place where exceptions become errors:

- the body returns either its payload or a ``DomainError``;
- the decorator wraps them in ``Ok`` / ``Fail``;
- ``StaleStateError`` from a compare-and-swap becomes a
  ``BusinessRuleError`` coded ``<ENTITY>_CONCURRENT_UPDATE``;
- any other ``Exception`` becomes an ``UnexpectedError`` that keeps the
  original message.
"""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, Concatenate, ParamSpec, TypeVar

import structlog

from restodesk.domain.errors import BusinessRuleError, DomainError, UnexpectedError
from restodesk.infrastructure.repositories.contracts import StaleStateError
from restodesk.services.result import Fail, Ok, fail, ok

if TYPE_CHECKING:
    from restodesk.infrastructure.backend import Backend, Repositories

logger = structlog.get_logger(__name__)

# Warnings collected for the use-case currently running in this context.
_pending_warnings: ContextVar[list[str] | None] = ContextVar("_pending_warnings", default=None)

_RULE_PREFIX = {"image_job": "IMAGE", "checklist_item": "CHECKLIST"}


def concurrent_update_error(exc: StaleStateError) -> BusinessRuleError:
    prefix = _RULE_PREFIX.get(exc.entity, exc.entity.upper())
    label = exc.entity.replace("_", " ").capitalize()
    return BusinessRuleError(
        message=f"{label} was modified by another operation; reload and try again",
        rule=f"{prefix}_CONCURRENT_UPDATE",
    )


_S = TypeVar("_S", bound="BaseService")
_P = ParamSpec("_P")
_T = TypeVar("_T")


def use_case(
    op: str,
) -> Callable[
    [Callable[Concatenate[_S, _P], Awaitable[_T | DomainError]]],
    Callable[Concatenate[_S, _P], Awaitable[Ok[_T] | Fail]],
]:
    """Wrap an async service method in the Result envelope for *op*."""

    def decorator(
        func: Callable[Concatenate[_S, _P], Awaitable[_T | DomainError]],
    ) -> Callable[Concatenate[_S, _P], Awaitable[Ok[_T] | Fail]]:
        @functools.wraps(func)
        async def wrapper(self: _S, *args: _P.args, **kwargs: _P.kwargs) -> Ok[_T] | Fail:
            warnings: list[str] = []
            token = _pending_warnings.set(warnings)
            try:
                outcome = await func(self, *args, **kwargs)
            except StaleStateError as exc:
                error = concurrent_update_error(exc)
                logger.warning("use_case.failed", op=op, code=error.code, entity_id=exc.entity_id)
                return fail(error, op=op, warnings=warnings)
            except Exception as exc:
                logger.exception("use_case.unexpected_error", op=op)
                return fail(
                    UnexpectedError.from_exception(exc, f"Unexpected error in {op}"),
                    op=op,
                    warnings=warnings,
                )
            finally:
                _pending_warnings.reset(token)

            if isinstance(outcome, DomainError):
                logger.warning("use_case.failed", op=op, code=outcome.code, message=outcome.message)
                return fail(outcome, op=op, warnings=warnings)
            return ok(outcome, op=op, warnings=warnings)

        return wrapper

    return decorator


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class ActionService(BaseService):
            @traced
            @use_case("mark_action_done")
            async def mark_action_done(self, action_id: str, evidence: str) -> Action | DomainError:
                ...
    """

    def __init__(self, backend: Backend) -> None:
        self._backend = backend

    @property
    def _repos(self) -> Repositories:
        return self._backend.repos

    def _dispatch_event(self, hook_name: str, payload: dict[str, Any]) -> None:
        """Dispatch a lifecycle event. No-op when plugins are disabled.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        pm = self._backend.plugins
        if pm is None:
            return
        try:
            pm.dispatch(hook_name, payload)
        except Exception:
            logger.debug("event.dispatch_failed", hook=hook_name, exc_info=True)
            pending = _pending_warnings.get()
            if pending is not None:
                pending.append(f"Event dispatch failed for {hook_name}")

    def _emit_created(self, entity: str, item: Any) -> None:
        self._dispatch_event(
            "post_create",
            {"entity": entity, "entity_id": item.id, "restaurant_id": item.restaurant_id},
        )

    def _emit_transition(self, entity: str, from_status: str, item: Any) -> None:
        self._dispatch_event(
            "post_transition",
            {
                "entity": entity,
                "entity_id": item.id,
                "restaurant_id": item.restaurant_id,
                "from_status": str(from_status),
                "to_status": str(item.status),
            },
        )
