"""ActionService: remediation actions tied to a restaurant week."""

from __future__ import annotations

from typing import Any

from restodesk.domain.action import (
    Action,
    ActionRules,
    CreateActionInput,
    MarkDiscardedInput,
    MarkDoneInput,
)
from restodesk.domain.errors import BusinessRuleError, DomainError, NotFoundError, ValidationError
from restodesk.domain.validation import parse_input, require_id
from restodesk.infrastructure.repositories.contracts import ActionFilters
from restodesk.services.base import BaseService, use_case
from restodesk.services.telemetry import traced

ENTITY = "action"


class ActionService(BaseService):
    async def _load(self, action_id: str) -> Action | DomainError:
        action = await self._repos.actions.get_by_id(action_id)
        if action is None:
            return NotFoundError.for_entity(ENTITY, action_id)
        return action

    @traced
    @use_case("create_action")
    async def create_action(
        self,
        data: CreateActionInput | dict[str, Any],
        *,
        actor_id: str | None = None,
    ) -> Action | DomainError:
        parsed = parse_input(CreateActionInput, data)
        if isinstance(parsed, ValidationError):
            return parsed
        restaurant = await self._repos.restaurants.get_by_id(parsed.restaurant_id)
        if restaurant is None:
            return NotFoundError.for_entity("restaurant", parsed.restaurant_id)
        if parsed.report_id is not None:
            report = await self._repos.reports.get_by_id(parsed.report_id)
            if report is None:
                return NotFoundError.for_entity("report", parsed.report_id)

        action = await self._repos.actions.create(parsed, created_by=actor_id)
        self._emit_created(ENTITY, action)
        return action

    @traced
    @use_case("mark_action_done")
    async def mark_action_done(
        self,
        action_id: str,
        evidence: str,
        *,
        attachments: list[str] | None = None,
        actor_id: str | None = None,
    ) -> Action | DomainError:
        """Close a planned action with evidence of what was done."""
        parsed = parse_input(
            MarkDoneInput,
            {"action_id": action_id, "evidence": evidence, "attachments": attachments or []},
        )
        if isinstance(parsed, ValidationError):
            return parsed
        action = await self._load(parsed.action_id)
        if isinstance(action, DomainError):
            return action
        if not ActionRules.can_mark_done(action):
            return BusinessRuleError(
                message=f"Action with status '{action.status}' cannot be marked as done",
                rule="ACTION_CANNOT_MARK_DONE",
            )

        updated = await self._repos.actions.mark_done(
            action.id,
            parsed.evidence,
            attachments=[str(url) for url in parsed.attachments],
            actor_id=actor_id,
            expected_status=action.status,
        )
        self._emit_transition(ENTITY, action.status, updated)
        return updated

    @traced
    @use_case("mark_action_discarded")
    async def mark_action_discarded(
        self,
        action_id: str,
        reason: str,
        *,
        actor_id: str | None = None,
    ) -> Action | DomainError:
        parsed = parse_input(MarkDiscardedInput, {"action_id": action_id, "reason": reason})
        if isinstance(parsed, ValidationError):
            return parsed
        action = await self._load(parsed.action_id)
        if isinstance(action, DomainError):
            return action
        if not ActionRules.can_discard(action):
            return BusinessRuleError(
                message=f"Action with status '{action.status}' cannot be discarded",
                rule="ACTION_CANNOT_DISCARD",
            )

        updated = await self._repos.actions.mark_discarded(
            action.id, parsed.reason, actor_id=actor_id, expected_status=action.status
        )
        self._emit_transition(ENTITY, action.status, updated)
        return updated

    @traced
    @use_case("list_actions")
    async def list_actions(
        self, restaurant_id: str, filters: ActionFilters | None = None
    ) -> list[Action] | DomainError:
        if err := require_id(restaurant_id, "restaurant_id", "Restaurant ID"):
            return err
        return await self._repos.actions.get_by_restaurant(restaurant_id, filters)
