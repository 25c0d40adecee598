"""ChecklistService: the weekly checklist reviewed alongside reports."""

from __future__ import annotations

from typing import Any

from restodesk.domain.checklist import ChecklistItem, CreateChecklistItemInput
from restodesk.domain.errors import DomainError, NotFoundError, ValidationError
from restodesk.domain.validation import parse_input, require_id
from restodesk.infrastructure.repositories.contracts import ChecklistFilters
from restodesk.services.base import BaseService, use_case
from restodesk.services.telemetry import traced

ENTITY = "checklist_item"


class ChecklistService(BaseService):
    @traced
    @use_case("add_checklist_item")
    async def add_checklist_item(
        self, data: CreateChecklistItemInput | dict[str, Any]
    ) -> ChecklistItem | DomainError:
        """Add an item to a report's checklist or to a week's.

        An item anchored to a report inherits the report's week when no
        ``week_start`` is given.
        """
        parsed = parse_input(CreateChecklistItemInput, data)
        if isinstance(parsed, ValidationError):
            return parsed
        restaurant = await self._repos.restaurants.get_by_id(parsed.restaurant_id)
        if restaurant is None:
            return NotFoundError.for_entity("restaurant", parsed.restaurant_id)
        if parsed.report_id is not None:
            report = await self._repos.reports.get_by_id(parsed.report_id)
            if report is None:
                return NotFoundError.for_entity("report", parsed.report_id)
            if report.restaurant_id != parsed.restaurant_id:
                return ValidationError(
                    message="Report does not belong to this restaurant", field="report_id"
                )
            if parsed.week_start is None:
                parsed = parsed.model_copy(update={"week_start": report.week_start})

        item = await self._repos.checklists.create(parsed)
        self._emit_created(ENTITY, item)
        return item

    @traced
    @use_case("toggle_checklist_item")
    async def toggle_checklist_item(
        self,
        item_id: str,
        *,
        checked: bool | None = None,
        actor_id: str | None = None,
    ) -> ChecklistItem | DomainError:
        """Flip an item, or set it to *checked* when given.

        Setting an item to the state it already has writes nothing.
        """
        if err := require_id(item_id, "item_id", "Checklist item ID"):
            return err
        item = await self._repos.checklists.get_by_id(item_id)
        if item is None:
            return NotFoundError.for_entity(ENTITY, item_id)

        target = not item.is_checked if checked is None else checked
        if target == item.is_checked:
            return item
        return await self._repos.checklists.set_checked(
            item.id, target, actor_id=actor_id, expected_checked=item.is_checked
        )

    @traced
    @use_case("list_checklist")
    async def list_checklist(
        self, restaurant_id: str, filters: ChecklistFilters | None = None
    ) -> list[ChecklistItem] | DomainError:
        if err := require_id(restaurant_id, "restaurant_id", "Restaurant ID"):
            return err
        return await self._repos.checklists.get_by_restaurant(restaurant_id, filters)
