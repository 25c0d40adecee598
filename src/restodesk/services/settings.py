"""SettingsService: auto-reply settings for reviews and tickets.

Settings have no lifecycle; updates are partial and only the fields a
caller names are written.
"""

from __future__ import annotations

from typing import Any

from restodesk.domain.errors import DomainError, NotFoundError, ValidationError
from restodesk.domain.restaurant import (
    AutoReplySettingsPatch,
    ReplyTarget,
    Restaurant,
    RestaurantSettingsUpdate,
)
from restodesk.domain.validation import parse_input, require_id
from restodesk.services.base import BaseService, use_case
from restodesk.services.telemetry import traced


def _parse_target(target: ReplyTarget | str) -> ReplyTarget | ValidationError:
    try:
        return ReplyTarget(target)
    except ValueError:
        return ValidationError(message=f"Unknown auto-reply target '{target}'", field="target")


class SettingsService(BaseService):
    async def _apply(
        self, restaurant_id: str, update: RestaurantSettingsUpdate
    ) -> Restaurant | DomainError:
        restaurant = await self._repos.restaurants.get_by_id(restaurant_id)
        if restaurant is None:
            return NotFoundError.for_entity("restaurant", restaurant_id)
        updated = await self._repos.restaurants.update_settings(restaurant.id, update)
        self._dispatch_event(
            "post_settings_update",
            {"restaurant_id": updated.id, "fields_changed": sorted(update.changes())},
        )
        return updated

    @traced
    @use_case("toggle_auto_reply")
    async def toggle_auto_reply(
        self,
        restaurant_id: str,
        enabled: bool,
        target: ReplyTarget | str = ReplyTarget.REVIEWS,
    ) -> Restaurant | DomainError:
        if err := require_id(restaurant_id, "restaurant_id", "Restaurant ID"):
            return err
        resolved = _parse_target(target)
        if isinstance(resolved, ValidationError):
            return resolved
        return await self._apply(restaurant_id, RestaurantSettingsUpdate.toggle(resolved, enabled))

    @traced
    @use_case("update_auto_reply_settings")
    async def update_auto_reply_settings(
        self,
        restaurant_id: str,
        changes: AutoReplySettingsPatch | dict[str, Any],
        target: ReplyTarget | str = ReplyTarget.REVIEWS,
    ) -> Restaurant | DomainError:
        """Apply a partial mode/template/prompt update.

        Keys absent from *changes* keep their stored value; a key set to
        ``None`` clears it.
        """
        if err := require_id(restaurant_id, "restaurant_id", "Restaurant ID"):
            return err
        resolved = _parse_target(target)
        if isinstance(resolved, ValidationError):
            return resolved
        patch = parse_input(AutoReplySettingsPatch, changes)
        if isinstance(patch, ValidationError):
            return patch
        update = patch.for_target(resolved)
        if not update.changes():
            return ValidationError(message="No settings to update")
        return await self._apply(restaurant_id, update)
