"""Pluggy hook specifications for restodesk lifecycle events.

Hooks fire synchronously after a use-case has committed its mutation.
"""

from __future__ import annotations

from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("restodesk")


class RestodeskHookSpec:
    """Hook specifications for the restodesk plugin system."""

    @hookspec
    def post_create(
        self,
        entity: str,
        entity_id: str,
        restaurant_id: str,
    ) -> None:
        """Called after an action, image job or report is created."""

    @hookspec
    def post_transition(
        self,
        entity: str,
        entity_id: str,
        restaurant_id: str,
        from_status: str,
        to_status: str,
    ) -> None:
        """Called after an entity moves between lifecycle statuses."""

    @hookspec
    def post_settings_update(
        self,
        restaurant_id: str,
        fields_changed: list[str],
    ) -> None:
        """Called after a restaurant's auto-reply settings change."""

    @hookspec
    def post_reply(
        self,
        entity: str,
        entity_id: str,
        restaurant_id: str,
        details: dict[str, Any],
    ) -> None:
        """Called after a reply is sent to a review or a ticket."""
