"""Built-in audit plugin.

Writes one structured log event per lifecycle hook on the
``restodesk.audit`` logger. Registered by the backend when
``plugins.audit`` is enabled.
"""

from __future__ import annotations

from typing import Any

import pluggy
import structlog

hookimpl = pluggy.HookimplMarker("restodesk")


class AuditPlugin:
    """Emit ``audit.*`` events for every lifecycle hook."""

    def __init__(self, logger_name: str = "restodesk.audit") -> None:
        self._log = structlog.get_logger(logger_name)

    @hookimpl
    def post_create(self, entity: str, entity_id: str, restaurant_id: str) -> None:
        self._log.info(
            "audit.create", entity=entity, entity_id=entity_id, restaurant_id=restaurant_id
        )

    @hookimpl
    def post_transition(
        self,
        entity: str,
        entity_id: str,
        restaurant_id: str,
        from_status: str,
        to_status: str,
    ) -> None:
        self._log.info(
            "audit.transition",
            entity=entity,
            entity_id=entity_id,
            restaurant_id=restaurant_id,
            from_status=from_status,
            to_status=to_status,
        )

    @hookimpl
    def post_settings_update(self, restaurant_id: str, fields_changed: list[str]) -> None:
        self._log.info(
            "audit.settings_update", restaurant_id=restaurant_id, fields_changed=fields_changed
        )

    @hookimpl
    def post_reply(
        self, entity: str, entity_id: str, restaurant_id: str, details: dict[str, Any]
    ) -> None:
        self._log.info(
            "audit.reply",
            entity=entity,
            entity_id=entity_id,
            restaurant_id=restaurant_id,
            **details,
        )
