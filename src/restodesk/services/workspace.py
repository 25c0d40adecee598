"""Workspace setup and marketplace data loading.

``init_workspace`` runs before any backend exists, so it builds its
Result directly instead of going through :func:`use_case`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from restodesk.config.discovery import CONFIG_FILENAME
from restodesk.config.models import MEMORY_URL
from restodesk.domain.catalog import CatalogItem
from restodesk.domain.checklist import ChecklistItem
from restodesk.domain.errors import BusinessRuleError, DomainError, UnexpectedError, ValidationError
from restodesk.domain.financial import FinancialEntry
from restodesk.domain.restaurant import Restaurant, RestaurantSnapshot
from restodesk.domain.review import Review
from restodesk.domain.ticket import Ticket, TicketMessage
from restodesk.domain.user import UserProfile
from restodesk.domain.validation import first_error
from restodesk.infrastructure.database.engine import init_database, sqlite_url
from restodesk.services.base import BaseService, use_case
from restodesk.services.result import Fail, Ok, fail, ok
from restodesk.services.telemetry import traced

# Parents before children so foreign keys resolve on insert.
IMPORT_SECTIONS: dict[str, type[BaseModel]] = {
    "users": UserProfile,
    "restaurants": Restaurant,
    "snapshots": RestaurantSnapshot,
    "catalog_items": CatalogItem,
    "checklist_items": ChecklistItem,
    "reviews": Review,
    "tickets": Ticket,
    "ticket_messages": TicketMessage,
    "financial_entries": FinancialEntry,
}

_DEFAULT_DB_PATH = ".restodesk/restodesk.db"

logger = structlog.get_logger(__name__)


def _toml_string(value: str) -> str:
    # JSON string escapes are a subset of TOML basic-string escapes.
    return json.dumps(value)


def _render_config(database_url: str | None, restaurant_id: str | None) -> str:
    lines = ["# restodesk workspace configuration", ""]
    if restaurant_id:
        lines += [f"default_restaurant_id = {_toml_string(restaurant_id)}", ""]
    lines.append("[database]")
    if database_url:
        lines.append(f"url = {_toml_string(database_url)}")
    else:
        lines.append(f"path = {_toml_string(_DEFAULT_DB_PATH)}")
    return "\n".join(lines) + "\n"


class WorkspaceService(BaseService):
    """Workspace bootstrap and bulk data import."""

    @staticmethod
    async def init_workspace(
        path: Path,
        *,
        database_url: str | None = None,
        restaurant_id: str | None = None,
    ) -> Ok[dict[str, Any]] | Fail:
        """Create the database schema, then write ``restodesk.toml`` into *path*.

        The config file is only written once the schema exists, so a failed
        init leaves no half-configured workspace behind.
        """
        op = "init_workspace"
        config_file = path / CONFIG_FILENAME
        if config_file.exists():
            error = BusinessRuleError(
                message=f"{CONFIG_FILENAME} already exists in {path}",
                rule="WORKSPACE_EXISTS",
            )
            logger.warning("use_case.failed", op=op, code=error.code, message=error.message)
            return fail(error, op=op)

        url = database_url or sqlite_url(path / _DEFAULT_DB_PATH)
        try:
            path.mkdir(parents=True, exist_ok=True)
            if url != MEMORY_URL:
                engine = await init_database(url)
                await engine.dispose()
            config_file.write_text(_render_config(database_url, restaurant_id), encoding="utf-8")
        except Exception as exc:
            logger.exception("use_case.unexpected_error", op=op)
            return fail(UnexpectedError.from_exception(exc, f"Unexpected error in {op}"), op=op)
        return ok({"config": str(config_file), "database": url}, op=op)

    @traced
    @use_case("import_data")
    async def import_data(self, payload: dict[str, Any]) -> dict[str, int] | DomainError:
        """Load a marketplace sync dump.

        *payload* maps section names from :data:`IMPORT_SECTIONS` to lists
        of records. Every record is validated before anything is written.
        """
        unknown = sorted(set(payload) - set(IMPORT_SECTIONS))
        if unknown:
            return ValidationError(
                message=f"Unknown import sections: {', '.join(unknown)}",
                field=unknown[0],
            )

        entities: list[BaseModel] = []
        counts: dict[str, int] = {}
        for section, model in IMPORT_SECTIONS.items():
            records = payload.get(section) or []
            try:
                adapter = TypeAdapter(list[model])  # type: ignore[valid-type]
                parsed = adapter.validate_python(records)
            except PydanticValidationError as exc:
                error = first_error(exc)
                return error.model_copy(
                    update={"field": f"{section}.{error.field}" if error.field else section}
                )
            entities.extend(parsed)
            counts[section] = len(parsed)

        await self._backend.seed(entities)
        return counts
