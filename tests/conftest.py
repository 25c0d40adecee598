"""Shared pytest fixtures and entity builders for restodesk tests."""

from __future__ import annotations

import asyncio
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner, Result

from restodesk.config.settings import RestoSettings
from restodesk.domain.action import Action, ActionType
from restodesk.domain.catalog import CatalogItem
from restodesk.domain.checklist import ChecklistItem
from restodesk.domain.financial import FinancialEntry, FinancialEntryType
from restodesk.domain.image_job import ImageJob, ImageJobMode
from restodesk.domain.lifecycle import ImageJobStatus, ReportStatus
from restodesk.domain.report import Report
from restodesk.domain.restaurant import Restaurant, RestaurantSnapshot
from restodesk.domain.review import Review
from restodesk.domain.ticket import MessageSender, Ticket, TicketMessage
from restodesk.domain.user import UserProfile
from restodesk.infrastructure.backend import Backend
from restodesk.infrastructure.repositories.memory import MemoryStore
from restodesk.plugins.manager import PluginManager
from restodesk.services.workspace import WorkspaceService

RESTAURANT_ID = "6f1c0d8e-0000-4000-8000-000000000001"
OTHER_RESTAURANT_ID = "6f1c0d8e-0000-4000-8000-000000000002"
ITEM_ID = "7a2b1c3d-0000-4000-8000-000000000001"
BARE_ITEM_ID = "7a2b1c3d-0000-4000-8000-000000000002"
ADMIN_ID = "9c8d7e6f-0000-4000-8000-000000000001"
STAFF_ID = "9c8d7e6f-0000-4000-8000-000000000002"

NOW = datetime(2024, 3, 11, 9, 0, tzinfo=UTC)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def store() -> MemoryStore:
    """In-memory store pre-loaded with one restaurant, two catalog items and two users."""
    s = MemoryStore()
    s.seed(
        make_restaurant(),
        make_catalog_item(),
        make_catalog_item(id=BARE_ITEM_ID, external_item_id="ext-2", name="Salad", image_url=None),
        make_user(id=ADMIN_ID, email="admin@example.com", full_name="Ada Admin"),
        make_user(id=STAFF_ID, email="staff@example.com", full_name="Sam Staff"),
    )
    return s


@pytest.fixture
def backend(store: MemoryStore) -> Backend:
    """Memory backend with plugins disabled."""
    settings = RestoSettings.model_validate({"plugins": {"enabled": False}})
    return Backend.in_memory(settings, store=store)


@pytest.fixture
def plugin_backend(store: MemoryStore) -> tuple[Backend, PluginManager]:
    """Memory backend with an empty plugin manager tests can register into."""
    pm = PluginManager()
    return Backend.in_memory(RestoSettings(), store=store, plugins=pm), pm


async def _create_workspace(root: Path) -> Path:
    result = await WorkspaceService.init_workspace(root, restaurant_id=RESTAURANT_ID)
    assert result.ok
    config = root / "restodesk.toml"
    settings = RestoSettings.from_cli(config_path=str(config))
    backend = await Backend.connect(settings)
    try:
        await backend.seed(
            [
                make_user(id=ADMIN_ID),
                make_user(id=STAFF_ID, email="staff@example.com", full_name="Sam Staff"),
                make_restaurant(),
                make_snapshot(),
                make_catalog_item(),
                make_review(),
                make_ticket(),
                make_ticket_message(),
                make_entry(),
            ]
        )
    finally:
        await backend.close()
    return config


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """SQLite workspace seeded with one restaurant; returns its config path."""
    return asyncio.run(_create_workspace(tmp_path))


def invoke(runner: CliRunner, config: Path, *args: str) -> Result:
    """Run the CLI against the workspace at *config*."""
    from restodesk.cli import cli

    return runner.invoke(cli, ["-c", str(config), *args])


# ---------------------------------------------------------------------------
# Entity builders
# ---------------------------------------------------------------------------


def _stamp(fields: dict[str, Any], *names: str) -> dict[str, Any]:
    for name in names:
        fields.setdefault(name, NOW)
    return fields


def make_restaurant(**overrides: Any) -> Restaurant:
    fields = {"id": RESTAURANT_ID, "external_restaurant_id": "mkt-1", "name": "Trattoria"}
    fields.update(overrides)
    return Restaurant(**_stamp(fields, "created_at", "updated_at"))


def make_catalog_item(**overrides: Any) -> CatalogItem:
    fields = {
        "id": ITEM_ID,
        "restaurant_id": RESTAURANT_ID,
        "external_item_id": "ext-1",
        "name": "Margherita",
        "description": "Tomato, mozzarella, basil",
        "price": 11.5,
        "image_url": "https://cdn.example.com/margherita.jpg",
    }
    fields.update(overrides)
    return CatalogItem(**_stamp(fields, "created_at", "updated_at"))


def make_checklist_item(**overrides: Any) -> ChecklistItem:
    fields: dict[str, Any] = {
        "id": "check-1",
        "restaurant_id": RESTAURANT_ID,
        "week_start": date(2024, 3, 4),
        "title": "Review delivery times with the kitchen",
    }
    fields.update(overrides)
    return ChecklistItem(**_stamp(fields, "created_at"))


def make_image_job(**overrides: Any) -> ImageJob:
    fields: dict[str, Any] = {
        "id": "job-1",
        "catalog_item_id": ITEM_ID,
        "restaurant_id": RESTAURANT_ID,
        "mode": ImageJobMode.FROM_DESCRIPTION,
        "status": ImageJobStatus.GENERATING,
    }
    fields.update(overrides)
    return ImageJob(**_stamp(fields, "created_at", "updated_at"))


def make_report(**overrides: Any) -> Report:
    fields: dict[str, Any] = {
        "id": "report-1",
        "restaurant_id": RESTAURANT_ID,
        "week_start": date(2024, 3, 4),
        "week_end": date(2024, 3, 10),
        "status": ReportStatus.GENERATING,
    }
    fields.update(overrides)
    return Report(**_stamp(fields, "created_at", "updated_at"))


def make_action(**overrides: Any) -> Action:
    fields: dict[str, Any] = {
        "id": "action-1",
        "restaurant_id": RESTAURANT_ID,
        "week_start": date(2024, 3, 4),
        "title": "Shorten prep time",
        "action_type": ActionType.OPERATIONAL,
    }
    fields.update(overrides)
    return Action(**_stamp(fields, "created_at", "updated_at"))


def make_ticket(**overrides: Any) -> Ticket:
    fields: dict[str, Any] = {
        "id": "ticket-1",
        "restaurant_id": RESTAURANT_ID,
        "external_ticket_id": "tk-1",
        "subject": "Missing drink",
    }
    fields.update(overrides)
    return Ticket(**_stamp(fields, "created_at", "updated_at"))


def make_ticket_message(**overrides: Any) -> TicketMessage:
    fields: dict[str, Any] = {
        "id": "msg-1",
        "ticket_id": "ticket-1",
        "sender": MessageSender.CUSTOMER,
        "content": "My soda never arrived",
    }
    fields.update(overrides)
    return TicketMessage(**_stamp(fields, "created_at"))


def make_review(**overrides: Any) -> Review:
    fields: dict[str, Any] = {
        "id": "review-1",
        "restaurant_id": RESTAURANT_ID,
        "external_review_id": "rv-1",
        "rating": 2,
        "comment": "Cold pizza",
    }
    fields.update(overrides)
    return Review(**_stamp(fields, "review_date", "created_at", "updated_at"))


def make_snapshot(**overrides: Any) -> RestaurantSnapshot:
    fields: dict[str, Any] = {
        "id": "snap-1",
        "restaurant_id": RESTAURANT_ID,
        "week_start": date(2024, 3, 4),
        "week_end": date(2024, 3, 10),
        "visits": 1000,
        "views": 600,
        "to_cart": 200,
        "checkout": 120,
        "completed": 100,
        "cancellation_rate": 0.01,
        "open_time_rate": 0.98,
        "open_tickets_rate": 0.01,
        "new_customers_rate": 0.4,
    }
    fields.update(overrides)
    return RestaurantSnapshot(**_stamp(fields, "created_at"))


def make_entry(**overrides: Any) -> FinancialEntry:
    fields: dict[str, Any] = {
        "id": "entry-1",
        "restaurant_id": RESTAURANT_ID,
        "entry_type": FinancialEntryType.REVENUE,
        "amount": 100.0,
        "reference_date": date(2024, 3, 5),
    }
    fields.update(overrides)
    return FinancialEntry(**_stamp(fields, "created_at"))


def make_user(**overrides: Any) -> UserProfile:
    fields: dict[str, Any] = {
        "id": ADMIN_ID,
        "email": "admin@example.com",
        "full_name": "Ada Admin",
    }
    fields.update(overrides)
    return UserProfile(**_stamp(fields, "created_at", "updated_at"))
