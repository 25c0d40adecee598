"""Tests for ActionService."""

from __future__ import annotations

import pytest

from restodesk.domain.errors import NotFoundError
from restodesk.domain.lifecycle import ActionStatus
from restodesk.infrastructure.backend import Backend
from restodesk.infrastructure.repositories.contracts import ActionFilters
from restodesk.infrastructure.repositories.memory import MemoryStore
from restodesk.services.actions import ActionService
from tests.conftest import ADMIN_ID, OTHER_RESTAURANT_ID, RESTAURANT_ID, make_action, make_report

REPORT_UUID = "3e4f5a6b-0000-4000-8000-000000000001"


def _payload(**overrides: object) -> dict[str, object]:
    data: dict[str, object] = {
        "restaurant_id": RESTAURANT_ID,
        "week_start": "2024-03-04",
        "title": "Run a weekday promotion",
        "action_type": "promotion",
    }
    data.update(overrides)
    return data


class TestCreateAction:
    @pytest.mark.asyncio
    async def test_created_planned(self, backend: Backend) -> None:
        result = await ActionService(backend).create_action(_payload(), actor_id=ADMIN_ID)
        assert result.ok
        assert result.data.status == ActionStatus.PLANNED
        assert result.data.created_by == ADMIN_ID

    @pytest.mark.asyncio
    async def test_linked_report_must_exist(self, backend: Backend) -> None:
        result = await ActionService(backend).create_action(_payload(report_id=REPORT_UUID))
        assert not result.ok
        assert isinstance(result.error, NotFoundError)
        assert result.error.entity == "report"

    @pytest.mark.asyncio
    async def test_linked_report(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(make_report(id=REPORT_UUID))
        result = await ActionService(backend).create_action(_payload(report_id=REPORT_UUID))
        assert result.ok
        assert result.data.report_id == REPORT_UUID

    @pytest.mark.asyncio
    async def test_unknown_restaurant(self, backend: Backend) -> None:
        result = await ActionService(backend).create_action(
            _payload(restaurant_id=OTHER_RESTAURANT_ID)
        )
        assert not result.ok
        assert result.error.entity == "restaurant"

    @pytest.mark.asyncio
    async def test_unknown_type(self, backend: Backend) -> None:
        result = await ActionService(backend).create_action(_payload(action_type="party"))
        assert not result.ok
        assert result.error.field == "action_type"


class TestCloseAction:
    @pytest.mark.asyncio
    async def test_mark_done(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(make_action())
        result = await ActionService(backend).mark_action_done(
            "action-1",
            "Prep time down to 18 minutes",
            attachments=["https://files.example.com/chart.png"],
            actor_id=ADMIN_ID,
        )
        assert result.ok
        assert result.data.status == ActionStatus.DONE
        assert result.data.done_evidence == "Prep time down to 18 minutes"
        assert result.data.done_by == ADMIN_ID
        assert result.data.done_at is not None
        assert result.data.done_attachments == ["https://files.example.com/chart.png"]
        assert store.actions["action-1"].done_attachments == result.data.done_attachments

    @pytest.mark.asyncio
    async def test_done_needs_evidence(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(make_action())
        result = await ActionService(backend).mark_action_done("action-1", "   ")
        assert not result.ok
        assert result.error.field == "evidence"
        assert store.actions["action-1"].status == ActionStatus.PLANNED

    @pytest.mark.asyncio
    async def test_bad_attachment_url(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(make_action())
        result = await ActionService(backend).mark_action_done(
            "action-1", "done", attachments=["not a url"]
        )
        assert not result.ok
        assert result.error.field == "attachments.0"

    @pytest.mark.asyncio
    async def test_discarded_cannot_be_done(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(make_action(status=ActionStatus.DISCARDED))
        result = await ActionService(backend).mark_action_done("action-1", "done anyway")
        assert not result.ok
        assert result.error.code == "ACTION_CANNOT_MARK_DONE"

    @pytest.mark.asyncio
    async def test_discard(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(make_action())
        result = await ActionService(backend).mark_action_discarded(
            "action-1", "Supplier unavailable", actor_id=ADMIN_ID
        )
        assert result.ok
        assert result.data.discarded_reason == "Supplier unavailable"
        assert result.data.discarded_by == ADMIN_ID

    @pytest.mark.asyncio
    async def test_done_cannot_be_discarded(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(make_action(status=ActionStatus.DONE))
        result = await ActionService(backend).mark_action_discarded("action-1", "changed mind")
        assert not result.ok
        assert result.error.code == "ACTION_CANNOT_DISCARD"

    @pytest.mark.asyncio
    async def test_reason_length(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(make_action())
        result = await ActionService(backend).mark_action_discarded("action-1", "x" * 501)
        assert not result.ok
        assert result.error.field == "reason"

    @pytest.mark.asyncio
    async def test_unknown_action(self, backend: Backend) -> None:
        result = await ActionService(backend).mark_action_discarded("missing", "why")
        assert not result.ok
        assert result.error.code == "NOT_FOUND"


class TestListActions:
    @pytest.mark.asyncio
    async def test_filter_by_status(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(
            make_action(id="a1"),
            make_action(id="a2", status=ActionStatus.DONE),
        )
        svc = ActionService(backend)
        planned = await svc.list_actions(RESTAURANT_ID, ActionFilters(status=ActionStatus.PLANNED))
        assert [a.id for a in planned.data] == ["a1"]
        everything = await svc.list_actions(RESTAURANT_ID)
        assert len(everything.data) == 2

    @pytest.mark.asyncio
    async def test_requires_restaurant(self, backend: Backend) -> None:
        result = await ActionService(backend).list_actions("")
        assert not result.ok
        assert result.error.message == "Restaurant ID is required"
