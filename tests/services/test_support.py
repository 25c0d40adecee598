"""Tests for ReviewService and TicketService."""

from __future__ import annotations

from typing import Any

import pytest

from restodesk.domain.lifecycle import TicketStatus
from restodesk.domain.ticket import MessageSender, ResponseMode, ResponseStatus
from restodesk.infrastructure.backend import Backend
from restodesk.infrastructure.repositories.contracts import ReviewFilters
from restodesk.infrastructure.repositories.memory import MemoryStore
from restodesk.plugins import hookimpl
from restodesk.plugins.manager import PluginManager
from restodesk.services.reviews import ReviewService
from restodesk.services.tickets import TicketService
from tests.conftest import RESTAURANT_ID, make_review, make_ticket, make_ticket_message


class _ReplyRecorder:
    def __init__(self) -> None:
        self.replies: list[dict[str, Any]] = []

    @hookimpl
    def post_reply(
        self, entity: str, entity_id: str, restaurant_id: str, details: dict[str, Any]
    ) -> None:
        self.replies.append({"entity": entity, "entity_id": entity_id, **details})


class TestRespondToReview:
    @pytest.mark.asyncio
    async def test_manual_reply(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(make_review())
        result = await ReviewService(backend).respond_to_review("review-1", "  Sorry!  ")
        assert result.ok
        assert result.data.response == "Sorry!"
        assert result.data.response_mode == ResponseMode.MANUAL
        assert result.data.response_status == ResponseStatus.SENT
        assert result.data.response_sent_at is not None

    @pytest.mark.asyncio
    async def test_second_reply_refused(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(make_review())
        svc = ReviewService(backend)
        await svc.respond_to_review("review-1", "Sorry!")
        again = await svc.respond_to_review("review-1", "Sorry again!")
        assert not again.ok
        assert again.error.code == "REVIEW_ALREADY_ANSWERED"

    @pytest.mark.asyncio
    async def test_failed_auto_reply_can_be_replaced(
        self, backend: Backend, store: MemoryStore
    ) -> None:
        store.seed(make_review(response="auto", response_status=ResponseStatus.FAILED))
        result = await ReviewService(backend).respond_to_review("review-1", "Manual fix")
        assert result.ok
        assert result.data.response_error is None

    @pytest.mark.asyncio
    async def test_blank_response(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(make_review())
        result = await ReviewService(backend).respond_to_review("review-1", "")
        assert not result.ok
        assert result.error.field == "response"

    @pytest.mark.asyncio
    async def test_reply_event(
        self, plugin_backend: tuple[Backend, PluginManager], store: MemoryStore
    ) -> None:
        backend, pm = plugin_backend
        recorder = _ReplyRecorder()
        pm.register_plugin(recorder)
        store.seed(make_review(rating=1))
        await ReviewService(backend).respond_to_review("review-1", "Sorry!")
        assert recorder.replies == [{"entity": "review", "entity_id": "review-1", "rating": 1}]

    @pytest.mark.asyncio
    async def test_list_pending(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(
            make_review(id="r1", response_status=ResponseStatus.PENDING),
            make_review(id="r2", external_review_id="rv-2", response_status=ResponseStatus.SENT),
        )
        result = await ReviewService(backend).list_reviews(
            RESTAURANT_ID, ReviewFilters(response_status=ResponseStatus.PENDING)
        )
        assert [r.id for r in result.data] == ["r1"]


class TestTicketMessages:
    @pytest.mark.asyncio
    async def test_reply_appends_restaurant_message(
        self, backend: Backend, store: MemoryStore
    ) -> None:
        store.seed(make_ticket(), make_ticket_message())
        svc = TicketService(backend)
        result = await svc.send_ticket_message("ticket-1", "A refund has been issued.")
        assert result.ok
        assert result.data.sender == MessageSender.RESTAURANT
        assert result.data.response_status == ResponseStatus.SENT

        thread = await svc.get_ticket_messages("ticket-1")
        assert [m.sender for m in thread.data] == [MessageSender.CUSTOMER, MessageSender.RESTAURANT]

    @pytest.mark.asyncio
    async def test_resolved_ticket_accepts_replies(
        self, backend: Backend, store: MemoryStore
    ) -> None:
        store.seed(make_ticket(status=TicketStatus.RESOLVED))
        result = await TicketService(backend).send_ticket_message("ticket-1", "Following up")
        assert result.ok

    @pytest.mark.asyncio
    async def test_closed_ticket_refuses_replies(
        self, backend: Backend, store: MemoryStore
    ) -> None:
        store.seed(make_ticket(status=TicketStatus.CLOSED))
        result = await TicketService(backend).send_ticket_message("ticket-1", "Hello?")
        assert not result.ok
        assert result.error.code == "TICKET_CANNOT_REPLY"

    @pytest.mark.asyncio
    async def test_blank_content(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(make_ticket())
        result = await TicketService(backend).send_ticket_message("ticket-1", " ")
        assert not result.ok
        assert result.error.field == "content"


class TestTicketStatus:
    @pytest.mark.asyncio
    async def test_resolve(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(make_ticket())
        result = await TicketService(backend).update_ticket_status("ticket-1", "resolved")
        assert result.ok
        assert result.data.status == TicketStatus.RESOLVED

    @pytest.mark.asyncio
    async def test_reopen_resolved(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(make_ticket(status=TicketStatus.RESOLVED))
        result = await TicketService(backend).update_ticket_status("ticket-1", "open")
        assert result.ok

    @pytest.mark.asyncio
    async def test_closed_is_final(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(make_ticket(status=TicketStatus.CLOSED))
        result = await TicketService(backend).update_ticket_status("ticket-1", "open")
        assert not result.ok
        assert result.error.code == "TICKET_INVALID_TRANSITION"

    @pytest.mark.asyncio
    async def test_unknown_status(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(make_ticket())
        result = await TicketService(backend).update_ticket_status("ticket-1", "snoozed")
        assert not result.ok
        assert result.error.field == "status"

    @pytest.mark.asyncio
    async def test_unknown_ticket(self, backend: Backend) -> None:
        result = await TicketService(backend).update_ticket_status("missing", "closed")
        assert not result.ok
        assert result.error.code == "NOT_FOUND"
