"""Ticket entity: customer support thread synced from the marketplace."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel

from restodesk.domain.lifecycle import (
    TICKET_TRANSITIONS,
    TicketStatus,
    is_terminal,
    is_valid_transition,
)


class MessageSender(StrEnum):
    CUSTOMER = "customer"
    RESTAURANT = "restaurant"
    SYSTEM = "system"


class ResponseMode(StrEnum):
    MANUAL = "manual"
    TEMPLATE = "template"
    AI = "ai"


class ResponseStatus(StrEnum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class Ticket(BaseModel):
    model_config = {"frozen": True}

    id: str
    restaurant_id: str
    external_ticket_id: str
    order_id: str | None = None
    subject: str | None = None
    status: TicketStatus = TicketStatus.OPEN
    created_at: datetime
    updated_at: datetime


class TicketMessage(BaseModel):
    model_config = {"frozen": True}

    id: str
    ticket_id: str
    external_message_id: str | None = None
    sender: MessageSender
    content: str
    response_mode: ResponseMode | None = None
    response_status: ResponseStatus | None = None
    response_error: str | None = None
    sent_at: datetime | None = None
    created_at: datetime


OPEN_STATUSES: frozenset[str] = frozenset({TicketStatus.OPEN, TicketStatus.IN_PROGRESS})


class TicketRules:
    @staticmethod
    def can_transition_to(ticket: Ticket, target: str) -> bool:
        return is_valid_transition(ticket.status, target, TICKET_TRANSITIONS)

    @staticmethod
    def is_open(ticket: Ticket) -> bool:
        return ticket.status in OPEN_STATUSES

    @staticmethod
    def can_reply(ticket: Ticket) -> bool:
        """Replies are accepted until the thread reaches a terminal status."""
        return not is_terminal(ticket.status, TICKET_TRANSITIONS)
