"""TicketService: support thread replies and status changes."""

from __future__ import annotations

from restodesk.domain.errors import BusinessRuleError, DomainError, NotFoundError, ValidationError
from restodesk.domain.lifecycle import TicketStatus
from restodesk.domain.ticket import Ticket, TicketMessage, TicketRules
from restodesk.domain.validation import require_id, require_text
from restodesk.infrastructure.repositories.contracts import TicketFilters
from restodesk.services.base import BaseService, use_case
from restodesk.services.telemetry import traced

ENTITY = "ticket"


class TicketService(BaseService):
    async def _load(self, ticket_id: str | None) -> Ticket | DomainError:
        if err := require_id(ticket_id, "ticket_id", "Ticket ID"):
            return err
        ticket = await self._repos.tickets.get_by_id(ticket_id)  # type: ignore[arg-type]
        if ticket is None:
            return NotFoundError.for_entity(ENTITY, ticket_id)
        return ticket

    @traced
    @use_case("send_ticket_message")
    async def send_ticket_message(
        self, ticket_id: str, content: str
    ) -> TicketMessage | DomainError:
        if err := require_id(ticket_id, "ticket_id", "Ticket ID"):
            return err
        if err := require_text(content, "content", "Message content is required"):
            return err
        ticket = await self._load(ticket_id)
        if isinstance(ticket, DomainError):
            return ticket
        if not TicketRules.can_reply(ticket):
            return BusinessRuleError(
                message=f"Cannot reply to a ticket with status '{ticket.status}'",
                rule="TICKET_CANNOT_REPLY",
            )

        message = await self._repos.tickets.send_message(ticket.id, content.strip())
        self._dispatch_event(
            "post_reply",
            {
                "entity": ENTITY,
                "entity_id": ticket.id,
                "restaurant_id": ticket.restaurant_id,
                "details": {"message_id": message.id},
            },
        )
        return message

    @traced
    @use_case("update_ticket_status")
    async def update_ticket_status(
        self, ticket_id: str, status: TicketStatus | str
    ) -> Ticket | DomainError:
        if err := require_text(status, "status", "Status is required"):
            return err
        try:
            target = TicketStatus(status)
        except ValueError:
            return ValidationError(message=f"Unknown ticket status '{status}'", field="status")

        ticket = await self._load(ticket_id)
        if isinstance(ticket, DomainError):
            return ticket
        if not TicketRules.can_transition_to(ticket, target):
            return BusinessRuleError(
                message=f"Ticket with status '{ticket.status}' cannot move to '{target}'",
                rule="TICKET_INVALID_TRANSITION",
            )

        updated = await self._repos.tickets.update_status(
            ticket.id, target, expected_status=ticket.status
        )
        self._emit_transition(ENTITY, ticket.status, updated)
        return updated

    @traced
    @use_case("list_tickets")
    async def list_tickets(
        self, restaurant_id: str, filters: TicketFilters | None = None
    ) -> list[Ticket] | DomainError:
        if err := require_id(restaurant_id, "restaurant_id", "Restaurant ID"):
            return err
        return await self._repos.tickets.get_by_restaurant(restaurant_id, filters)

    @traced
    @use_case("get_ticket_messages")
    async def get_ticket_messages(self, ticket_id: str) -> list[TicketMessage] | DomainError:
        ticket = await self._load(ticket_id)
        if isinstance(ticket, DomainError):
            return ticket
        return await self._repos.tickets.get_messages(ticket.id)
