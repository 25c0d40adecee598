"""Command groups: customer reviews and support tickets."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from restodesk.commands._base import RestoGroup
from restodesk.domain.lifecycle import TicketStatus
from restodesk.domain.ticket import ResponseStatus
from restodesk.infrastructure.repositories.contracts import ReviewFilters, TicketFilters
from restodesk.services.reviews import ReviewService
from restodesk.services.tickets import TicketService

if TYPE_CHECKING:
    from restodesk.commands._context import AppContext


@click.group(
    cls=RestoGroup,
    examples="""\
  restodesk review list --rating 1 --pending
  restodesk review respond <review-id> "Sorry about the wait, next one is on us." """,
)
@click.pass_obj
def review(app: AppContext) -> None:
    """Read and answer customer reviews."""


@review.command()
@click.argument("review_id")
@click.argument("response")
@click.pass_obj
def respond(app: AppContext, review_id: str, response: str) -> None:
    """Post a manual reply to a review."""
    app.emit(app.run(lambda backend: ReviewService(backend).respond_to_review(review_id, response)))


@review.command(name="list")
@click.option("--rating", type=click.IntRange(1, 5), default=None, help="Filter by star rating.")
@click.option("--pending", is_flag=True, help="Only reviews still waiting for a reply.")
@click.pass_obj
def list_reviews(app: AppContext, rating: int | None, pending: bool) -> None:
    """List reviews for the selected restaurant."""
    restaurant_id = app.restaurant_id
    filters = ReviewFilters(
        rating=rating,
        response_status=ResponseStatus.PENDING if pending else None,
    )
    app.emit(app.run(lambda backend: ReviewService(backend).list_reviews(restaurant_id, filters)))


@click.group(
    cls=RestoGroup,
    examples="""\
  restodesk ticket list --status open
  restodesk ticket reply <ticket-id> "A refund has been issued."
  restodesk ticket status <ticket-id> resolved
  restodesk ticket messages <ticket-id>""",
)
@click.pass_obj
def ticket(app: AppContext) -> None:
    """Work customer support tickets."""


@ticket.command()
@click.argument("ticket_id")
@click.argument("content")
@click.pass_obj
def reply(app: AppContext, ticket_id: str, content: str) -> None:
    """Send a message on an open ticket."""
    app.emit(
        app.run(lambda backend: TicketService(backend).send_ticket_message(ticket_id, content))
    )


@ticket.command()
@click.argument("ticket_id")
@click.argument("status", type=click.Choice([s.value for s in TicketStatus]))
@click.pass_obj
def status(app: AppContext, ticket_id: str, status: str) -> None:
    """Move a ticket to a new status."""
    app.emit(
        app.run(lambda backend: TicketService(backend).update_ticket_status(ticket_id, status))
    )


@ticket.command(name="list")
@click.option(
    "--status",
    "ticket_status",
    type=click.Choice([s.value for s in TicketStatus]),
    default=None,
    help="Filter by status.",
)
@click.pass_obj
def list_tickets(app: AppContext, ticket_status: str | None) -> None:
    """List tickets for the selected restaurant."""
    restaurant_id = app.restaurant_id
    filters = TicketFilters(status=ticket_status)
    app.emit(app.run(lambda backend: TicketService(backend).list_tickets(restaurant_id, filters)))


@ticket.command()
@click.argument("ticket_id")
@click.pass_obj
def messages(app: AppContext, ticket_id: str) -> None:
    """Show the conversation on a ticket, oldest first."""
    app.emit(app.run(lambda backend: TicketService(backend).get_ticket_messages(ticket_id)))
