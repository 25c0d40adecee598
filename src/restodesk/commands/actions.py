"""Command group: remediation actions."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from restodesk.commands._base import RestoGroup
from restodesk.domain.action import ActionType
from restodesk.domain.lifecycle import ActionStatus
from restodesk.infrastructure.repositories.contracts import ActionFilters
from restodesk.services.actions import ActionService

if TYPE_CHECKING:
    from restodesk.commands._context import AppContext

_ACTION_EXAMPLES = """\
  restodesk action create "Shorten prep time" --type operational --week-start 2024-03-04
  restodesk action done <action-id> "Prep time down to 18 min" -a https://files/shot.png
  restodesk action discard <action-id> "Supplier unavailable"
  restodesk action list --status planned"""


@click.group(cls=RestoGroup, examples=_ACTION_EXAMPLES)
@click.pass_obj
def action(app: AppContext) -> None:
    """Plan and close remediation actions."""


@action.command()
@click.argument("title")
@click.option(
    "--type",
    "action_type",
    type=click.Choice([t.value for t in ActionType]),
    required=True,
    help="Action category.",
)
@click.option("--week-start", required=True, help="Week the action belongs to (YYYY-MM-DD).")
@click.option("--report", "report_id", default=None, help="Report that motivated the action.")
@click.option("--description", default=None, help="Longer description.")
@click.option("--goal", default=None, help="Expected outcome.")
@click.option("--target", default=None, help="What the action targets.")
@click.pass_obj
def create(
    app: AppContext,
    title: str,
    action_type: str,
    week_start: str,
    report_id: str | None,
    description: str | None,
    goal: str | None,
    target: str | None,
) -> None:
    """Create a planned action for the selected restaurant."""
    data = {
        "restaurant_id": app.restaurant_id,
        "report_id": report_id,
        "week_start": week_start,
        "title": title,
        "description": description,
        "goal": goal,
        "action_type": action_type,
        "target": target,
    }
    app.emit(
        app.run(lambda backend: ActionService(backend).create_action(data, actor_id=app.actor_id))
    )


@action.command()
@click.argument("action_id")
@click.argument("evidence")
@click.option("-a", "--attachment", "attachments", multiple=True, help="Evidence URL (repeatable).")
@click.pass_obj
def done(app: AppContext, action_id: str, evidence: str, attachments: tuple[str, ...]) -> None:
    """Mark a planned action as done."""
    app.emit(
        app.run(
            lambda backend: ActionService(backend).mark_action_done(
                action_id, evidence, attachments=list(attachments), actor_id=app.actor_id
            )
        )
    )


@action.command()
@click.argument("action_id")
@click.argument("reason")
@click.pass_obj
def discard(app: AppContext, action_id: str, reason: str) -> None:
    """Discard a planned action."""
    app.emit(
        app.run(
            lambda backend: ActionService(backend).mark_action_discarded(
                action_id, reason, actor_id=app.actor_id
            )
        )
    )


@action.command(name="list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in ActionStatus]),
    default=None,
    help="Filter by status.",
)
@click.option(
    "--type",
    "action_type",
    type=click.Choice([t.value for t in ActionType]),
    default=None,
    help="Filter by category.",
)
@click.option("--report", "report_id", default=None, help="Filter by report.")
@click.pass_obj
def list_actions(
    app: AppContext, status: str | None, action_type: str | None, report_id: str | None
) -> None:
    """List actions for the selected restaurant."""
    restaurant_id = app.restaurant_id
    filters = ActionFilters(status=status, action_type=action_type, report_id=report_id)
    app.emit(app.run(lambda backend: ActionService(backend).list_actions(restaurant_id, filters)))
