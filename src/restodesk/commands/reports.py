"""Command group: weekly reports."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from restodesk.commands._base import RestoGroup
from restodesk.domain.lifecycle import ReportStatus
from restodesk.domain.report import DeliveryChannel
from restodesk.infrastructure.repositories.contracts import ChecklistFilters, ReportFilters
from restodesk.services.checklists import ChecklistService
from restodesk.services.reports import ReportService

if TYPE_CHECKING:
    from restodesk.commands._context import AppContext

_REPORT_EXAMPLES = """\
  restodesk report generate --week-start 2024-03-04 --week-end 2024-03-10
  restodesk report complete <report-id> https://files/r.pdf sha256:abc
  restodesk report send <report-id> --channel email --channel whatsapp
  restodesk report notes <report-id> "Call the owner about delivery times"
  restodesk report show-notes <report-id>
  restodesk report checklist --week-start 2024-03-04 --unchecked
  restodesk report list --status sent"""


@click.group(cls=RestoGroup, examples=_REPORT_EXAMPLES)
@click.pass_obj
def report(app: AppContext) -> None:
    """Generate, deliver and annotate weekly reports."""


@report.command()
@click.option("--week-start", required=True, help="First day of the week (YYYY-MM-DD).")
@click.option("--week-end", required=True, help="Last day of the week (YYYY-MM-DD).")
@click.pass_obj
def generate(app: AppContext, week_start: str, week_end: str) -> None:
    """Request a report for one week."""
    restaurant_id = app.restaurant_id
    app.emit(
        app.run(
            lambda backend: ReportService(backend).generate_report(
                restaurant_id, week_start, week_end
            )
        )
    )


@report.command()
@click.argument("report_id")
@click.argument("artifact_url")
@click.argument("content_hash")
@click.pass_obj
def complete(app: AppContext, report_id: str, artifact_url: str, content_hash: str) -> None:
    """Record the rendered document for a report being generated."""
    app.emit(
        app.run(
            lambda backend: ReportService(backend).complete_report_generation(
                report_id, artifact_url, content_hash
            )
        )
    )


@report.command(
    examples="""\
  restodesk report send <report-id> --channel email
  restodesk --actor <user-id> report send <report-id> -C email -C whatsapp"""
)
@click.argument("report_id")
@click.option(
    "-C",
    "--channel",
    "channels",
    multiple=True,
    type=click.Choice([c.value for c in DeliveryChannel]),
    required=True,
    help="Delivery channel (repeatable).",
)
@click.pass_obj
def send(app: AppContext, report_id: str, channels: tuple[str, ...]) -> None:
    """Queue delivery of a generated report."""
    app.emit(
        app.run(
            lambda backend: ReportService(backend).send_report(
                report_id, list(channels), actor_id=app.actor_id
            )
        )
    )


@report.command()
@click.argument("report_id")
@click.pass_obj
def delivered(app: AppContext, report_id: str) -> None:
    """Confirm that every channel delivered the report."""
    app.emit(app.run(lambda backend: ReportService(backend).complete_report_delivery(report_id)))


@report.command()
@click.argument("report_id")
@click.argument("reason")
@click.pass_obj
def fail(app: AppContext, report_id: str, reason: str) -> None:
    """Mark generation or delivery as failed."""
    app.emit(app.run(lambda backend: ReportService(backend).fail_report(report_id, reason)))


@report.command()
@click.argument("report_id")
@click.argument("content")
@click.pass_obj
def notes(app: AppContext, report_id: str, content: str) -> None:
    """Replace the internal notes attached to a report."""
    app.emit(
        app.run(
            lambda backend: ReportService(backend).update_internal_content(
                report_id, content, actor_id=app.actor_id
            )
        )
    )


@report.command(name="show-notes")
@click.argument("report_id")
@click.pass_obj
def show_notes(app: AppContext, report_id: str) -> None:
    """Show the internal notes attached to a report."""
    app.emit(app.run(lambda backend: ReportService(backend).get_internal_content(report_id)))


@report.command(name="list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in ReportStatus]),
    default=None,
    help="Filter by status.",
)
@click.option("--week-start", default=None, help="Only weeks starting on or after this date.")
@click.pass_obj
def list_reports(app: AppContext, status: str | None, week_start: str | None) -> None:
    """List reports for the selected restaurant."""
    restaurant_id = app.restaurant_id
    try:
        filters = ReportFilters(status=status, week_start=week_start)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--week-start") from exc
    app.emit(app.run(lambda backend: ReportService(backend).list_reports(restaurant_id, filters)))


@report.command()
@click.argument("report_id")
@click.pass_obj
def logs(app: AppContext, report_id: str) -> None:
    """Show per-channel delivery logs."""
    app.emit(app.run(lambda backend: ReportService(backend).get_send_logs(report_id)))


# --- Weekly checklist ---


@report.command(name="checklist")
@click.option("--week-start", default=None, help="Only items for this week (YYYY-MM-DD).")
@click.option("--report", "report_id", default=None, help="Only items attached to this report.")
@click.option("--unchecked", is_flag=True, help="Only items still open.")
@click.pass_obj
def checklist(
    app: AppContext, week_start: str | None, report_id: str | None, unchecked: bool
) -> None:
    """List the weekly checklist for the selected restaurant."""
    restaurant_id = app.restaurant_id
    try:
        filters = ChecklistFilters(
            week_start=week_start, report_id=report_id, is_checked=False if unchecked else None
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--week-start") from exc
    app.emit(
        app.run(lambda backend: ChecklistService(backend).list_checklist(restaurant_id, filters))
    )


@report.command(name="checklist-add")
@click.argument("title")
@click.option("--week-start", default=None, help="Week the item belongs to (YYYY-MM-DD).")
@click.option("--report", "report_id", default=None, help="Report the item belongs to.")
@click.pass_obj
def checklist_add(
    app: AppContext, title: str, week_start: str | None, report_id: str | None
) -> None:
    """Add an item to a week's or a report's checklist."""
    data = {
        "restaurant_id": app.restaurant_id,
        "report_id": report_id,
        "week_start": week_start,
        "title": title,
    }
    app.emit(app.run(lambda backend: ChecklistService(backend).add_checklist_item(data)))


@report.command()
@click.argument("item_id")
@click.option(
    "--set",
    "state",
    type=click.Choice(["checked", "unchecked"]),
    default=None,
    help="Set the item explicitly instead of flipping it.",
)
@click.pass_obj
def check(app: AppContext, item_id: str, state: str | None) -> None:
    """Tick or untick a checklist item."""
    checked = None if state is None else state == "checked"
    app.emit(
        app.run(
            lambda backend: ChecklistService(backend).toggle_checklist_item(
                item_id, checked=checked, actor_id=app.actor_id
            )
        )
    )
