"""Command group: financial ledger and performance."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import click

from restodesk.commands._base import RestoCommand, RestoGroup
from restodesk.domain.financial import ExportFormat
from restodesk.services.financial import FinancialService
from restodesk.services.performance import PerformanceService
from restodesk.services.result import ok

if TYPE_CHECKING:
    from restodesk.commands._context import AppContext


@click.group(
    cls=RestoGroup,
    examples="""\
  restodesk finance summary --start 2024-03-01 --end 2024-03-31
  restodesk finance export --start 2024-03-01 --end 2024-03-31 --format xls -o exports/""",
)
@click.pass_obj
def finance(app: AppContext) -> None:
    """Summaries and exports of the restaurant ledger."""


@finance.command()
@click.option("--start", "start_date", required=True, help="First day (YYYY-MM-DD).")
@click.option("--end", "end_date", required=True, help="Last day (YYYY-MM-DD).")
@click.pass_obj
def summary(app: AppContext, start_date: str, end_date: str) -> None:
    """Totals per entry type for a date range."""
    restaurant_id = app.restaurant_id
    app.emit(
        app.run(
            lambda backend: FinancialService(backend).get_financial_summary(
                restaurant_id, start_date, end_date
            )
        )
    )


@finance.command()
@click.option("--start", "start_date", required=True, help="First day (YYYY-MM-DD).")
@click.option("--end", "end_date", required=True, help="Last day (YYYY-MM-DD).")
@click.option(
    "--format",
    "fmt",
    type=click.Choice([f.value for f in ExportFormat]),
    default=ExportFormat.CSV.value,
    show_default=True,
)
@click.option(
    "-o",
    "--output",
    "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    help="Directory the export is written to.",
)
@click.pass_obj
def export(app: AppContext, start_date: str, end_date: str, fmt: str, output_dir: Path) -> None:
    """Write the ledger for a date range to a file."""
    restaurant_id = app.restaurant_id
    result = app.run(
        lambda backend: FinancialService(backend).export_financial_data(
            restaurant_id, start_date, end_date, fmt
        )
    )
    if not result.ok:
        app.emit(result)
        return

    exported = result.data
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / exported.filename
    target.write_bytes(exported.content)
    app.emit(
        ok(
            {"path": str(target), "format": str(exported.format), "bytes": len(exported.content)},
            op=result.op,
            warnings=result.warnings,
        )
    )


@click.command(
    cls=RestoCommand,
    examples="""\
  restodesk -r <restaurant-id> performance
  restodesk performance --as-of 2024-03-04
  restodesk --json performance"""
)
@click.option(
    "--as-of",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Ignore weeks starting after this date (YYYY-MM-DD).",
)
@click.pass_obj
def performance(app: AppContext, as_of: datetime | None) -> None:
    """Week-over-week funnel comparison with alerts."""
    restaurant_id = app.restaurant_id
    cutoff = as_of.date() if as_of else None
    app.emit(
        app.run(
            lambda backend: PerformanceService(backend).get_performance_data(
                restaurant_id, as_of=cutoff
            )
        )
    )
