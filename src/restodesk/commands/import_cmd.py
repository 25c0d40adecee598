"""Command: load marketplace sync dumps into the workspace database."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import click

from restodesk.commands._base import RestoCommand
from restodesk.services.workspace import WorkspaceService

if TYPE_CHECKING:
    from restodesk.commands._context import AppContext


@click.command(
    "import",
    cls=RestoCommand,
    examples="""\
  restodesk import sync/2024-03-10.json
  restodesk --json import dump.json""",
)
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def import_cmd(app: AppContext, source: Path) -> None:
    """Import restaurants, catalog, reviews, tickets and ledger entries from JSON."""
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"Invalid JSON in {source}: {exc}") from exc
    if not isinstance(payload, dict):
        raise click.ClickException(f"{source} must contain a JSON object of sections")

    app.emit(app.run(lambda backend: WorkspaceService(backend).import_data(payload)))
