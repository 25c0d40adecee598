"""Command: workspace initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import click

from restodesk.commands._base import RestoCommand
from restodesk.services.workspace import WorkspaceService

if TYPE_CHECKING:
    from restodesk.commands._context import AppContext

_INIT_EXAMPLES = """\
  restodesk init
  restodesk init /srv/desk --restaurant 6f1c0d8e-0000-4000-8000-000000000001
  restodesk init . --database-url postgresql+asyncpg://desk@db/desk"""


@click.command("init", cls=RestoCommand, examples=_INIT_EXAMPLES)
@click.argument("path", required=False, default=".")
@click.option("--database-url", default=None, help="SQLAlchemy URL instead of a local SQLite file.")
@click.option("--restaurant", "restaurant_id", default=None, help="Default restaurant ID.")
@click.pass_obj
def init_cmd(
    app: AppContext, path: str, database_url: str | None, restaurant_id: str | None
) -> None:
    """Create restodesk.toml and the database schema."""
    app.emit(
        asyncio.run(
            WorkspaceService.init_workspace(
                Path(path).resolve(), database_url=database_url, restaurant_id=restaurant_id
            )
        )
    )
