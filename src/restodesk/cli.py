"""Root CLI group for restodesk with global flags and command registration."""

from __future__ import annotations

import click

from restodesk import __version__
from restodesk.commands import register_commands
from restodesk.commands._context import AppContext
from restodesk.config.settings import RestoSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="restodesk")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "-r", "--restaurant", "restaurant_id", default=None, help="Restaurant to operate on."
)
@click.option("--actor", "actor_id", default=None, help="User recorded on approvals and edits.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    restaurant_id: str | None,
    actor_id: str | None,
) -> None:
    """restodesk: restaurant operations desk."""
    ctx.ensure_object(dict)
    settings = RestoSettings.from_cli(
        config_path=config_path,
        json_output=json_output or None,
        verbose=verbose or None,
        log_json=log_json or None,
        default_restaurant_id=restaurant_id,
        actor_id=actor_id,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
