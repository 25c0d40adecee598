"""Command group: auto-reply settings."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from restodesk.commands._base import RestoGroup
from restodesk.domain.restaurant import AutoReplyMode, ReplyTarget
from restodesk.services.settings import SettingsService

if TYPE_CHECKING:
    from restodesk.commands._context import AppContext

_target_option = click.option(
    "--target",
    type=click.Choice([t.value for t in ReplyTarget]),
    default=ReplyTarget.REVIEWS.value,
    show_default=True,
    help="Which inbox the setting applies to.",
)


@click.group(
    name="auto-reply",
    cls=RestoGroup,
    examples="""\
  restodesk auto-reply toggle on
  restodesk auto-reply toggle off --target ticket
  restodesk auto-reply set --mode ai --prompt "Friendly, two sentences max"
  restodesk auto-reply set --template "Thanks {name}!" --clear-prompt""",
)
@click.pass_obj
def auto_reply(app: AppContext) -> None:
    """Configure automatic replies to reviews and tickets."""


@auto_reply.command()
@click.argument("state", type=click.Choice(["on", "off"]))
@_target_option
@click.pass_obj
def toggle(app: AppContext, state: str, target: str) -> None:
    """Turn auto-reply on or off."""
    restaurant_id = app.restaurant_id
    app.emit(
        app.run(
            lambda backend: SettingsService(backend).toggle_auto_reply(
                restaurant_id, state == "on", target
            )
        )
    )


@auto_reply.command(name="set")
@_target_option
@click.option(
    "--mode", type=click.Choice([m.value for m in AutoReplyMode]), default=None, help="Reply mode."
)
@click.option("--template", default=None, help="Reply template.")
@click.option("--prompt", "ai_prompt", default=None, help="Prompt for AI replies.")
@click.option("--clear-template", is_flag=True, help="Remove the stored template.")
@click.option("--clear-prompt", is_flag=True, help="Remove the stored prompt.")
@click.pass_obj
def set_settings(
    app: AppContext,
    target: str,
    mode: str | None,
    template: str | None,
    ai_prompt: str | None,
    clear_template: bool,
    clear_prompt: bool,
) -> None:
    """Update mode, template or prompt. Unnamed fields are left unchanged."""
    restaurant_id = app.restaurant_id
    changes: dict[str, Any] = {}
    if mode is not None:
        changes["mode"] = mode
    if clear_template:
        changes["template"] = None
    elif template is not None:
        changes["template"] = template
    if clear_prompt:
        changes["ai_prompt"] = None
    elif ai_prompt is not None:
        changes["ai_prompt"] = ai_prompt
    app.emit(
        app.run(
            lambda backend: SettingsService(backend).update_auto_reply_settings(
                restaurant_id, changes, target
            )
        )
    )
