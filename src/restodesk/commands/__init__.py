"""Subcommand modules for restodesk.

Provides register_commands() which uses deferred imports to keep
``restodesk --help`` fast as the codebase grows.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from restodesk.commands.actions import action
    from restodesk.commands.auto_reply import auto_reply
    from restodesk.commands.finance import finance
    from restodesk.commands.images import image
    from restodesk.commands.reports import report
    from restodesk.commands.restaurants import restaurant
    from restodesk.commands.support import review, ticket
    from restodesk.commands.users import user

    cli.add_command(image)
    cli.add_command(report)
    cli.add_command(action)
    cli.add_command(review)
    cli.add_command(ticket)
    cli.add_command(auto_reply)
    cli.add_command(finance)
    cli.add_command(user)
    cli.add_command(restaurant)

    # --- Standalone commands ---
    from restodesk.commands.finance import performance
    from restodesk.commands.import_cmd import import_cmd
    from restodesk.commands.init_cmd import init_cmd

    cli.add_command(init_cmd)
    cli.add_command(import_cmd)
    cli.add_command(performance)
