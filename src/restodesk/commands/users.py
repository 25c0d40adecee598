"""Command group: account administration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from restodesk.commands._base import RestoGroup
from restodesk.domain.errors import UnauthorizedError
from restodesk.services.admin import AdminService
from restodesk.services.result import fail

if TYPE_CHECKING:
    from restodesk.commands._context import AppContext
    from restodesk.infrastructure.backend import Backend
    from restodesk.services.result import Fail, Ok


@click.group(
    cls=RestoGroup,
    examples="""\
  restodesk --actor <admin-id> user deactivate <user-id>""",
)
@click.pass_obj
def user(app: AppContext) -> None:
    """Manage user accounts."""


@user.command()
@click.argument("target_user_id")
@click.pass_obj
def deactivate(app: AppContext, target_user_id: str) -> None:
    """Deactivate another user's account. Acts as --actor."""
    actor_id = app.actor_id

    async def _deactivate(backend: Backend) -> Ok[object] | Fail:
        current = await backend.repos.users.get_by_id(actor_id) if actor_id else None
        if current is None:
            return fail(
                UnauthorizedError(
                    message="Set --actor to an existing user to manage accounts",
                    action="deactivate_user",
                ),
                op="deactivate_user",
            )
        return await AdminService(backend).deactivate_user(current, target_user_id)

    app.emit(app.run(_deactivate))
