"""AppContext: shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Runs service coroutines against a freshly connected
backend and centralizes result emission (stdout/stderr routing and exit
codes).
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

import click

from restodesk.output.formatters import format_result

if TYPE_CHECKING:
    from restodesk.config.settings import RestoSettings
    from restodesk.infrastructure.backend import Backend
    from restodesk.services.result import Fail, Ok

_T = TypeVar("_T")


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    No backend is opened until a command calls :meth:`run`, so ``--help``
    and ``--version`` never touch the database.
    """

    def __init__(self, settings: RestoSettings) -> None:
        self.settings = settings

        from restodesk.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from restodesk.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def restaurant_id(self) -> str:
        """Restaurant selected with ``--restaurant`` or the configured default."""
        if not self.settings.default_restaurant_id:
            raise click.UsageError(
                "No restaurant selected. Pass --restaurant or set default_restaurant_id."
            )
        return self.settings.default_restaurant_id

    @property
    def actor_id(self) -> str | None:
        return self.settings.actor_id

    def run(self, call: Callable[[Backend], Awaitable[_T]]) -> _T:
        """Connect a backend, await ``call(backend)`` and close it again."""
        from restodesk.infrastructure.backend import Backend

        async def _main() -> _T:
            backend = await Backend.connect(self.settings)
            try:
                return await call(backend)
            finally:
                await backend.close()

        return asyncio.run(_main())

    def emit(self, result: Ok[Any] | Fail) -> None:
        """Format and output a Result with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings go to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        output = format_result(result, json_output=self.settings.json_output)
        if result.ok:
            click.echo(output)
            if not self.settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
