"""Command group: synced restaurants and their catalogs."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from restodesk.commands._base import RestoGroup
from restodesk.infrastructure.repositories.contracts import CatalogFilters, RestaurantFilters
from restodesk.services.restaurants import RestaurantService

if TYPE_CHECKING:
    from restodesk.commands._context import AppContext


@click.group(
    cls=RestoGroup,
    examples="""\
  restodesk restaurant list --active --search pizza
  restodesk -r <restaurant-id> restaurant catalog --category pizzas --available""",
)
@click.pass_obj
def restaurant(app: AppContext) -> None:
    """Browse restaurants and their menu catalogs."""


@restaurant.command(name="list")
@click.option("--active", is_flag=True, help="Only restaurants that are still active.")
@click.option("--account", "account_id", default=None, help="Only restaurants of this account.")
@click.option("--search", default=None, help="Case-insensitive match on the name.")
@click.pass_obj
def list_restaurants(
    app: AppContext, active: bool, account_id: str | None, search: str | None
) -> None:
    """List every synced restaurant."""
    filters = RestaurantFilters(
        is_active=True if active else None, account_id=account_id, search=search
    )
    app.emit(app.run(lambda backend: RestaurantService(backend).list_restaurants(filters)))


@restaurant.command()
@click.option("--category", "category_id", default=None, help="Only items in this category.")
@click.option("--available", is_flag=True, help="Only items currently on sale.")
@click.option("--search", default=None, help="Case-insensitive match on the item name.")
@click.pass_obj
def catalog(app: AppContext, category_id: str | None, available: bool, search: str | None) -> None:
    """List the menu catalog of the selected restaurant."""
    restaurant_id = app.restaurant_id
    filters = CatalogFilters(
        category_id=category_id, is_available=True if available else None, search=search
    )
    app.emit(
        app.run(
            lambda backend: RestaurantService(backend).list_catalog_items(restaurant_id, filters)
        )
    )
