"""RestaurantService: browse the synced restaurants and their catalogs."""

from __future__ import annotations

from restodesk.domain.catalog import CatalogItem
from restodesk.domain.errors import DomainError, NotFoundError
from restodesk.domain.restaurant import Restaurant
from restodesk.domain.validation import require_id
from restodesk.infrastructure.repositories.contracts import CatalogFilters, RestaurantFilters
from restodesk.services.base import BaseService, use_case
from restodesk.services.telemetry import traced


class RestaurantService(BaseService):
    @traced
    @use_case("list_restaurants")
    async def list_restaurants(
        self, filters: RestaurantFilters | None = None
    ) -> list[Restaurant] | DomainError:
        return await self._repos.restaurants.get_all(filters)

    @traced
    @use_case("list_catalog_items")
    async def list_catalog_items(
        self, restaurant_id: str, filters: CatalogFilters | None = None
    ) -> list[CatalogItem] | DomainError:
        """Catalog items of one restaurant, ordered by name."""
        if err := require_id(restaurant_id, "restaurant_id", "Restaurant ID"):
            return err
        restaurant = await self._repos.restaurants.get_by_id(restaurant_id)
        if restaurant is None:
            return NotFoundError.for_entity("restaurant", restaurant_id)
        return await self._repos.catalog.get_items_by_restaurant(restaurant_id, filters)
