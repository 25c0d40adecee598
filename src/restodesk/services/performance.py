"""PerformanceService: week-over-week funnel comparison and alerts."""

from __future__ import annotations

from datetime import date

from restodesk.domain.errors import DomainError, NotFoundError
from restodesk.domain.restaurant import AlertThresholds, PerformanceData, RestaurantRules
from restodesk.domain.validation import require_id
from restodesk.infrastructure.repositories.contracts import SnapshotFilters
from restodesk.services.base import BaseService, use_case
from restodesk.services.telemetry import traced


class PerformanceService(BaseService):
    @traced
    @use_case("get_performance_data")
    async def get_performance_data(
        self,
        restaurant_id: str,
        *,
        thresholds: AlertThresholds | None = None,
        as_of: date | None = None,
    ) -> PerformanceData | DomainError:
        """Compare the newest snapshot with the one before it.

        With *as_of*, only weeks starting on or before that date count, so a
        past week can be reviewed. Alerts use *thresholds*, falling back to
        the configured ``[alerts]`` section.
        """
        if err := require_id(restaurant_id, "restaurant_id", "Restaurant ID"):
            return err

        snapshots = await self._repos.restaurants.get_snapshots(
            restaurant_id, SnapshotFilters(week_end=as_of)
        )
        if not snapshots:
            return NotFoundError(
                message="No performance data available for this restaurant",
                entity="restaurant_snapshot",
                id=restaurant_id,
            )

        ordered = RestaurantRules.newest_first(snapshots)
        current = ordered[0]
        previous = ordered[1] if len(ordered) > 1 else None
        limits = thresholds or self._backend.settings.alerts

        return PerformanceData(
            current=current,
            previous=previous,
            comparison=RestaurantRules.compare_snapshots(current, previous) if previous else [],
            alerts=RestaurantRules.get_alerts(current, limits),
            conversion_rate=RestaurantRules.calculate_conversion_rate(current),
        )
