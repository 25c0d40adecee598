"""Restaurant aggregate: auto-reply settings and weekly funnel snapshots.

Auto-reply settings have no state machine; they change only through
partial updates built here. Snapshot rules are pure functions used to
compare weeks and flag operational thresholds.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

NonNegativeInt = Annotated[int, Field(ge=0)]
NonNegativeFloat = Annotated[float, Field(ge=0)]


class AutoReplyMode(StrEnum):
    TEMPLATE = "template"
    AI = "ai"


class ReplyTarget(StrEnum):
    """Which half of the auto-reply settings an update addresses."""

    REVIEWS = "review"
    TICKETS = "ticket"


class Restaurant(BaseModel):
    model_config = {"frozen": True}

    id: str
    account_id: str | None = None
    external_restaurant_id: Annotated[str, Field(min_length=1)]
    name: Annotated[str, Field(min_length=1)]
    address: str | None = None
    is_active: bool = True
    review_auto_reply_enabled: bool = False
    review_auto_reply_mode: AutoReplyMode = AutoReplyMode.TEMPLATE
    review_reply_template: str | None = None
    review_ai_prompt: str | None = None
    ticket_auto_reply_enabled: bool = False
    ticket_auto_reply_mode: AutoReplyMode = AutoReplyMode.TEMPLATE
    ticket_reply_template: str | None = None
    ticket_ai_prompt: str | None = None
    created_at: datetime
    updated_at: datetime


class RestaurantSettingsUpdate(BaseModel):
    """Partial settings write. Only fields explicitly set are applied."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    review_auto_reply_enabled: bool | None = None
    review_auto_reply_mode: AutoReplyMode | None = None
    review_reply_template: str | None = None
    review_ai_prompt: str | None = None
    ticket_auto_reply_enabled: bool | None = None
    ticket_auto_reply_mode: AutoReplyMode | None = None
    ticket_reply_template: str | None = None
    ticket_ai_prompt: str | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)

    @classmethod
    def toggle(cls, target: ReplyTarget, enabled: bool) -> RestaurantSettingsUpdate:
        return cls.model_validate({f"{target}_auto_reply_enabled": enabled})


class AutoReplySettingsPatch(BaseModel):
    """Caller-facing patch for one reply target.

    ``None`` clears ``template``/``ai_prompt``; omitting a key leaves the
    stored value untouched.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    mode: AutoReplyMode | None = None
    template: Annotated[str, Field(max_length=2000)] | None = None
    ai_prompt: Annotated[str, Field(max_length=4000)] | None = None

    def for_target(self, target: ReplyTarget) -> RestaurantSettingsUpdate:
        columns = {
            "mode": f"{target}_auto_reply_mode",
            "template": f"{target}_reply_template",
            "ai_prompt": f"{target}_ai_prompt",
        }
        patch = {columns[key]: value for key, value in self.model_dump(exclude_unset=True).items()}
        return RestaurantSettingsUpdate.model_validate(patch)


# --- Snapshots ---


class RestaurantSnapshot(BaseModel):
    """One week of funnel counters and operational rates."""

    model_config = {"frozen": True}

    id: str
    restaurant_id: str
    week_start: date
    week_end: date
    visits: NonNegativeInt
    views: NonNegativeInt
    to_cart: NonNegativeInt
    checkout: NonNegativeInt
    completed: NonNegativeInt
    cancellation_rate: NonNegativeFloat
    open_time_rate: NonNegativeFloat
    open_tickets_rate: NonNegativeFloat
    new_customers_rate: NonNegativeFloat
    created_at: datetime


FUNNEL_STEPS: tuple[str, ...] = ("visits", "views", "to_cart", "checkout", "completed")


class AlertThresholds(BaseModel):
    """Operational limits a weekly snapshot is checked against."""

    model_config = {"frozen": True}

    cancellation_max: float = 0.02
    open_time_min: float = 0.95
    open_tickets_max: float = 0.03
    new_customers_high: float = 0.9
    new_customers_low: float = 0.1


class StepComparison(BaseModel):
    model_config = {"frozen": True}

    step: str
    diff: int
    percentage: float


class PerformanceData(BaseModel):
    model_config = {"frozen": True}

    current: RestaurantSnapshot
    previous: RestaurantSnapshot | None = None
    comparison: list[StepComparison] = Field(default_factory=list)
    alerts: list[str] = Field(default_factory=list)
    conversion_rate: float = 0.0


def percentage_change(current: float, previous: float) -> float:
    """Relative change in percent; ``0`` when *previous* is zero."""
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


class RestaurantRules:
    @staticmethod
    def has_high_cancellation(snapshot: RestaurantSnapshot, thresholds: AlertThresholds) -> bool:
        return snapshot.cancellation_rate > thresholds.cancellation_max

    @staticmethod
    def has_low_open_time(snapshot: RestaurantSnapshot, thresholds: AlertThresholds) -> bool:
        return snapshot.open_time_rate < thresholds.open_time_min

    @staticmethod
    def has_high_open_tickets(snapshot: RestaurantSnapshot, thresholds: AlertThresholds) -> bool:
        return snapshot.open_tickets_rate > thresholds.open_tickets_max

    @staticmethod
    def has_unbalanced_customers(snapshot: RestaurantSnapshot, thresholds: AlertThresholds) -> bool:
        return (
            snapshot.new_customers_rate > thresholds.new_customers_high
            or snapshot.new_customers_rate < thresholds.new_customers_low
        )

    @staticmethod
    def get_alerts(
        snapshot: RestaurantSnapshot,
        thresholds: AlertThresholds | None = None,
    ) -> list[str]:
        t = thresholds or AlertThresholds()
        alerts: list[str] = []
        if RestaurantRules.has_high_cancellation(snapshot, t):
            alerts.append(f"Cancellation rate above {t.cancellation_max:.0%}")
        if RestaurantRules.has_low_open_time(snapshot, t):
            alerts.append(f"Open time below {t.open_time_min:.0%}")
        if RestaurantRules.has_high_open_tickets(snapshot, t):
            alerts.append(f"Open tickets above {t.open_tickets_max:.0%}")
        if RestaurantRules.has_unbalanced_customers(snapshot, t):
            alerts.append("New/returning customer mix is unbalanced")
        return alerts

    @staticmethod
    def calculate_conversion_rate(snapshot: RestaurantSnapshot) -> float:
        if snapshot.visits == 0:
            return 0.0
        return snapshot.completed / snapshot.visits

    @staticmethod
    def compare_snapshots(
        current: RestaurantSnapshot,
        previous: RestaurantSnapshot,
    ) -> list[StepComparison]:
        comparison: list[StepComparison] = []
        for step in FUNNEL_STEPS:
            cur = getattr(current, step)
            prev = getattr(previous, step)
            comparison.append(
                StepComparison(step=step, diff=cur - prev, percentage=percentage_change(cur, prev))
            )
        return comparison

    @staticmethod
    def newest_first(snapshots: list[RestaurantSnapshot]) -> list[RestaurantSnapshot]:
        return sorted(snapshots, key=lambda s: s.week_start, reverse=True)
