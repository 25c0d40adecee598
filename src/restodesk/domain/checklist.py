"""Checklist entity: the weekly to-do items reviewed alongside a report."""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, StringConstraints, model_validator

from restodesk.domain.validation import UuidStr


class ChecklistItem(BaseModel):
    """Persisted checklist item. ``checked_by``/``checked_at`` are set only while checked."""

    model_config = {"frozen": True}

    id: str
    restaurant_id: str
    report_id: str | None = None
    week_start: date | None = None
    title: str
    is_checked: bool = False
    checked_by: str | None = None
    checked_at: datetime | None = None
    created_at: datetime


# --- Inputs ---


class CreateChecklistItemInput(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    restaurant_id: UuidStr
    report_id: UuidStr | None = None
    week_start: date | None = None
    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]

    @model_validator(mode="after")
    def _anchored(self) -> CreateChecklistItemInput:
        if self.report_id is None and self.week_start is None:
            raise ValueError("A checklist item needs a report_id or a week_start")
        return self


# --- Rules ---


class ChecklistRules:
    @staticmethod
    def state(is_checked: bool) -> str:
        return "checked" if is_checked else "unchecked"

    @staticmethod
    def check_fields(is_checked: bool, actor_id: str | None, now: datetime) -> dict[str, Any]:
        """Column values for setting *is_checked*; unchecking clears the audit pair."""
        if is_checked:
            return {"is_checked": True, "checked_by": actor_id, "checked_at": now}
        return {"is_checked": False, "checked_by": None, "checked_at": None}
