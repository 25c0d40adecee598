"""Action entity: a remediation task tied to a restaurant and week."""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, StringConstraints

from restodesk.domain.lifecycle import ACTION_TRANSITIONS, ActionStatus, is_valid_transition
from restodesk.domain.validation import NonBlankStr, UuidStr


class ActionType(StrEnum):
    MENU_ADJUSTMENT = "menu_adjustment"
    PROMOTION = "promotion"
    RESPONSE = "response"
    OPERATIONAL = "operational"
    MARKETING = "marketing"
    OTHER = "other"


class Action(BaseModel):
    """Persisted action. Audit fields are filled by the terminal transitions."""

    model_config = {"frozen": True}

    id: str
    restaurant_id: str
    report_id: str | None = None
    week_start: date
    title: Annotated[str, Field(min_length=1)]
    description: str | None = None
    goal: str | None = None
    action_type: ActionType
    payload: dict[str, Any] | None = None
    target: str | None = None
    status: ActionStatus = ActionStatus.PLANNED
    done_evidence: str | None = None
    done_attachments: list[str] | None = None
    done_by: str | None = None
    done_at: datetime | None = None
    discarded_reason: str | None = None
    discarded_by: str | None = None
    discarded_at: datetime | None = None
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime


# --- Inputs ---


class CreateActionInput(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    restaurant_id: UuidStr
    report_id: UuidStr | None = None
    week_start: date
    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
    description: str | None = None
    goal: str | None = None
    action_type: ActionType
    payload: dict[str, Any] | None = None
    target: str | None = None


class MarkDoneInput(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    action_id: NonBlankStr
    evidence: NonBlankStr
    attachments: list[HttpUrl] = Field(default_factory=list)


class MarkDiscardedInput(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    action_id: NonBlankStr
    reason: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]


# --- Rules ---


class ActionRules:
    """Pure transition and guard predicates for actions."""

    @staticmethod
    def can_transition_to(action: Action, target: str) -> bool:
        return is_valid_transition(action.status, target, ACTION_TRANSITIONS)

    @staticmethod
    def can_mark_done(action: Action) -> bool:
        return ActionRules.can_transition_to(action, ActionStatus.DONE)

    @staticmethod
    def can_discard(action: Action) -> bool:
        return ActionRules.can_transition_to(action, ActionStatus.DISCARDED)
