"""Dashboard user profile and account-management rules."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated

from pydantic import BaseModel, Field


class ThemePreference(StrEnum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class UserProfile(BaseModel):
    model_config = {"frozen": True}

    id: str
    email: str
    full_name: Annotated[str, Field(min_length=1)]
    avatar_url: str | None = None
    is_active: bool = True
    theme_preference: ThemePreference = ThemePreference.LIGHT
    created_at: datetime
    updated_at: datetime


class UserRules:
    @staticmethod
    def is_active(user: UserProfile) -> bool:
        return user.is_active

    @staticmethod
    def can_deactivate(user: UserProfile, target: UserProfile) -> bool:
        """Active users may deactivate anyone but themselves."""
        return user.id != target.id and user.is_active
