"""AdminService: account management."""

from __future__ import annotations

from restodesk.domain.errors import BusinessRuleError, DomainError, NotFoundError, UnauthorizedError
from restodesk.domain.user import UserProfile, UserRules
from restodesk.domain.validation import require_id
from restodesk.services.base import BaseService, use_case
from restodesk.services.telemetry import traced


class AdminService(BaseService):
    @traced
    @use_case("deactivate_user")
    async def deactivate_user(
        self, current_user: UserProfile, target_user_id: str
    ) -> UserProfile | DomainError:
        if err := require_id(target_user_id, "target_user_id", "Target user ID"):
            return err
        if not UserRules.is_active(current_user):
            return UnauthorizedError(
                message="Inactive users cannot manage accounts",
                action="deactivate_user",
            )

        target = await self._repos.users.get_by_id(target_user_id)
        if target is None:
            return NotFoundError.for_entity("user", target_user_id)
        if not UserRules.can_deactivate(current_user, target):
            return BusinessRuleError(
                message="You cannot deactivate this user",
                rule="CANNOT_DEACTIVATE_USER",
            )
        return await self._repos.users.deactivate(target.id)
