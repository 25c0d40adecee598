"""ReviewService: manual replies to marketplace reviews."""

from __future__ import annotations

from restodesk.domain.errors import BusinessRuleError, DomainError, NotFoundError
from restodesk.domain.review import Review, ReviewRules
from restodesk.domain.validation import require_id, require_text
from restodesk.infrastructure.repositories.contracts import ReviewFilters
from restodesk.services.base import BaseService, use_case
from restodesk.services.telemetry import traced


class ReviewService(BaseService):
    @traced
    @use_case("respond_to_review")
    async def respond_to_review(self, review_id: str, response: str) -> Review | DomainError:
        if err := require_id(review_id, "review_id", "Review ID"):
            return err
        if err := require_text(response, "response", "Response text is required"):
            return err

        review = await self._repos.reviews.get_by_id(review_id)
        if review is None:
            return NotFoundError.for_entity("review", review_id)
        if not ReviewRules.can_respond(review):
            return BusinessRuleError(
                message="This review has already been answered",
                rule="REVIEW_ALREADY_ANSWERED",
            )

        updated = await self._repos.reviews.respond(
            review.id, response.strip(), expected_response_status=review.response_status
        )
        self._dispatch_event(
            "post_reply",
            {
                "entity": "review",
                "entity_id": updated.id,
                "restaurant_id": updated.restaurant_id,
                "details": {"rating": updated.rating},
            },
        )
        return updated

    @traced
    @use_case("list_reviews")
    async def list_reviews(
        self, restaurant_id: str, filters: ReviewFilters | None = None
    ) -> list[Review] | DomainError:
        if err := require_id(restaurant_id, "restaurant_id", "Restaurant ID"):
            return err
        return await self._repos.reviews.get_by_restaurant(restaurant_id, filters)
