"""Review entity and its derived queries."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field

from restodesk.domain.ticket import ResponseMode, ResponseStatus

POSITIVE_RATING = 4
NEGATIVE_RATING = 2


class Review(BaseModel):
    model_config = {"frozen": True}

    id: str
    restaurant_id: str
    external_review_id: str
    order_id: str | None = None
    rating: Annotated[int, Field(ge=1, le=5)]
    comment: str | None = None
    customer_name: str | None = None
    review_date: datetime
    response: str | None = None
    response_sent_at: datetime | None = None
    response_mode: ResponseMode | None = None
    response_status: ResponseStatus | None = None
    response_error: str | None = None
    created_at: datetime
    updated_at: datetime


class ReviewRules:
    @staticmethod
    def is_positive(review: Review) -> bool:
        return review.rating >= POSITIVE_RATING

    @staticmethod
    def is_negative(review: Review) -> bool:
        return review.rating <= NEGATIVE_RATING

    @staticmethod
    def has_response(review: Review) -> bool:
        return review.response is not None and review.response_sent_at is not None

    @staticmethod
    def needs_response(review: Review) -> bool:
        return review.response is None

    @staticmethod
    def can_respond(review: Review) -> bool:
        """A review accepts a reply until one has been delivered."""
        return review.response_status != ResponseStatus.SENT
