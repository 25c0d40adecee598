"""Repository contracts consumed by the use-case layer.

One protocol per entity family. Implementations return validated domain
entities (or raw export bytes) and raise on transport/storage failures;
they hold no business logic.

Transition mutators take ``expected_status`` and must apply the write only
if the stored status still equals it (compare-and-swap). A mismatch raises
:class:`StaleStateError` so that two concurrent orchestrator invocations
cannot both pass the same guard and both mutate. Reply mutators guard the
same way: ``respond`` on the review's response status, ``send_message`` on
the ticket still accepting replies.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Protocol

from pydantic import BaseModel

from restodesk.domain.action import Action, ActionType, CreateActionInput
from restodesk.domain.checklist import ChecklistItem, CreateChecklistItemInput
from restodesk.domain.catalog import CatalogItem
from restodesk.domain.financial import ExportFormat, FinancialEntry, FinancialEntryType
from restodesk.domain.image_job import CreateImageJobInput, ImageJob
from restodesk.domain.lifecycle import ActionStatus, ImageJobStatus, ReportStatus, TicketStatus
from restodesk.domain.report import DeliveryChannel, Report, ReportInternalContent, ReportSendLog
from restodesk.domain.restaurant import Restaurant, RestaurantSettingsUpdate, RestaurantSnapshot
from restodesk.domain.review import Review
from restodesk.domain.ticket import ResponseStatus, Ticket, TicketMessage
from restodesk.domain.user import UserProfile


class StaleStateError(Exception):
    """The stored status changed between the guard check and the write."""

    def __init__(self, entity: str, entity_id: str, expected: str, actual: str | None) -> None:
        self.entity = entity
        self.entity_id = entity_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{entity} {entity_id} is no longer '{expected}' (now '{actual}'); "
            "it was modified concurrently"
        )


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


class _Filters(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}


class ActionFilters(_Filters):
    status: ActionStatus | None = None
    action_type: ActionType | None = None
    week_start: date | None = None
    report_id: str | None = None


class ChecklistFilters(_Filters):
    report_id: str | None = None
    week_start: date | None = None
    is_checked: bool | None = None


class ImageJobFilters(_Filters):
    status: ImageJobStatus | None = None
    catalog_item_id: str | None = None


class CatalogFilters(_Filters):
    category_id: str | None = None
    is_available: bool | None = None
    search: str | None = None


class ReportFilters(_Filters):
    status: ReportStatus | None = None
    week_start: date | None = None
    week_end: date | None = None


class RestaurantFilters(_Filters):
    account_id: str | None = None
    is_active: bool | None = None
    search: str | None = None


class SnapshotFilters(_Filters):
    week_start: date | None = None
    week_end: date | None = None


class ReviewFilters(_Filters):
    rating: int | None = None
    response_status: ResponseStatus | None = None
    start_date: date | None = None
    end_date: date | None = None


class TicketFilters(_Filters):
    status: TicketStatus | None = None
    start_date: date | None = None
    end_date: date | None = None


class FinancialFilters(_Filters):
    entry_type: FinancialEntryType | None = None
    start_date: date | None = None
    end_date: date | None = None


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------


class ActionRepository(Protocol):
    async def get_by_restaurant(
        self, restaurant_id: str, filters: ActionFilters | None = None
    ) -> list[Action]: ...

    async def get_by_id(self, action_id: str) -> Action | None: ...

    async def create(self, data: CreateActionInput, *, created_by: str | None = None) -> Action: ...

    async def mark_done(
        self,
        action_id: str,
        evidence: str,
        *,
        attachments: list[str] | None = None,
        actor_id: str | None,
        expected_status: ActionStatus,
    ) -> Action: ...

    async def mark_discarded(
        self,
        action_id: str,
        reason: str,
        *,
        actor_id: str | None,
        expected_status: ActionStatus,
    ) -> Action: ...


class ImageJobRepository(Protocol):
    async def get_by_restaurant(
        self, restaurant_id: str, filters: ImageJobFilters | None = None
    ) -> list[ImageJob]: ...

    async def get_by_id(self, job_id: str) -> ImageJob | None: ...

    async def create(
        self, restaurant_id: str, data: CreateImageJobInput, *, created_by: str | None = None
    ) -> ImageJob:
        """Insert a job in :meth:`ImageJobRules.initial_status` for its mode.

        A ``direct_upload`` job is written once, already ``ready_for_approval``
        with its source image as the generated image.
        """

    async def approve(
        self, job_id: str, *, actor_id: str | None, expected_status: ImageJobStatus
    ) -> ImageJob: ...

    async def reject(
        self, job_id: str, *, actor_id: str | None, expected_status: ImageJobStatus
    ) -> ImageJob: ...

    async def apply_to_catalog(self, job_id: str, *, expected_status: ImageJobStatus) -> ImageJob:
        """Move the job to ``applied_to_catalog`` and publish its image.

        The job update and the catalog item's ``image_url`` (and
        ``description`` for ``from_new_description`` jobs) change together.
        """
        ...

    async def retry(self, job_id: str, *, expected_status: ImageJobStatus) -> ImageJob: ...

    async def complete_generation(
        self, job_id: str, image_url: str, *, expected_status: ImageJobStatus
    ) -> ImageJob: ...

    async def mark_failed(
        self, job_id: str, error_message: str, *, expected_status: ImageJobStatus
    ) -> ImageJob: ...

    async def archive(self, job_id: str, *, expected_status: ImageJobStatus) -> ImageJob: ...


class ChecklistRepository(Protocol):
    async def get_by_restaurant(
        self, restaurant_id: str, filters: ChecklistFilters | None = None
    ) -> list[ChecklistItem]:
        """Items in creation order."""
        ...

    async def get_by_id(self, item_id: str) -> ChecklistItem | None: ...

    async def create(self, data: CreateChecklistItemInput) -> ChecklistItem: ...

    async def set_checked(
        self,
        item_id: str,
        is_checked: bool,
        *,
        actor_id: str | None,
        expected_checked: bool,
    ) -> ChecklistItem:
        """Write *is_checked* only if the stored flag still equals *expected_checked*."""
        ...


class CatalogRepository(Protocol):
    async def get_items_by_restaurant(
        self, restaurant_id: str, filters: CatalogFilters | None = None
    ) -> list[CatalogItem]: ...

    async def get_item_by_id(self, item_id: str) -> CatalogItem | None: ...


class ReportRepository(Protocol):
    async def get_by_restaurant(
        self, restaurant_id: str, filters: ReportFilters | None = None
    ) -> list[Report]: ...

    async def get_by_id(self, report_id: str) -> Report | None: ...

    async def generate(self, restaurant_id: str, week_start: date, week_end: date) -> Report:
        """Create a report in ``generating``; rendering completes out-of-band."""
        ...

    async def send(
        self,
        report_id: str,
        channels: Sequence[DeliveryChannel],
        *,
        actor_id: str | None,
        expected_status: ReportStatus,
    ) -> Report:
        """Move the report to ``sending`` and queue one pending log per channel."""
        ...

    async def complete_generation(
        self, report_id: str, pdf_url: str, pdf_hash: str, *, expected_status: ReportStatus
    ) -> Report: ...

    async def complete_delivery(
        self, report_id: str, *, expected_status: ReportStatus
    ) -> Report: ...

    async def mark_failed(
        self, report_id: str, reason: str, *, expected_status: ReportStatus
    ) -> Report: ...

    async def get_send_logs(self, report_id: str) -> list[ReportSendLog]: ...

    async def get_internal_content(self, report_id: str) -> ReportInternalContent | None: ...

    async def upsert_internal_content(
        self, report_id: str, content: str, *, actor_id: str | None
    ) -> ReportInternalContent: ...


class RestaurantRepository(Protocol):
    async def get_all(self, filters: RestaurantFilters | None = None) -> list[Restaurant]: ...

    async def get_by_id(self, restaurant_id: str) -> Restaurant | None: ...

    async def update_settings(
        self, restaurant_id: str, patch: RestaurantSettingsUpdate
    ) -> Restaurant: ...

    async def get_snapshots(
        self, restaurant_id: str, filters: SnapshotFilters | None = None
    ) -> list[RestaurantSnapshot]: ...


class ReviewRepository(Protocol):
    async def get_by_restaurant(
        self, restaurant_id: str, filters: ReviewFilters | None = None
    ) -> list[Review]: ...

    async def get_by_id(self, review_id: str) -> Review | None: ...

    async def respond(
        self,
        review_id: str,
        response: str,
        *,
        expected_response_status: ResponseStatus | None,
    ) -> Review: ...


class TicketRepository(Protocol):
    async def get_by_restaurant(
        self, restaurant_id: str, filters: TicketFilters | None = None
    ) -> list[Ticket]: ...

    async def get_by_id(self, ticket_id: str) -> Ticket | None: ...

    async def get_messages(self, ticket_id: str) -> list[TicketMessage]: ...

    async def send_message(self, ticket_id: str, content: str) -> TicketMessage:
        """Append a restaurant reply; raises :class:`StaleStateError` once the
        ticket has reached a terminal status."""
        ...

    async def update_status(
        self, ticket_id: str, status: TicketStatus, *, expected_status: TicketStatus
    ) -> Ticket: ...


class FinancialRepository(Protocol):
    async def get_by_restaurant(
        self, restaurant_id: str, filters: FinancialFilters | None = None
    ) -> list[FinancialEntry]: ...

    async def export_data(
        self, restaurant_id: str, start_date: date, end_date: date, fmt: ExportFormat
    ) -> bytes: ...


class UserRepository(Protocol):
    async def get_by_id(self, user_id: str) -> UserProfile | None: ...

    async def deactivate(self, user_id: str) -> UserProfile: ...
