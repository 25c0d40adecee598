"""In-memory repository adapters.

Backs the ``memory://`` database URL and the test-suite. All adapters of
one backend share a :class:`MemoryStore`. Every mutation reads, checks
and writes without awaiting in between, so each compare-and-swap is
atomic on the event loop.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import UTC, date, datetime
from typing import Any, TypeVar

from pydantic import BaseModel

from restodesk.domain.action import Action, CreateActionInput
from restodesk.domain.catalog import CatalogItem
from restodesk.domain.checklist import ChecklistItem, ChecklistRules, CreateChecklistItemInput
from restodesk.domain.financial import ExportFormat, FinancialEntry
from restodesk.domain.image_job import CreateImageJobInput, ImageJob, ImageJobMode, ImageJobRules
from restodesk.domain.lifecycle import (
    TICKET_TRANSITIONS,
    ActionStatus,
    ImageJobStatus,
    ReportStatus,
    TicketStatus,
    is_terminal,
)
from restodesk.domain.report import (
    DeliveryChannel,
    Report,
    ReportInternalContent,
    ReportSendLog,
    SendLogStatus,
)
from restodesk.domain.restaurant import Restaurant, RestaurantSettingsUpdate, RestaurantSnapshot
from restodesk.domain.review import Review
from restodesk.domain.ticket import (
    MessageSender,
    ResponseMode,
    ResponseStatus,
    Ticket,
    TicketMessage,
)
from restodesk.domain.user import UserProfile
from restodesk.infrastructure.export import render_financial_export
from restodesk.infrastructure.repositories.contracts import (
    ActionFilters,
    CatalogFilters,
    ChecklistFilters,
    FinancialFilters,
    ImageJobFilters,
    ReportFilters,
    RestaurantFilters,
    ReviewFilters,
    SnapshotFilters,
    StaleStateError,
    TicketFilters,
)

M = TypeVar("M", bound=BaseModel)


def utcnow() -> datetime:
    return datetime.now(UTC)


def new_id() -> str:
    return str(uuid.uuid4())


def _in_range(value: date, start: date | None, end: date | None) -> bool:
    if start is not None and value < start:
        return False
    return not (end is not None and value > end)


class MemoryStore:
    """Shared state for one in-memory backend."""

    def __init__(self) -> None:
        self.restaurants: dict[str, Restaurant] = {}
        self.snapshots: dict[str, RestaurantSnapshot] = {}
        self.catalog_items: dict[str, CatalogItem] = {}
        self.checklist_items: dict[str, ChecklistItem] = {}
        self.actions: dict[str, Action] = {}
        self.image_jobs: dict[str, ImageJob] = {}
        self.reports: dict[str, Report] = {}
        self.send_logs: dict[str, ReportSendLog] = {}
        self.internal_contents: dict[str, ReportInternalContent] = {}
        self.tickets: dict[str, Ticket] = {}
        self.ticket_messages: dict[str, TicketMessage] = {}
        self.reviews: dict[str, Review] = {}
        self.financial_entries: dict[str, FinancialEntry] = {}
        self.users: dict[str, UserProfile] = {}

    _COLLECTIONS: dict[type[BaseModel], str] = {
        Restaurant: "restaurants",
        RestaurantSnapshot: "snapshots",
        CatalogItem: "catalog_items",
        ChecklistItem: "checklist_items",
        Action: "actions",
        ImageJob: "image_jobs",
        Report: "reports",
        ReportSendLog: "send_logs",
        Ticket: "tickets",
        TicketMessage: "ticket_messages",
        Review: "reviews",
        FinancialEntry: "financial_entries",
        UserProfile: "users",
    }

    def seed(self, *entities: BaseModel) -> None:
        """Insert (or overwrite) fully-formed entities by id."""
        for entity in entities:
            if isinstance(entity, ReportInternalContent):
                self.internal_contents[entity.report_id] = entity
                continue
            name = self._COLLECTIONS.get(type(entity))
            if name is None:
                msg = f"Cannot seed entity of type {type(entity).__name__}"
                raise TypeError(msg)
            getattr(self, name)[entity.id] = entity  # type: ignore[attr-defined]


def _require(items: dict[str, M], entity: str, item_id: str) -> M:
    current = items.get(item_id)
    if current is None:
        raise LookupError(f"{entity} {item_id} does not exist")
    return current


def _swap(
    items: dict[str, M],
    entity: str,
    item_id: str,
    expected: str,
    changes: dict[str, Any],
) -> M:
    current = _require(items, entity, item_id)
    actual = getattr(current, "status", None)
    if actual != expected:
        raise StaleStateError(
            entity, item_id, str(expected), None if actual is None else str(actual)
        )
    updated = current.model_copy(update={**changes, "updated_at": utcnow()})
    items[item_id] = updated
    return updated


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------


class MemoryActionRepository:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    async def get_by_restaurant(
        self, restaurant_id: str, filters: ActionFilters | None = None
    ) -> list[Action]:
        f = filters or ActionFilters()
        rows = [
            a
            for a in self._store.actions.values()
            if a.restaurant_id == restaurant_id
            and (f.status is None or a.status == f.status)
            and (f.action_type is None or a.action_type == f.action_type)
            and (f.week_start is None or a.week_start == f.week_start)
            and (f.report_id is None or a.report_id == f.report_id)
        ]
        return sorted(rows, key=lambda a: a.created_at, reverse=True)

    async def get_by_id(self, action_id: str) -> Action | None:
        return self._store.actions.get(action_id)

    async def create(self, data: CreateActionInput, *, created_by: str | None = None) -> Action:
        now = utcnow()
        action = Action(
            id=new_id(),
            **data.model_dump(),
            status=ActionStatus.PLANNED,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        self._store.actions[action.id] = action
        return action

    async def mark_done(
        self,
        action_id: str,
        evidence: str,
        *,
        attachments: list[str] | None = None,
        actor_id: str | None,
        expected_status: ActionStatus,
    ) -> Action:
        return _swap(
            self._store.actions,
            "action",
            action_id,
            expected_status,
            {
                "status": ActionStatus.DONE,
                "done_evidence": evidence,
                "done_attachments": attachments or None,
                "done_by": actor_id,
                "done_at": utcnow(),
            },
        )

    async def mark_discarded(
        self,
        action_id: str,
        reason: str,
        *,
        actor_id: str | None,
        expected_status: ActionStatus,
    ) -> Action:
        return _swap(
            self._store.actions,
            "action",
            action_id,
            expected_status,
            {
                "status": ActionStatus.DISCARDED,
                "discarded_reason": reason,
                "discarded_by": actor_id,
                "discarded_at": utcnow(),
            },
        )


class MemoryChecklistRepository:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    async def get_by_restaurant(
        self, restaurant_id: str, filters: ChecklistFilters | None = None
    ) -> list[ChecklistItem]:
        f = filters or ChecklistFilters()
        rows = [
            c
            for c in self._store.checklist_items.values()
            if c.restaurant_id == restaurant_id
            and (f.report_id is None or c.report_id == f.report_id)
            and (f.week_start is None or c.week_start == f.week_start)
            and (f.is_checked is None or c.is_checked == f.is_checked)
        ]
        return sorted(rows, key=lambda c: c.created_at)

    async def get_by_id(self, item_id: str) -> ChecklistItem | None:
        return self._store.checklist_items.get(item_id)

    async def create(self, data: CreateChecklistItemInput) -> ChecklistItem:
        item = ChecklistItem(id=new_id(), **data.model_dump(), created_at=utcnow())
        self._store.checklist_items[item.id] = item
        return item

    async def set_checked(
        self,
        item_id: str,
        is_checked: bool,
        *,
        actor_id: str | None,
        expected_checked: bool,
    ) -> ChecklistItem:
        current = _require(self._store.checklist_items, "checklist_item", item_id)
        if current.is_checked != expected_checked:
            raise StaleStateError(
                "checklist_item",
                item_id,
                ChecklistRules.state(expected_checked),
                ChecklistRules.state(current.is_checked),
            )
        updated = current.model_copy(
            update=ChecklistRules.check_fields(is_checked, actor_id, utcnow())
        )
        self._store.checklist_items[item_id] = updated
        return updated


class MemoryImageJobRepository:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    async def get_by_restaurant(
        self, restaurant_id: str, filters: ImageJobFilters | None = None
    ) -> list[ImageJob]:
        f = filters or ImageJobFilters()
        rows = [
            j
            for j in self._store.image_jobs.values()
            if j.restaurant_id == restaurant_id
            and (f.status is None or j.status == f.status)
            and (f.catalog_item_id is None or j.catalog_item_id == f.catalog_item_id)
        ]
        return sorted(rows, key=lambda j: j.created_at, reverse=True)

    async def get_by_id(self, job_id: str) -> ImageJob | None:
        return self._store.image_jobs.get(job_id)

    async def create(
        self, restaurant_id: str, data: CreateImageJobInput, *, created_by: str | None = None
    ) -> ImageJob:
        now = utcnow()
        source = str(data.source_image_url) if data.source_image_url else None
        status = ImageJobRules.initial_status(data.mode)
        job = ImageJob(
            id=new_id(),
            catalog_item_id=data.catalog_item_id,
            restaurant_id=restaurant_id,
            mode=data.mode,
            status=status,
            prompt=data.prompt,
            source_image_url=source,
            generated_image_url=source if status == ImageJobStatus.READY_FOR_APPROVAL else None,
            new_description=data.new_description,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        self._store.image_jobs[job.id] = job
        return job

    async def approve(
        self, job_id: str, *, actor_id: str | None, expected_status: ImageJobStatus
    ) -> ImageJob:
        return _swap(
            self._store.image_jobs,
            "image_job",
            job_id,
            expected_status,
            {"status": ImageJobStatus.APPROVED, "approved_by": actor_id, "approved_at": utcnow()},
        )

    async def reject(
        self, job_id: str, *, actor_id: str | None, expected_status: ImageJobStatus
    ) -> ImageJob:
        return _swap(
            self._store.image_jobs,
            "image_job",
            job_id,
            expected_status,
            {"status": ImageJobStatus.REJECTED, "rejected_by": actor_id, "rejected_at": utcnow()},
        )

    async def apply_to_catalog(self, job_id: str, *, expected_status: ImageJobStatus) -> ImageJob:
        job = _require(self._store.image_jobs, "image_job", job_id)
        item = _require(self._store.catalog_items, "catalog_item", job.catalog_item_id)
        updated = _swap(
            self._store.image_jobs,
            "image_job",
            job_id,
            expected_status,
            {"status": ImageJobStatus.APPLIED_TO_CATALOG, "applied_at": utcnow()},
        )
        item_changes: dict[str, Any] = {
            "image_url": job.generated_image_url,
            "updated_at": utcnow(),
        }
        if job.mode == ImageJobMode.FROM_NEW_DESCRIPTION and job.new_description:
            item_changes["description"] = job.new_description
        self._store.catalog_items[item.id] = item.model_copy(update=item_changes)
        return updated

    async def retry(self, job_id: str, *, expected_status: ImageJobStatus) -> ImageJob:
        job = _require(self._store.image_jobs, "image_job", job_id)
        return _swap(
            self._store.image_jobs,
            "image_job",
            job_id,
            expected_status,
            {
                "status": ImageJobStatus.GENERATING,
                "retry_count": job.retry_count + 1,
                "error_message": None,
            },
        )

    async def complete_generation(
        self, job_id: str, image_url: str, *, expected_status: ImageJobStatus
    ) -> ImageJob:
        return _swap(
            self._store.image_jobs,
            "image_job",
            job_id,
            expected_status,
            {"status": ImageJobStatus.READY_FOR_APPROVAL, "generated_image_url": image_url},
        )

    async def mark_failed(
        self, job_id: str, error_message: str, *, expected_status: ImageJobStatus
    ) -> ImageJob:
        return _swap(
            self._store.image_jobs,
            "image_job",
            job_id,
            expected_status,
            {"status": ImageJobStatus.FAILED, "error_message": error_message},
        )

    async def archive(self, job_id: str, *, expected_status: ImageJobStatus) -> ImageJob:
        return _swap(
            self._store.image_jobs,
            "image_job",
            job_id,
            expected_status,
            {"status": ImageJobStatus.ARCHIVED},
        )


class MemoryCatalogRepository:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    async def get_items_by_restaurant(
        self, restaurant_id: str, filters: CatalogFilters | None = None
    ) -> list[CatalogItem]:
        f = filters or CatalogFilters()
        needle = (f.search or "").lower()
        rows = [
            i
            for i in self._store.catalog_items.values()
            if i.restaurant_id == restaurant_id
            and (f.category_id is None or i.category_id == f.category_id)
            and (f.is_available is None or i.is_available == f.is_available)
            and (not needle or needle in i.name.lower())
        ]
        return sorted(rows, key=lambda i: i.name)

    async def get_item_by_id(self, item_id: str) -> CatalogItem | None:
        return self._store.catalog_items.get(item_id)


class MemoryReportRepository:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    async def get_by_restaurant(
        self, restaurant_id: str, filters: ReportFilters | None = None
    ) -> list[Report]:
        f = filters or ReportFilters()
        rows = [
            r
            for r in self._store.reports.values()
            if r.restaurant_id == restaurant_id
            and (f.status is None or r.status == f.status)
            and (f.week_start is None or r.week_start >= f.week_start)
            and (f.week_end is None or r.week_end <= f.week_end)
        ]
        return sorted(rows, key=lambda r: r.week_start, reverse=True)

    async def get_by_id(self, report_id: str) -> Report | None:
        return self._store.reports.get(report_id)

    async def generate(self, restaurant_id: str, week_start: date, week_end: date) -> Report:
        now = utcnow()
        report = Report(
            id=new_id(),
            restaurant_id=restaurant_id,
            week_start=week_start,
            week_end=week_end,
            status=ReportStatus.GENERATING,
            created_at=now,
            updated_at=now,
        )
        self._store.reports[report.id] = report
        return report

    async def send(
        self,
        report_id: str,
        channels: Sequence[DeliveryChannel],
        *,
        actor_id: str | None,
        expected_status: ReportStatus,
    ) -> Report:
        updated = _swap(
            self._store.reports,
            "report",
            report_id,
            expected_status,
            {"status": ReportStatus.SENDING, "error_message": None},
        )
        now = utcnow()
        for channel in channels:
            log = ReportSendLog(
                id=new_id(),
                report_id=report_id,
                sent_by=actor_id,
                channel=channel,
                status=SendLogStatus.PENDING,
                created_at=now,
            )
            self._store.send_logs[log.id] = log
        return updated

    async def complete_generation(
        self, report_id: str, pdf_url: str, pdf_hash: str, *, expected_status: ReportStatus
    ) -> Report:
        return _swap(
            self._store.reports,
            "report",
            report_id,
            expected_status,
            {
                "status": ReportStatus.GENERATED,
                "pdf_url": pdf_url,
                "pdf_hash": pdf_hash,
                "generated_at": utcnow(),
            },
        )

    async def complete_delivery(self, report_id: str, *, expected_status: ReportStatus) -> Report:
        updated = _swap(
            self._store.reports, "report", report_id, expected_status, {"status": ReportStatus.SENT}
        )
        self._settle_logs(report_id, SendLogStatus.SENT, None)
        return updated

    async def mark_failed(
        self, report_id: str, reason: str, *, expected_status: ReportStatus
    ) -> Report:
        updated = _swap(
            self._store.reports,
            "report",
            report_id,
            expected_status,
            {"status": ReportStatus.FAILED, "error_message": reason},
        )
        self._settle_logs(report_id, SendLogStatus.FAILED, reason)
        return updated

    def _settle_logs(self, report_id: str, status: SendLogStatus, error: str | None) -> None:
        now = utcnow()
        for log in list(self._store.send_logs.values()):
            if log.report_id == report_id and log.status == SendLogStatus.PENDING:
                self._store.send_logs[log.id] = log.model_copy(
                    update={
                        "status": status,
                        "error_message": error,
                        "sent_at": now if status == SendLogStatus.SENT else None,
                    }
                )

    async def get_send_logs(self, report_id: str) -> list[ReportSendLog]:
        rows = [log for log in self._store.send_logs.values() if log.report_id == report_id]
        return sorted(rows, key=lambda log: log.created_at, reverse=True)

    async def get_internal_content(self, report_id: str) -> ReportInternalContent | None:
        return self._store.internal_contents.get(report_id)

    async def upsert_internal_content(
        self, report_id: str, content: str, *, actor_id: str | None
    ) -> ReportInternalContent:
        now = utcnow()
        existing = self._store.internal_contents.get(report_id)
        if existing is None:
            record = ReportInternalContent(
                id=new_id(),
                report_id=report_id,
                content=content,
                updated_by=actor_id,
                created_at=now,
                updated_at=now,
            )
        else:
            record = existing.model_copy(
                update={"content": content, "updated_by": actor_id, "updated_at": now}
            )
        self._store.internal_contents[report_id] = record
        return record


class MemoryRestaurantRepository:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    async def get_all(self, filters: RestaurantFilters | None = None) -> list[Restaurant]:
        f = filters or RestaurantFilters()
        needle = (f.search or "").lower()
        rows = [
            r
            for r in self._store.restaurants.values()
            if (f.account_id is None or r.account_id == f.account_id)
            and (f.is_active is None or r.is_active == f.is_active)
            and (not needle or needle in r.name.lower())
        ]
        return sorted(rows, key=lambda r: r.name)

    async def get_by_id(self, restaurant_id: str) -> Restaurant | None:
        return self._store.restaurants.get(restaurant_id)

    async def update_settings(
        self, restaurant_id: str, patch: RestaurantSettingsUpdate
    ) -> Restaurant:
        current = _require(self._store.restaurants, "restaurant", restaurant_id)
        updated = current.model_copy(update={**patch.changes(), "updated_at": utcnow()})
        self._store.restaurants[restaurant_id] = updated
        return updated

    async def get_snapshots(
        self, restaurant_id: str, filters: SnapshotFilters | None = None
    ) -> list[RestaurantSnapshot]:
        f = filters or SnapshotFilters()
        return [
            s
            for s in self._store.snapshots.values()
            if s.restaurant_id == restaurant_id
            and _in_range(s.week_start, f.week_start, f.week_end)
        ]


class MemoryReviewRepository:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    async def get_by_restaurant(
        self, restaurant_id: str, filters: ReviewFilters | None = None
    ) -> list[Review]:
        f = filters or ReviewFilters()
        rows = [
            r
            for r in self._store.reviews.values()
            if r.restaurant_id == restaurant_id
            and (f.rating is None or r.rating == f.rating)
            and (f.response_status is None or r.response_status == f.response_status)
            and _in_range(r.review_date.date(), f.start_date, f.end_date)
        ]
        return sorted(rows, key=lambda r: r.review_date, reverse=True)

    async def get_by_id(self, review_id: str) -> Review | None:
        return self._store.reviews.get(review_id)

    async def respond(
        self,
        review_id: str,
        response: str,
        *,
        expected_response_status: ResponseStatus | None,
    ) -> Review:
        current = _require(self._store.reviews, "review", review_id)
        if current.response_status != expected_response_status:
            raise StaleStateError(
                "review",
                review_id,
                str(expected_response_status),
                None if current.response_status is None else str(current.response_status),
            )
        now = utcnow()
        updated = current.model_copy(
            update={
                "response": response,
                "response_mode": ResponseMode.MANUAL,
                "response_status": ResponseStatus.SENT,
                "response_error": None,
                "response_sent_at": now,
                "updated_at": now,
            }
        )
        self._store.reviews[review_id] = updated
        return updated


class MemoryTicketRepository:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    async def get_by_restaurant(
        self, restaurant_id: str, filters: TicketFilters | None = None
    ) -> list[Ticket]:
        f = filters or TicketFilters()
        rows = [
            t
            for t in self._store.tickets.values()
            if t.restaurant_id == restaurant_id
            and (f.status is None or t.status == f.status)
            and _in_range(t.created_at.date(), f.start_date, f.end_date)
        ]
        return sorted(rows, key=lambda t: t.updated_at, reverse=True)

    async def get_by_id(self, ticket_id: str) -> Ticket | None:
        return self._store.tickets.get(ticket_id)

    async def get_messages(self, ticket_id: str) -> list[TicketMessage]:
        rows = [m for m in self._store.ticket_messages.values() if m.ticket_id == ticket_id]
        return sorted(rows, key=lambda m: m.created_at)

    async def send_message(self, ticket_id: str, content: str) -> TicketMessage:
        ticket = _require(self._store.tickets, "ticket", ticket_id)
        if is_terminal(ticket.status, TICKET_TRANSITIONS):
            raise StaleStateError("ticket", ticket_id, "accepting replies", str(ticket.status))
        now = utcnow()
        message = TicketMessage(
            id=new_id(),
            ticket_id=ticket_id,
            sender=MessageSender.RESTAURANT,
            content=content,
            response_mode=ResponseMode.MANUAL,
            response_status=ResponseStatus.SENT,
            sent_at=now,
            created_at=now,
        )
        self._store.ticket_messages[message.id] = message
        self._store.tickets[ticket_id] = ticket.model_copy(update={"updated_at": now})
        return message

    async def update_status(
        self, ticket_id: str, status: TicketStatus, *, expected_status: TicketStatus
    ) -> Ticket:
        return _swap(self._store.tickets, "ticket", ticket_id, expected_status, {"status": status})


class MemoryFinancialRepository:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    async def get_by_restaurant(
        self, restaurant_id: str, filters: FinancialFilters | None = None
    ) -> list[FinancialEntry]:
        f = filters or FinancialFilters()
        rows = [
            e
            for e in self._store.financial_entries.values()
            if e.restaurant_id == restaurant_id
            and (f.entry_type is None or e.entry_type == f.entry_type)
            and _in_range(e.reference_date, f.start_date, f.end_date)
        ]
        return sorted(rows, key=lambda e: e.reference_date)

    async def export_data(
        self, restaurant_id: str, start_date: date, end_date: date, fmt: ExportFormat
    ) -> bytes:
        entries = await self.get_by_restaurant(
            restaurant_id, FinancialFilters(start_date=start_date, end_date=end_date)
        )
        return render_financial_export(entries, fmt)


class MemoryUserRepository:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    async def get_by_id(self, user_id: str) -> UserProfile | None:
        return self._store.users.get(user_id)

    async def deactivate(self, user_id: str) -> UserProfile:
        current = _require(self._store.users, "user", user_id)
        updated = current.model_copy(update={"is_active": False, "updated_at": utcnow()})
        self._store.users[user_id] = updated
        return updated
