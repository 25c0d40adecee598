"""SQLAlchemy Core repository adapters over an ``AsyncEngine``.

Each call runs in its own transaction (``engine.begin()``). Transition
mutators express compare-and-swap as
``UPDATE ... WHERE id = :id AND status = :expected`` and inspect the
rowcount: zero rows means the row is gone or its status moved on.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import UTC, date, datetime, timedelta
from typing import Any, TypeVar

from pydantic import BaseModel
from sqlalchemy import Select, Table, insert, select, update
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

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
from restodesk.infrastructure.database.schema import (
    actions,
    catalog_items,
    checklist_items,
    financial_entries,
    image_jobs,
    report_internal_contents,
    report_send_logs,
    reports,
    restaurant_snapshots,
    restaurants,
    reviews,
    ticket_messages,
    tickets,
    user_profiles,
)
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

_CLOSED_TICKET_STATUSES = [s.value for s in TicketStatus if is_terminal(s, TICKET_TRANSITIONS)]


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


def _iso(value: date | datetime | None) -> str | None:
    return None if value is None else value.isoformat()


def _values(entity: BaseModel) -> dict[str, Any]:
    """Column values for *entity*; enums and dates become plain JSON types."""
    return entity.model_dump(mode="json")


def _date_range(column: Any, start: date | None, end: date | None) -> list[Any]:
    """Inclusive range on an ISO text column, comparing the date prefix only."""
    clauses = []
    if start is not None:
        clauses.append(column >= start.isoformat())
    if end is not None:
        # Timestamps on the end date sort after "YYYY-MM-DD"; bound on the next day.
        clauses.append(column < (end + timedelta(days=1)).isoformat())
    return clauses


class _SqlRepository:
    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def _one(self, table: Table, model: type[M], item_id: str) -> M | None:
        async with self._engine.connect() as conn:
            row = (await conn.execute(select(table).where(table.c.id == item_id))).first()
        return None if row is None else model.model_validate(dict(row._mapping))

    async def _all(self, stmt: Select[Any], model: type[M]) -> list[M]:
        async with self._engine.connect() as conn:
            rows = (await conn.execute(stmt)).all()
        return [model.model_validate(dict(row._mapping)) for row in rows]

    @staticmethod
    async def _swap(
        conn: AsyncConnection,
        table: Table,
        entity: str,
        item_id: str,
        expected: str,
        changes: dict[str, Any],
    ) -> None:
        result = await conn.execute(
            update(table)
            .where(table.c.id == item_id, table.c.status == str(expected))
            .values(**changes, updated_at=_now())
        )
        if result.rowcount:
            return
        actual = await conn.scalar(select(table.c.status).where(table.c.id == item_id))
        if actual is None:
            raise LookupError(f"{entity} {item_id} does not exist")
        raise StaleStateError(entity, item_id, str(expected), actual)

    @staticmethod
    async def _reload(conn: AsyncConnection, table: Table, model: type[M], item_id: str) -> M:
        row = (await conn.execute(select(table).where(table.c.id == item_id))).one()
        return model.model_validate(dict(row._mapping))

    async def _transition(
        self,
        table: Table,
        model: type[M],
        entity: str,
        item_id: str,
        expected: str,
        changes: dict[str, Any],
    ) -> M:
        async with self._engine.begin() as conn:
            await self._swap(conn, table, entity, item_id, expected, changes)
            return await self._reload(conn, table, model, item_id)


class SqlActionRepository(_SqlRepository):
    async def get_by_restaurant(
        self, restaurant_id: str, filters: ActionFilters | None = None
    ) -> list[Action]:
        f = filters or ActionFilters()
        stmt = select(actions).where(actions.c.restaurant_id == restaurant_id)
        if f.status is not None:
            stmt = stmt.where(actions.c.status == f.status)
        if f.action_type is not None:
            stmt = stmt.where(actions.c.action_type == f.action_type)
        if f.week_start is not None:
            stmt = stmt.where(actions.c.week_start == f.week_start.isoformat())
        if f.report_id is not None:
            stmt = stmt.where(actions.c.report_id == f.report_id)
        return await self._all(stmt.order_by(actions.c.created_at.desc()), Action)

    async def get_by_id(self, action_id: str) -> Action | None:
        return await self._one(actions, Action, action_id)

    async def create(self, data: CreateActionInput, *, created_by: str | None = None) -> Action:
        now = datetime.now(UTC)
        action = Action(
            id=_new_id(),
            **data.model_dump(),
            status=ActionStatus.PLANNED,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        async with self._engine.begin() as conn:
            await conn.execute(insert(actions).values(**_values(action)))
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
        changes = {
            "status": ActionStatus.DONE,
            "done_evidence": evidence,
            "done_attachments": attachments or None,
            "done_by": actor_id,
            "done_at": _now(),
        }
        return await self._transition(
            actions, Action, "action", action_id, expected_status, changes
        )

    async def mark_discarded(
        self,
        action_id: str,
        reason: str,
        *,
        actor_id: str | None,
        expected_status: ActionStatus,
    ) -> Action:
        changes = {
            "status": ActionStatus.DISCARDED,
            "discarded_reason": reason,
            "discarded_by": actor_id,
            "discarded_at": _now(),
        }
        return await self._transition(
            actions, Action, "action", action_id, expected_status, changes
        )


class SqlChecklistRepository(_SqlRepository):
    async def get_by_restaurant(
        self, restaurant_id: str, filters: ChecklistFilters | None = None
    ) -> list[ChecklistItem]:
        f = filters or ChecklistFilters()
        stmt = select(checklist_items).where(checklist_items.c.restaurant_id == restaurant_id)
        if f.report_id is not None:
            stmt = stmt.where(checklist_items.c.report_id == f.report_id)
        if f.week_start is not None:
            stmt = stmt.where(checklist_items.c.week_start == f.week_start.isoformat())
        if f.is_checked is not None:
            stmt = stmt.where(checklist_items.c.is_checked == f.is_checked)
        return await self._all(stmt.order_by(checklist_items.c.created_at), ChecklistItem)

    async def get_by_id(self, item_id: str) -> ChecklistItem | None:
        return await self._one(checklist_items, ChecklistItem, item_id)

    async def create(self, data: CreateChecklistItemInput) -> ChecklistItem:
        item = ChecklistItem(id=_new_id(), **data.model_dump(), created_at=datetime.now(UTC))
        async with self._engine.begin() as conn:
            await conn.execute(insert(checklist_items).values(**_values(item)))
        return item

    async def set_checked(
        self,
        item_id: str,
        is_checked: bool,
        *,
        actor_id: str | None,
        expected_checked: bool,
    ) -> ChecklistItem:
        fields = ChecklistRules.check_fields(is_checked, actor_id, datetime.now(UTC))
        changes = {**fields, "checked_at": _iso(fields["checked_at"])}
        table = checklist_items
        async with self._engine.begin() as conn:
            result = await conn.execute(
                update(table)
                .where(table.c.id == item_id, table.c.is_checked == expected_checked)
                .values(**changes)
            )
            if not result.rowcount:
                actual = await conn.scalar(select(table.c.is_checked).where(table.c.id == item_id))
                if actual is None:
                    raise LookupError(f"checklist_item {item_id} does not exist")
                raise StaleStateError(
                    "checklist_item",
                    item_id,
                    ChecklistRules.state(expected_checked),
                    ChecklistRules.state(actual),
                )
            return await self._reload(conn, table, ChecklistItem, item_id)


class SqlImageJobRepository(_SqlRepository):
    async def get_by_restaurant(
        self, restaurant_id: str, filters: ImageJobFilters | None = None
    ) -> list[ImageJob]:
        f = filters or ImageJobFilters()
        stmt = select(image_jobs).where(image_jobs.c.restaurant_id == restaurant_id)
        if f.status is not None:
            stmt = stmt.where(image_jobs.c.status == f.status)
        if f.catalog_item_id is not None:
            stmt = stmt.where(image_jobs.c.catalog_item_id == f.catalog_item_id)
        return await self._all(stmt.order_by(image_jobs.c.created_at.desc()), ImageJob)

    async def get_by_id(self, job_id: str) -> ImageJob | None:
        return await self._one(image_jobs, ImageJob, job_id)

    async def create(
        self, restaurant_id: str, data: CreateImageJobInput, *, created_by: str | None = None
    ) -> ImageJob:
        now = datetime.now(UTC)
        source = str(data.source_image_url) if data.source_image_url else None
        status = ImageJobRules.initial_status(data.mode)
        job = ImageJob(
            id=_new_id(),
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
        async with self._engine.begin() as conn:
            await conn.execute(insert(image_jobs).values(**_values(job)))
        return job

    async def _move(
        self, job_id: str, expected: ImageJobStatus, changes: dict[str, Any]
    ) -> ImageJob:
        return await self._transition(image_jobs, ImageJob, "image_job", job_id, expected, changes)

    async def approve(
        self, job_id: str, *, actor_id: str | None, expected_status: ImageJobStatus
    ) -> ImageJob:
        return await self._move(
            job_id,
            expected_status,
            {"status": ImageJobStatus.APPROVED, "approved_by": actor_id, "approved_at": _now()},
        )

    async def reject(
        self, job_id: str, *, actor_id: str | None, expected_status: ImageJobStatus
    ) -> ImageJob:
        return await self._move(
            job_id,
            expected_status,
            {"status": ImageJobStatus.REJECTED, "rejected_by": actor_id, "rejected_at": _now()},
        )

    async def apply_to_catalog(self, job_id: str, *, expected_status: ImageJobStatus) -> ImageJob:
        async with self._engine.begin() as conn:
            await self._swap(
                conn,
                image_jobs,
                "image_job",
                job_id,
                expected_status,
                {"status": ImageJobStatus.APPLIED_TO_CATALOG, "applied_at": _now()},
            )
            job = await self._reload(conn, image_jobs, ImageJob, job_id)
            item_changes: dict[str, Any] = {
                "image_url": job.generated_image_url,
                "updated_at": _now(),
            }
            if job.mode == ImageJobMode.FROM_NEW_DESCRIPTION and job.new_description:
                item_changes["description"] = job.new_description
            result = await conn.execute(
                update(catalog_items)
                .where(catalog_items.c.id == job.catalog_item_id)
                .values(**item_changes)
            )
            if not result.rowcount:
                # Raising inside the transaction rolls the job update back too.
                raise LookupError(f"catalog_item {job.catalog_item_id} does not exist")
        return job

    async def retry(self, job_id: str, *, expected_status: ImageJobStatus) -> ImageJob:
        return await self._move(
            job_id,
            expected_status,
            {
                "status": ImageJobStatus.GENERATING,
                "retry_count": image_jobs.c.retry_count + 1,
                "error_message": None,
            },
        )

    async def complete_generation(
        self, job_id: str, image_url: str, *, expected_status: ImageJobStatus
    ) -> ImageJob:
        return await self._move(
            job_id,
            expected_status,
            {"status": ImageJobStatus.READY_FOR_APPROVAL, "generated_image_url": image_url},
        )

    async def mark_failed(
        self, job_id: str, error_message: str, *, expected_status: ImageJobStatus
    ) -> ImageJob:
        return await self._move(
            job_id,
            expected_status,
            {"status": ImageJobStatus.FAILED, "error_message": error_message},
        )

    async def archive(self, job_id: str, *, expected_status: ImageJobStatus) -> ImageJob:
        return await self._move(job_id, expected_status, {"status": ImageJobStatus.ARCHIVED})


class SqlCatalogRepository(_SqlRepository):
    async def get_items_by_restaurant(
        self, restaurant_id: str, filters: CatalogFilters | None = None
    ) -> list[CatalogItem]:
        f = filters or CatalogFilters()
        stmt = select(catalog_items).where(catalog_items.c.restaurant_id == restaurant_id)
        if f.category_id is not None:
            stmt = stmt.where(catalog_items.c.category_id == f.category_id)
        if f.is_available is not None:
            stmt = stmt.where(catalog_items.c.is_available == f.is_available)
        if f.search:
            stmt = stmt.where(catalog_items.c.name.ilike(f"%{f.search}%"))
        return await self._all(stmt.order_by(catalog_items.c.name), CatalogItem)

    async def get_item_by_id(self, item_id: str) -> CatalogItem | None:
        return await self._one(catalog_items, CatalogItem, item_id)


class SqlReportRepository(_SqlRepository):
    async def get_by_restaurant(
        self, restaurant_id: str, filters: ReportFilters | None = None
    ) -> list[Report]:
        f = filters or ReportFilters()
        stmt = select(reports).where(reports.c.restaurant_id == restaurant_id)
        if f.status is not None:
            stmt = stmt.where(reports.c.status == f.status)
        if f.week_start is not None:
            stmt = stmt.where(reports.c.week_start >= f.week_start.isoformat())
        if f.week_end is not None:
            stmt = stmt.where(reports.c.week_end <= f.week_end.isoformat())
        return await self._all(stmt.order_by(reports.c.week_start.desc()), Report)

    async def get_by_id(self, report_id: str) -> Report | None:
        return await self._one(reports, Report, report_id)

    async def generate(self, restaurant_id: str, week_start: date, week_end: date) -> Report:
        now = datetime.now(UTC)
        report = Report(
            id=_new_id(),
            restaurant_id=restaurant_id,
            week_start=week_start,
            week_end=week_end,
            status=ReportStatus.GENERATING,
            created_at=now,
            updated_at=now,
        )
        async with self._engine.begin() as conn:
            await conn.execute(insert(reports).values(**_values(report)))
        return report

    async def send(
        self,
        report_id: str,
        channels: Sequence[DeliveryChannel],
        *,
        actor_id: str | None,
        expected_status: ReportStatus,
    ) -> Report:
        async with self._engine.begin() as conn:
            await self._swap(
                conn,
                reports,
                "report",
                report_id,
                expected_status,
                {"status": ReportStatus.SENDING, "error_message": None},
            )
            now = _now()
            for channel in channels:
                await conn.execute(
                    insert(report_send_logs).values(
                        id=_new_id(),
                        report_id=report_id,
                        sent_by=actor_id,
                        channel=channel,
                        status=SendLogStatus.PENDING,
                        created_at=now,
                    )
                )
            return await self._reload(conn, reports, Report, report_id)

    async def complete_generation(
        self, report_id: str, pdf_url: str, pdf_hash: str, *, expected_status: ReportStatus
    ) -> Report:
        changes = {
            "status": ReportStatus.GENERATED,
            "pdf_url": pdf_url,
            "pdf_hash": pdf_hash,
            "generated_at": _now(),
        }
        return await self._transition(
            reports, Report, "report", report_id, expected_status, changes
        )

    async def complete_delivery(self, report_id: str, *, expected_status: ReportStatus) -> Report:
        async with self._engine.begin() as conn:
            await self._swap(
                conn, reports, "report", report_id, expected_status, {"status": ReportStatus.SENT}
            )
            await self._settle_logs(conn, report_id, SendLogStatus.SENT, None)
            return await self._reload(conn, reports, Report, report_id)

    async def mark_failed(
        self, report_id: str, reason: str, *, expected_status: ReportStatus
    ) -> Report:
        async with self._engine.begin() as conn:
            await self._swap(
                conn,
                reports,
                "report",
                report_id,
                expected_status,
                {"status": ReportStatus.FAILED, "error_message": reason},
            )
            await self._settle_logs(conn, report_id, SendLogStatus.FAILED, reason)
            return await self._reload(conn, reports, Report, report_id)

    @staticmethod
    async def _settle_logs(
        conn: AsyncConnection, report_id: str, status: SendLogStatus, error: str | None
    ) -> None:
        await conn.execute(
            update(report_send_logs)
            .where(
                report_send_logs.c.report_id == report_id,
                report_send_logs.c.status == SendLogStatus.PENDING,
            )
            .values(
                status=status,
                error_message=error,
                sent_at=_now() if status == SendLogStatus.SENT else None,
            )
        )

    async def get_send_logs(self, report_id: str) -> list[ReportSendLog]:
        stmt = (
            select(report_send_logs)
            .where(report_send_logs.c.report_id == report_id)
            .order_by(report_send_logs.c.created_at.desc())
        )
        return await self._all(stmt, ReportSendLog)

    async def get_internal_content(self, report_id: str) -> ReportInternalContent | None:
        stmt = select(report_internal_contents).where(
            report_internal_contents.c.report_id == report_id
        )
        rows = await self._all(stmt, ReportInternalContent)
        return rows[0] if rows else None

    async def upsert_internal_content(
        self, report_id: str, content: str, *, actor_id: str | None
    ) -> ReportInternalContent:
        table = report_internal_contents
        now = _now()
        async with self._engine.begin() as conn:
            result = await conn.execute(
                update(table)
                .where(table.c.report_id == report_id)
                .values(content=content, updated_by=actor_id, updated_at=now)
            )
            if not result.rowcount:
                await conn.execute(
                    insert(table).values(
                        id=_new_id(),
                        report_id=report_id,
                        content=content,
                        updated_by=actor_id,
                        created_at=now,
                        updated_at=now,
                    )
                )
            row = (await conn.execute(select(table).where(table.c.report_id == report_id))).one()
        return ReportInternalContent.model_validate(dict(row._mapping))


class SqlRestaurantRepository(_SqlRepository):
    async def get_all(self, filters: RestaurantFilters | None = None) -> list[Restaurant]:
        f = filters or RestaurantFilters()
        stmt = select(restaurants)
        if f.account_id is not None:
            stmt = stmt.where(restaurants.c.account_id == f.account_id)
        if f.is_active is not None:
            stmt = stmt.where(restaurants.c.is_active == f.is_active)
        if f.search:
            stmt = stmt.where(restaurants.c.name.ilike(f"%{f.search}%"))
        return await self._all(stmt.order_by(restaurants.c.name), Restaurant)

    async def get_by_id(self, restaurant_id: str) -> Restaurant | None:
        return await self._one(restaurants, Restaurant, restaurant_id)

    async def update_settings(
        self, restaurant_id: str, patch: RestaurantSettingsUpdate
    ) -> Restaurant:
        values = patch.model_dump(mode="json", exclude_unset=True)
        async with self._engine.begin() as conn:
            result = await conn.execute(
                update(restaurants)
                .where(restaurants.c.id == restaurant_id)
                .values(**values, updated_at=_now())
            )
            if not result.rowcount:
                raise LookupError(f"restaurant {restaurant_id} does not exist")
            return await self._reload(conn, restaurants, Restaurant, restaurant_id)

    async def get_snapshots(
        self, restaurant_id: str, filters: SnapshotFilters | None = None
    ) -> list[RestaurantSnapshot]:
        f = filters or SnapshotFilters()
        table = restaurant_snapshots
        stmt = select(table).where(
            table.c.restaurant_id == restaurant_id,
            *_date_range(table.c.week_start, f.week_start, f.week_end),
        )
        return await self._all(stmt, RestaurantSnapshot)


class SqlReviewRepository(_SqlRepository):
    async def get_by_restaurant(
        self, restaurant_id: str, filters: ReviewFilters | None = None
    ) -> list[Review]:
        f = filters or ReviewFilters()
        stmt = select(reviews).where(
            reviews.c.restaurant_id == restaurant_id,
            *_date_range(reviews.c.review_date, f.start_date, f.end_date),
        )
        if f.rating is not None:
            stmt = stmt.where(reviews.c.rating == f.rating)
        if f.response_status is not None:
            stmt = stmt.where(reviews.c.response_status == f.response_status)
        return await self._all(stmt.order_by(reviews.c.review_date.desc()), Review)

    async def get_by_id(self, review_id: str) -> Review | None:
        return await self._one(reviews, Review, review_id)

    async def respond(
        self,
        review_id: str,
        response: str,
        *,
        expected_response_status: ResponseStatus | None,
    ) -> Review:
        now = _now()
        column = reviews.c.response_status
        if expected_response_status is None:
            guard = column.is_(None)
        else:
            guard = column == str(expected_response_status)
        async with self._engine.begin() as conn:
            result = await conn.execute(
                update(reviews)
                .where(reviews.c.id == review_id, guard)
                .values(
                    response=response,
                    response_mode=ResponseMode.MANUAL,
                    response_status=ResponseStatus.SENT,
                    response_error=None,
                    response_sent_at=now,
                    updated_at=now,
                )
            )
            if not result.rowcount:
                row = (
                    await conn.execute(select(column).where(reviews.c.id == review_id))
                ).first()
                if row is None:
                    raise LookupError(f"review {review_id} does not exist")
                raise StaleStateError(
                    "review", review_id, str(expected_response_status), row.response_status
                )
            return await self._reload(conn, reviews, Review, review_id)


class SqlTicketRepository(_SqlRepository):
    async def get_by_restaurant(
        self, restaurant_id: str, filters: TicketFilters | None = None
    ) -> list[Ticket]:
        f = filters or TicketFilters()
        stmt = select(tickets).where(
            tickets.c.restaurant_id == restaurant_id,
            *_date_range(tickets.c.created_at, f.start_date, f.end_date),
        )
        if f.status is not None:
            stmt = stmt.where(tickets.c.status == f.status)
        return await self._all(stmt.order_by(tickets.c.updated_at.desc()), Ticket)

    async def get_by_id(self, ticket_id: str) -> Ticket | None:
        return await self._one(tickets, Ticket, ticket_id)

    async def get_messages(self, ticket_id: str) -> list[TicketMessage]:
        stmt = (
            select(ticket_messages)
            .where(ticket_messages.c.ticket_id == ticket_id)
            .order_by(ticket_messages.c.created_at)
        )
        return await self._all(stmt, TicketMessage)

    async def send_message(self, ticket_id: str, content: str) -> TicketMessage:
        now = datetime.now(UTC)
        message = TicketMessage(
            id=_new_id(),
            ticket_id=ticket_id,
            sender=MessageSender.RESTAURANT,
            content=content,
            response_mode=ResponseMode.MANUAL,
            response_status=ResponseStatus.SENT,
            sent_at=now,
            created_at=now,
        )
        async with self._engine.begin() as conn:
            result = await conn.execute(
                update(tickets)
                .where(tickets.c.id == ticket_id, tickets.c.status.not_in(_CLOSED_TICKET_STATUSES))
                .values(updated_at=_iso(now))
            )
            if not result.rowcount:
                actual = await conn.scalar(
                    select(tickets.c.status).where(tickets.c.id == ticket_id)
                )
                if actual is None:
                    raise LookupError(f"ticket {ticket_id} does not exist")
                raise StaleStateError("ticket", ticket_id, "accepting replies", actual)
            await conn.execute(insert(ticket_messages).values(**_values(message)))
        return message

    async def update_status(
        self, ticket_id: str, status: TicketStatus, *, expected_status: TicketStatus
    ) -> Ticket:
        return await self._transition(
            tickets, Ticket, "ticket", ticket_id, expected_status, {"status": status}
        )


class SqlFinancialRepository(_SqlRepository):
    async def get_by_restaurant(
        self, restaurant_id: str, filters: FinancialFilters | None = None
    ) -> list[FinancialEntry]:
        f = filters or FinancialFilters()
        table = financial_entries
        stmt = select(table).where(
            table.c.restaurant_id == restaurant_id,
            *_date_range(table.c.reference_date, f.start_date, f.end_date),
        )
        if f.entry_type is not None:
            stmt = stmt.where(table.c.entry_type == f.entry_type)
        return await self._all(stmt.order_by(table.c.reference_date), FinancialEntry)

    async def export_data(
        self, restaurant_id: str, start_date: date, end_date: date, fmt: ExportFormat
    ) -> bytes:
        entries = await self.get_by_restaurant(
            restaurant_id, FinancialFilters(start_date=start_date, end_date=end_date)
        )
        return render_financial_export(entries, fmt)


class SqlUserRepository(_SqlRepository):
    async def get_by_id(self, user_id: str) -> UserProfile | None:
        return await self._one(user_profiles, UserProfile, user_id)

    async def deactivate(self, user_id: str) -> UserProfile:
        async with self._engine.begin() as conn:
            result = await conn.execute(
                update(user_profiles)
                .where(user_profiles.c.id == user_id)
                .values(is_active=False, updated_at=_now())
            )
            if not result.rowcount:
                raise LookupError(f"user {user_id} does not exist")
            return await self._reload(conn, user_profiles, UserProfile, user_id)


_TABLES: dict[type[BaseModel], Table] = {
    Restaurant: restaurants,
    RestaurantSnapshot: restaurant_snapshots,
    CatalogItem: catalog_items,
    ChecklistItem: checklist_items,
    Action: actions,
    ImageJob: image_jobs,
    Report: reports,
    ReportSendLog: report_send_logs,
    Ticket: tickets,
    TicketMessage: ticket_messages,
    Review: reviews,
    FinancialEntry: financial_entries,
    UserProfile: user_profiles,
}


async def insert_entities(engine: AsyncEngine, entities: Sequence[BaseModel]) -> None:
    """Bulk-insert fully-formed entities (used to load synced marketplace data).

    Rows are grouped per table in first-seen order inside one transaction,
    so parents must come before their children.
    """
    grouped: dict[Table, list[dict[str, Any]]] = {}
    for entity in entities:
        table = _TABLES.get(type(entity))
        if table is None:
            msg = f"Cannot insert entity of type {type(entity).__name__}"
            raise TypeError(msg)
        grouped.setdefault(table, []).append(_values(entity))
    if not grouped:
        return
    async with engine.begin() as conn:
        for table, rows in grouped.items():
            await conn.execute(insert(table), rows)
