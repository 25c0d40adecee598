"""ReportService: weekly report generation and delivery.

Rendering the document and pushing it over a channel happen out-of-band;
their outcome is reported back through ``complete_report_generation``,
``complete_report_delivery`` and ``fail_report``.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from restodesk.domain.errors import BusinessRuleError, DomainError, NotFoundError, ValidationError
from restodesk.domain.lifecycle import ReportStatus
from restodesk.domain.report import (
    CompleteGenerationInput,
    DeliveryChannel,
    GenerateReportInput,
    Report,
    ReportInternalContent,
    ReportRules,
    ReportSendLog,
    SendReportInput,
)
from restodesk.domain.validation import parse_input, require_id, require_text
from restodesk.infrastructure.repositories.contracts import ReportFilters
from restodesk.services.base import BaseService, use_case
from restodesk.services.telemetry import traced

ENTITY = "report"


def _invalid(report: Report, target: ReportStatus) -> BusinessRuleError:
    return BusinessRuleError(
        message=f"Report with status '{report.status}' cannot move to '{target}'",
        rule="REPORT_INVALID_TRANSITION",
    )


class ReportService(BaseService):
    """Lifecycle operations on weekly reports."""

    async def _load(self, report_id: str | None) -> Report | DomainError:
        if err := require_id(report_id, "report_id", "Report ID"):
            return err
        report = await self._repos.reports.get_by_id(report_id)  # type: ignore[arg-type]
        if report is None:
            return NotFoundError.for_entity(ENTITY, report_id)
        return report

    async def _move(
        self, report_id: str, target: ReportStatus
    ) -> tuple[Report, ReportStatus] | DomainError:
        report = await self._load(report_id)
        if isinstance(report, DomainError):
            return report
        if not ReportRules.can_transition_to(report, target):
            return _invalid(report, target)
        return report, report.status

    @traced
    @use_case("generate_report")
    async def generate_report(
        self, restaurant_id: str, week_start: date | str, week_end: date | str
    ) -> Report | DomainError:
        if err := require_id(restaurant_id, "restaurant_id", "Restaurant ID"):
            return err
        parsed = parse_input(
            GenerateReportInput,
            {"restaurant_id": restaurant_id, "week_start": week_start, "week_end": week_end},
        )
        if isinstance(parsed, ValidationError):
            return parsed
        if parsed.week_start > parsed.week_end:
            return ValidationError(
                message="Week start must be on or before week end",
                field="week_start",
            )

        restaurant = await self._repos.restaurants.get_by_id(parsed.restaurant_id)
        if restaurant is None:
            return NotFoundError.for_entity("restaurant", parsed.restaurant_id)

        report = await self._repos.reports.generate(
            parsed.restaurant_id, parsed.week_start, parsed.week_end
        )
        self._emit_created(ENTITY, report)
        return report

    @traced
    @use_case("send_report")
    async def send_report(
        self,
        report_id: str,
        channels: Sequence[DeliveryChannel | str],
        *,
        actor_id: str | None = None,
    ) -> Report | DomainError:
        """Queue delivery of a generated report over each channel."""
        parsed = parse_input(SendReportInput, {"report_id": report_id, "channels": list(channels)})
        if isinstance(parsed, ValidationError):
            return parsed
        report = await self._load(parsed.report_id)
        if isinstance(report, DomainError):
            return report
        if not ReportRules.can_send(report):
            return BusinessRuleError(
                message=f"Report with status '{report.status}' cannot be sent",
                rule="REPORT_CANNOT_SEND",
            )
        if not ReportRules.has_artifact(report):
            return BusinessRuleError(
                message="Report has no generated document to send",
                rule="REPORT_NOT_GENERATED",
            )

        updated = await self._repos.reports.send(
            report.id, parsed.channels, actor_id=actor_id, expected_status=report.status
        )
        self._emit_transition(ENTITY, report.status, updated)
        return updated

    @traced
    @use_case("complete_report_generation")
    async def complete_report_generation(
        self, report_id: str, artifact_url: str, content_hash: str
    ) -> Report | DomainError:
        parsed = parse_input(
            CompleteGenerationInput,
            {"artifact_url": artifact_url, "content_hash": content_hash},
        )
        if isinstance(parsed, ValidationError):
            return parsed
        moved = await self._move(report_id, ReportStatus.GENERATED)
        if isinstance(moved, DomainError):
            return moved
        report, previous = moved

        updated = await self._repos.reports.complete_generation(
            report.id, parsed.artifact_url, parsed.content_hash, expected_status=previous
        )
        self._emit_transition(ENTITY, previous, updated)
        return updated

    @traced
    @use_case("complete_report_delivery")
    async def complete_report_delivery(self, report_id: str) -> Report | DomainError:
        moved = await self._move(report_id, ReportStatus.SENT)
        if isinstance(moved, DomainError):
            return moved
        report, previous = moved

        updated = await self._repos.reports.complete_delivery(report.id, expected_status=previous)
        self._emit_transition(ENTITY, previous, updated)
        return updated

    @traced
    @use_case("fail_report")
    async def fail_report(self, report_id: str, reason: str) -> Report | DomainError:
        if err := require_text(reason, "reason", "Failure reason is required"):
            return err
        moved = await self._move(report_id, ReportStatus.FAILED)
        if isinstance(moved, DomainError):
            return moved
        report, previous = moved

        updated = await self._repos.reports.mark_failed(
            report.id, reason.strip(), expected_status=previous
        )
        self._emit_transition(ENTITY, previous, updated)
        return updated

    @traced
    @use_case("update_internal_content")
    async def update_internal_content(
        self, report_id: str, content: str, *, actor_id: str | None = None
    ) -> ReportInternalContent | DomainError:
        """Replace the operator-only notes attached to a report."""
        if err := require_text(content, "content", "Content cannot be empty"):
            return err
        report = await self._load(report_id)
        if isinstance(report, DomainError):
            return report
        return await self._repos.reports.upsert_internal_content(
            report.id, content, actor_id=actor_id
        )

    @traced
    @use_case("get_internal_content")
    async def get_internal_content(self, report_id: str) -> ReportInternalContent | DomainError:
        report = await self._load(report_id)
        if isinstance(report, DomainError):
            return report
        content = await self._repos.reports.get_internal_content(report.id)
        if content is None:
            return NotFoundError(
                message="This report has no internal notes yet",
                entity="report_internal_content",
                id=report.id,
            )
        return content

    @traced
    @use_case("list_reports")
    async def list_reports(
        self, restaurant_id: str, filters: ReportFilters | None = None
    ) -> list[Report] | DomainError:
        if err := require_id(restaurant_id, "restaurant_id", "Restaurant ID"):
            return err
        return await self._repos.reports.get_by_restaurant(restaurant_id, filters)

    @traced
    @use_case("get_send_logs")
    async def get_send_logs(self, report_id: str) -> list[ReportSendLog] | DomainError:
        report = await self._load(report_id)
        if isinstance(report, DomainError):
            return report
        return await self._repos.reports.get_send_logs(report.id)
