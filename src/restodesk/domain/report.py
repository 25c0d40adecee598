"""Report entity: weekly performance document delivered over channels."""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from restodesk.domain.lifecycle import REPORT_TRANSITIONS, ReportStatus, is_valid_transition
from restodesk.domain.validation import NonBlankStr, UuidStr


class DeliveryChannel(StrEnum):
    EMAIL = "email"
    WHATSAPP = "whatsapp"


class SendLogStatus(StrEnum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class Report(BaseModel):
    """Persisted report. ``pdf_url``/``pdf_hash`` are set once generated."""

    model_config = {"frozen": True}

    id: str
    restaurant_id: str
    week_start: date
    week_end: date
    status: ReportStatus = ReportStatus.GENERATING
    pdf_url: str | None = None
    pdf_hash: str | None = None
    error_message: str | None = None
    generated_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ReportSendLog(BaseModel):
    model_config = {"frozen": True}

    id: str
    report_id: str
    sent_by: str | None = None
    channel: DeliveryChannel
    status: SendLogStatus = SendLogStatus.PENDING
    error_message: str | None = None
    sent_at: datetime | None = None
    created_at: datetime


class ReportInternalContent(BaseModel):
    """Operator-only notes attached to a report."""

    model_config = {"frozen": True}

    id: str
    report_id: str
    content: str
    updated_by: str | None = None
    created_at: datetime
    updated_at: datetime


# --- Inputs ---


class GenerateReportInput(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    restaurant_id: UuidStr
    week_start: date
    week_end: date


class SendReportInput(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    report_id: NonBlankStr
    channels: list[DeliveryChannel] = Field(min_length=1)

    @field_validator("channels")
    @classmethod
    def _dedupe(cls, value: list[DeliveryChannel]) -> list[DeliveryChannel]:
        return list(dict.fromkeys(value))


class CompleteGenerationInput(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    artifact_url: NonBlankStr
    content_hash: NonBlankStr


# --- Rules ---


class ReportRules:
    """Pure transition and guard predicates for reports."""

    @staticmethod
    def can_transition_to(report: Report, target: str) -> bool:
        return is_valid_transition(report.status, target, REPORT_TRANSITIONS)

    @staticmethod
    def can_send(report: Report) -> bool:
        return ReportRules.can_transition_to(report, ReportStatus.SENDING)

    @staticmethod
    def can_retry(report: Report) -> bool:
        """A failed report can be re-sent."""
        return report.status == ReportStatus.FAILED and ReportRules.can_send(report)

    @staticmethod
    def has_artifact(report: Report) -> bool:
        return bool(report.pdf_url and report.pdf_hash)
