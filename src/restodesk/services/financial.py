"""FinancialService: ledger exports and period summaries.

Date order is checked before any repository call, so a reversed range
never reaches storage.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel

from restodesk.domain.errors import DomainError, ValidationError
from restodesk.domain.financial import (
    ExportFormat,
    FinancialExportInput,
    FinancialPeriodInput,
    FinancialSummary,
    summarize_entries,
)
from restodesk.domain.validation import parse_input, require_id
from restodesk.infrastructure.repositories.contracts import FinancialFilters
from restodesk.services.base import BaseService, use_case
from restodesk.services.telemetry import trace_span, traced


class FinancialExport(BaseModel):
    """Rendered export plus the metadata a caller needs to save it."""

    model_config = {"frozen": True}

    filename: str
    format: ExportFormat
    content: bytes


def _check_order(start_date: date, end_date: date) -> ValidationError | None:
    if start_date > end_date:
        return ValidationError(
            message="Start date must be on or before end date",
            field="start_date",
        )
    return None


class FinancialService(BaseService):
    @traced
    @use_case("export_financial_data")
    async def export_financial_data(
        self,
        restaurant_id: str,
        start_date: date | str,
        end_date: date | str,
        fmt: ExportFormat | str = ExportFormat.CSV,
    ) -> FinancialExport | DomainError:
        if err := require_id(restaurant_id, "restaurant_id", "Restaurant ID"):
            return err
        parsed = parse_input(
            FinancialExportInput,
            {
                "restaurant_id": restaurant_id,
                "start_date": start_date,
                "end_date": end_date,
                "format": fmt,
            },
        )
        if isinstance(parsed, ValidationError):
            return parsed
        if err := _check_order(parsed.start_date, parsed.end_date):
            return err

        with trace_span("export_data") as span:
            content = await self._repos.financial.export_data(
                parsed.restaurant_id, parsed.start_date, parsed.end_date, parsed.format
            )
            if span:
                span.annotate("bytes", len(content))

        filename = (
            f"financial_{parsed.start_date.isoformat()}_{parsed.end_date.isoformat()}"
            f".{parsed.format}"
        )
        return FinancialExport(filename=filename, format=parsed.format, content=content)

    @traced
    @use_case("get_financial_summary")
    async def get_financial_summary(
        self,
        restaurant_id: str,
        start_date: date | str,
        end_date: date | str,
    ) -> FinancialSummary | DomainError:
        if err := require_id(restaurant_id, "restaurant_id", "Restaurant ID"):
            return err
        parsed = parse_input(
            FinancialPeriodInput,
            {"restaurant_id": restaurant_id, "start_date": start_date, "end_date": end_date},
        )
        if isinstance(parsed, ValidationError):
            return parsed
        if err := _check_order(parsed.start_date, parsed.end_date):
            return err

        entries = await self._repos.financial.get_by_restaurant(
            parsed.restaurant_id,
            FinancialFilters(start_date=parsed.start_date, end_date=parsed.end_date),
        )
        return summarize_entries(entries)
