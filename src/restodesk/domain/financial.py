"""Financial ledger entries, export requests, and period summaries."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from restodesk.domain.validation import UuidStr


class FinancialEntryType(StrEnum):
    REVENUE = "revenue"
    FEE = "fee"
    PROMOTION = "promotion"
    REFUND = "refund"
    ADJUSTMENT = "adjustment"
    DELIVERY_FEE = "delivery_fee"
    COMMISSION = "commission"
    OTHER = "other"


class ExportFormat(StrEnum):
    CSV = "csv"
    XLS = "xls"


class FinancialEntry(BaseModel):
    """One ledger line. Negative amounts are charges against the restaurant."""

    model_config = {"frozen": True}

    id: str
    restaurant_id: str
    external_entry_id: str | None = None
    entry_type: FinancialEntryType
    description: str | None = None
    amount: float
    reference_date: date
    order_id: str | None = None
    created_at: datetime


class BreakdownLine(BaseModel):
    model_config = {"frozen": True}

    entry_type: FinancialEntryType
    total: float
    count: int


class FinancialSummary(BaseModel):
    model_config = {"frozen": True}

    total_positive: float = 0.0
    total_negative: float = 0.0
    net: float = 0.0
    breakdown: list[BreakdownLine] = Field(default_factory=list)


class FinancialExportInput(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    restaurant_id: UuidStr
    start_date: date
    end_date: date
    format: ExportFormat = ExportFormat.CSV


class FinancialPeriodInput(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    restaurant_id: UuidStr
    start_date: date
    end_date: date


def summarize_entries(entries: Iterable[FinancialEntry]) -> FinancialSummary:
    """Aggregate entries into positive/negative totals and a per-type breakdown.

    Breakdown lines follow the declaration order of ``FinancialEntryType``
    and omit types with no entries.
    """
    totals: dict[FinancialEntryType, float] = defaultdict(float)
    counts: dict[FinancialEntryType, int] = defaultdict(int)
    positive = 0.0
    negative = 0.0
    for entry in entries:
        totals[entry.entry_type] += entry.amount
        counts[entry.entry_type] += 1
        if entry.amount >= 0:
            positive += entry.amount
        else:
            negative += entry.amount

    breakdown = [
        BreakdownLine(entry_type=kind, total=round(totals[kind], 2), count=counts[kind])
        for kind in FinancialEntryType
        if counts[kind]
    ]
    return FinancialSummary(
        total_positive=round(positive, 2),
        total_negative=round(negative, 2),
        net=round(positive + negative, 2),
        breakdown=breakdown,
    )
