"""Financial export rendering.

``csv`` is comma-separated; ``xls`` is tab-separated text, which
spreadsheet applications open directly. Both end with a totals block
grouping fees, commissions and delivery fees together.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable
from io import StringIO

from restodesk.domain.financial import ExportFormat, FinancialEntry, FinancialEntryType

HEADER = ["Date", "Type", "Description", "Amount", "Order"]

TYPE_LABELS: dict[str, str] = {
    FinancialEntryType.REVENUE: "Revenue",
    FinancialEntryType.FEE: "Fee",
    FinancialEntryType.PROMOTION: "Promotion",
    FinancialEntryType.REFUND: "Refund",
    FinancialEntryType.ADJUSTMENT: "Adjustment",
    FinancialEntryType.DELIVERY_FEE: "Delivery fee",
    FinancialEntryType.COMMISSION: "Commission",
    FinancialEntryType.OTHER: "Other",
}

_FEE_TYPES = frozenset(
    {FinancialEntryType.FEE, FinancialEntryType.COMMISSION, FinancialEntryType.DELIVERY_FEE}
)


def export_totals(entries: Iterable[FinancialEntry]) -> dict[str, float]:
    totals = {"revenue": 0.0, "fees": 0.0, "promotions": 0.0, "refunds": 0.0, "other": 0.0}
    for entry in entries:
        if entry.entry_type == FinancialEntryType.REVENUE:
            totals["revenue"] += entry.amount
        elif entry.entry_type in _FEE_TYPES:
            totals["fees"] += entry.amount
        elif entry.entry_type == FinancialEntryType.PROMOTION:
            totals["promotions"] += entry.amount
        elif entry.entry_type == FinancialEntryType.REFUND:
            totals["refunds"] += entry.amount
        else:
            totals["other"] += entry.amount
    totals["net"] = sum(totals.values())
    return totals


def render_financial_export(entries: Iterable[FinancialEntry], fmt: ExportFormat) -> bytes:
    """Render *entries* (any order) as UTF-8 bytes sorted by reference date."""
    rows = sorted(entries, key=lambda e: (e.reference_date, e.created_at))
    buffer = StringIO()
    dialect = "excel" if fmt == ExportFormat.CSV else "excel-tab"
    writer = csv.writer(buffer, dialect=dialect, lineterminator="\n")

    writer.writerow(HEADER)
    for entry in rows:
        writer.writerow(
            [
                entry.reference_date.isoformat(),
                TYPE_LABELS.get(entry.entry_type, entry.entry_type),
                entry.description or "",
                f"{entry.amount:.2f}",
                entry.order_id or "",
            ]
        )

    writer.writerow([])
    for label, value in export_totals(rows).items():
        writer.writerow(["", f"Total {label}", "", f"{value:.2f}", ""])
    return buffer.getvalue().encode("utf-8")
