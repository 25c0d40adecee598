"""Tests for financial export rendering."""

from __future__ import annotations

from datetime import UTC, date, datetime

from restodesk.domain.financial import ExportFormat, FinancialEntryType
from restodesk.infrastructure.export import export_totals, render_financial_export
from tests.conftest import make_entry


def _ledger() -> list:
    return [
        make_entry(id="late", amount=40.0, reference_date=date(2024, 3, 9)),
        make_entry(
            id="fee",
            entry_type=FinancialEntryType.DELIVERY_FEE,
            amount=-3.5,
            reference_date=date(2024, 3, 2),
            order_id="ord-7",
        ),
        make_entry(
            id="promo",
            entry_type=FinancialEntryType.PROMOTION,
            amount=-5.0,
            reference_date=date(2024, 3, 2),
            created_at=datetime(2024, 3, 1, tzinfo=UTC),
        ),
    ]


class TestExportTotals:
    def test_groups_fee_types(self) -> None:
        totals = export_totals(_ledger())
        assert totals["revenue"] == 40.0
        assert totals["fees"] == -3.5
        assert totals["promotions"] == -5.0
        assert totals["net"] == 31.5

    def test_empty(self) -> None:
        assert export_totals([])["net"] == 0.0


class TestRender:
    def test_rows_sorted_by_date_then_creation(self) -> None:
        lines = render_financial_export(_ledger(), ExportFormat.CSV).decode("utf-8").splitlines()
        assert lines[1] == "2024-03-02,Promotion,,-5.00,"
        assert lines[2] == "2024-03-02,Delivery fee,,-3.50,ord-7"
        assert lines[3] == "2024-03-09,Revenue,,40.00,"

    def test_quotes_commas_in_csv(self) -> None:
        entry = make_entry(description="Lunch, dinner")
        text = render_financial_export([entry], ExportFormat.CSV).decode("utf-8")
        assert '"Lunch, dinner"' in text

    def test_xls_uses_tabs(self) -> None:
        text = render_financial_export(_ledger(), ExportFormat.XLS).decode("utf-8")
        assert text.splitlines()[0] == "Date\tType\tDescription\tAmount\tOrder"
        assert "\tTotal net\t\t31.50\t" in text
