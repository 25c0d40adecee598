"""Tests for FinancialService and PerformanceService."""

from __future__ import annotations

import dataclasses
from datetime import date

import pytest

from restodesk.domain.errors import ValidationError
from restodesk.domain.financial import ExportFormat, FinancialEntryType
from restodesk.domain.restaurant import AlertThresholds
from restodesk.infrastructure.backend import Backend
from restodesk.infrastructure.repositories.memory import MemoryStore
from restodesk.services.financial import FinancialService
from restodesk.services.performance import PerformanceService
from tests.conftest import OTHER_RESTAURANT_ID, RESTAURANT_ID, make_entry, make_snapshot


class _ExplodingFinancialRepository:
    """Fails the test if the service reaches storage."""

    async def get_by_restaurant(self, *args: object, **kwargs: object) -> list[object]:
        raise AssertionError("repository should not be called")

    async def export_data(self, *args: object, **kwargs: object) -> bytes:
        raise AssertionError("repository should not be called")


@pytest.fixture
def guarded_backend(backend: Backend) -> Backend:
    repos = dataclasses.replace(backend.repos, financial=_ExplodingFinancialRepository())
    return Backend(repos, backend.settings)


@pytest.fixture
def ledger(store: MemoryStore) -> MemoryStore:
    store.seed(
        make_entry(id="e1", amount=250.0, reference_date=date(2024, 3, 2), description="Orders"),
        make_entry(
            id="e2",
            entry_type=FinancialEntryType.COMMISSION,
            amount=-37.5,
            reference_date=date(2024, 3, 3),
        ),
        make_entry(id="e3", amount=80.0, reference_date=date(2024, 4, 1)),
        make_entry(id="e4", restaurant_id=OTHER_RESTAURANT_ID, amount=999.0),
    )
    return store


class TestExportFinancialData:
    @pytest.mark.asyncio
    async def test_reversed_dates_never_reach_storage(self, guarded_backend: Backend) -> None:
        result = await FinancialService(guarded_backend).export_financial_data(
            RESTAURANT_ID, "2024-03-31", "2024-03-01"
        )
        assert not result.ok
        assert isinstance(result.error, ValidationError)
        assert result.error.field == "start_date"

    @pytest.mark.asyncio
    async def test_csv_export(self, backend: Backend, ledger: MemoryStore) -> None:
        result = await FinancialService(backend).export_financial_data(
            RESTAURANT_ID, "2024-03-01", "2024-03-31"
        )
        assert result.ok
        assert result.data.filename == "financial_2024-03-01_2024-03-31.csv"
        assert result.data.format == ExportFormat.CSV
        text = result.data.content.decode("utf-8")
        lines = text.splitlines()
        assert lines[0] == "Date,Type,Description,Amount,Order"
        assert lines[1] == "2024-03-02,Revenue,Orders,250.00,"
        assert "999.00" not in text
        assert "80.00" not in text
        assert ",Total net,,212.50," in lines

    @pytest.mark.asyncio
    async def test_xls_export_is_tab_separated(self, backend: Backend, ledger: MemoryStore) -> None:
        result = await FinancialService(backend).export_financial_data(
            RESTAURANT_ID, date(2024, 3, 1), date(2024, 3, 31), "xls"
        )
        assert result.ok
        assert result.data.filename.endswith(".xls")
        assert result.data.content.decode("utf-8").startswith("Date\tType\t")

    @pytest.mark.asyncio
    async def test_unknown_format(self, backend: Backend) -> None:
        result = await FinancialService(backend).export_financial_data(
            RESTAURANT_ID, "2024-03-01", "2024-03-31", "pdf"
        )
        assert not result.ok
        assert result.error.field == "format"

    @pytest.mark.asyncio
    async def test_same_day_range(self, backend: Backend, ledger: MemoryStore) -> None:
        result = await FinancialService(backend).export_financial_data(
            RESTAURANT_ID, "2024-03-02", "2024-03-02"
        )
        assert result.ok
        assert "250.00" in result.data.content.decode("utf-8")


class TestFinancialSummary:
    @pytest.mark.asyncio
    async def test_summary(self, backend: Backend, ledger: MemoryStore) -> None:
        result = await FinancialService(backend).get_financial_summary(
            RESTAURANT_ID, "2024-03-01", "2024-03-31"
        )
        assert result.ok
        assert result.data.total_positive == pytest.approx(250.0)
        assert result.data.total_negative == pytest.approx(-37.5)
        assert result.data.net == pytest.approx(212.5)

    @pytest.mark.asyncio
    async def test_reversed_dates(self, guarded_backend: Backend) -> None:
        result = await FinancialService(guarded_backend).get_financial_summary(
            RESTAURANT_ID, "2024-03-31", "2024-03-01"
        )
        assert not result.ok
        assert result.error.field == "start_date"


class TestPerformance:
    @pytest.mark.asyncio
    async def test_no_snapshots(self, backend: Backend) -> None:
        result = await PerformanceService(backend).get_performance_data(RESTAURANT_ID)
        assert not result.ok
        assert result.error.code == "NOT_FOUND"
        assert result.error.message == "No performance data available for this restaurant"

    @pytest.mark.asyncio
    async def test_single_snapshot_has_no_comparison(
        self, backend: Backend, store: MemoryStore
    ) -> None:
        store.seed(make_snapshot())
        result = await PerformanceService(backend).get_performance_data(RESTAURANT_ID)
        assert result.ok
        assert result.data.previous is None
        assert result.data.comparison == []
        assert result.data.conversion_rate == pytest.approx(0.1)

    @pytest.mark.asyncio
    async def test_compares_two_newest(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(
            make_snapshot(id="w1", week_start=date(2024, 2, 19), visits=10),
            make_snapshot(id="w2", week_start=date(2024, 2, 26), visits=800),
            make_snapshot(id="w3", week_start=date(2024, 3, 4), cancellation_rate=0.05),
        )
        result = await PerformanceService(backend).get_performance_data(RESTAURANT_ID)
        assert result.ok
        assert result.data.current.id == "w3"
        assert result.data.previous is not None
        assert result.data.previous.id == "w2"
        assert result.data.comparison[0].diff == 200
        assert result.data.alerts == ["Cancellation rate above 2%"]

    @pytest.mark.asyncio
    async def test_as_of_reviews_a_past_week(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(
            make_snapshot(id="w1", week_start=date(2024, 2, 19)),
            make_snapshot(id="w2", week_start=date(2024, 2, 26)),
            make_snapshot(id="w3", week_start=date(2024, 3, 4)),
        )
        svc = PerformanceService(backend)
        result = await svc.get_performance_data(RESTAURANT_ID, as_of=date(2024, 2, 26))
        assert result.ok
        assert result.data.current.id == "w2"
        assert result.data.previous is not None
        assert result.data.previous.id == "w1"

        too_early = await svc.get_performance_data(RESTAURANT_ID, as_of=date(2024, 1, 1))
        assert not too_early.ok
        assert too_early.error.code == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_explicit_thresholds(self, backend: Backend, store: MemoryStore) -> None:
        store.seed(make_snapshot(cancellation_rate=0.05))
        result = await PerformanceService(backend).get_performance_data(
            RESTAURANT_ID, thresholds=AlertThresholds(cancellation_max=0.1)
        )
        assert result.ok
        assert result.data.alerts == []
