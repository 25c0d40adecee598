"""Tests for telemetry primitives: Span, trace_span, @traced."""

from __future__ import annotations

from collections.abc import Generator

import pytest

from restodesk.infrastructure.backend import Backend
from restodesk.services.reports import ReportService
from restodesk.services.result import Ok, ok
from restodesk.services.telemetry import (
    Span,
    _current_span,
    disable_telemetry,
    enable_telemetry,
    get_current_span,
    trace_span,
    traced,
)
from tests.conftest import RESTAURANT_ID


@pytest.fixture(autouse=True)
def _reset_telemetry_state() -> Generator[None]:
    yield
    disable_telemetry()
    _current_span.set(None)


class TestSpan:
    def test_duration_before_end_is_zero(self) -> None:
        assert Span(name="test").duration_ms == 0.0

    def test_to_dict_nests_children(self) -> None:
        root = Span(name="root")
        child = Span(name="child", parent=root)
        root.children.append(child)
        child.annotate("rows", 3)
        child.end()
        root.end()
        d = root.to_dict()
        assert d["children"][0]["annotations"] == {"rows": 3}
        assert "annotations" not in d


class TestTraceSpan:
    def test_disabled_yields_none(self) -> None:
        with trace_span("work") as span:
            assert span is None

    def test_without_parent_yields_none(self) -> None:
        enable_telemetry()
        with trace_span("work") as span:
            assert span is None
        assert get_current_span() is None


class TestTraced:
    @pytest.mark.asyncio
    async def test_disabled_leaves_meta_alone(self) -> None:
        @traced
        async def op() -> Ok[int]:
            return ok(1, op="op")

        result = await op()
        assert result.meta is None

    @pytest.mark.asyncio
    async def test_enabled_injects_span_tree(self) -> None:
        enable_telemetry()

        @traced
        async def op() -> Ok[int]:
            with trace_span("inner") as span:
                assert span is not None
                span.annotate("step", 1)
            return ok(1, op="op")

        result = await op()
        telemetry = result.meta["telemetry"]
        assert telemetry["name"].endswith("op")
        assert telemetry["children"][0]["name"] == "inner"

    @pytest.mark.asyncio
    async def test_service_results_carry_telemetry(self, backend: Backend) -> None:
        enable_telemetry()
        result = await ReportService(backend).generate_report(
            RESTAURANT_ID, "2024-03-04", "2024-03-10"
        )
        assert result.ok
        assert result.meta is not None
        assert result.meta["telemetry"]["name"] == "ReportService.generate_report"

    @pytest.mark.asyncio
    async def test_non_result_return_is_untouched(self) -> None:
        enable_telemetry()

        @traced
        async def op() -> int:
            return 7

        assert await op() == 7
