"""Tests for lifecycle status enums and transition tables."""

import itertools
from collections.abc import Callable
from enum import StrEnum
from typing import Any

import pytest

from restodesk.domain.action import ActionRules
from restodesk.domain.image_job import ImageJobRules
from restodesk.domain.lifecycle import (
    ACTION_TRANSITIONS,
    IMAGE_JOB_TRANSITIONS,
    MAX_IMAGE_RETRIES,
    REPORT_TRANSITIONS,
    TICKET_TRANSITIONS,
    ActionStatus,
    ImageJobStatus,
    ReportStatus,
    TicketStatus,
    is_terminal,
    is_valid_transition,
    successors,
)
from restodesk.domain.report import ReportRules
from restodesk.domain.ticket import TicketRules
from tests.conftest import make_action, make_image_job, make_report, make_ticket


class TestTablesCoverEnums:
    @pytest.mark.parametrize(
        ("status_enum", "table"),
        [
            (ActionStatus, ACTION_TRANSITIONS),
            (ReportStatus, REPORT_TRANSITIONS),
            (ImageJobStatus, IMAGE_JOB_TRANSITIONS),
            (TicketStatus, TICKET_TRANSITIONS),
        ],
        ids=["action", "report", "image_job", "ticket"],
    )
    def test_every_status_has_a_row(self, status_enum: type, table: object) -> None:
        assert {s.value for s in status_enum} == set(table)  # type: ignore[call-overload]

    def test_tables_are_read_only(self) -> None:
        with pytest.raises(TypeError):
            ACTION_TRANSITIONS["planned"] = frozenset()  # type: ignore[index]


class TestActionTransitions:
    def test_planned_can_close_either_way(self) -> None:
        assert successors("planned", ACTION_TRANSITIONS) == {"done", "discarded"}

    @pytest.mark.parametrize("status", ["done", "discarded"])
    def test_closed_statuses_are_terminal(self, status: str) -> None:
        assert is_terminal(status, ACTION_TRANSITIONS)

    def test_done_cannot_be_discarded(self) -> None:
        assert not is_valid_transition("done", "discarded", ACTION_TRANSITIONS)


class TestReportTransitions:
    def test_happy_path(self) -> None:
        assert is_valid_transition("generating", "generated", REPORT_TRANSITIONS)
        assert is_valid_transition("generated", "sending", REPORT_TRANSITIONS)
        assert is_valid_transition("sending", "sent", REPORT_TRANSITIONS)

    def test_failed_report_can_be_resent(self) -> None:
        assert successors("failed", REPORT_TRANSITIONS) == {"sending"}

    def test_generated_cannot_fail_directly(self) -> None:
        assert not is_valid_transition("generated", "failed", REPORT_TRANSITIONS)

    def test_sent_is_terminal(self) -> None:
        assert is_terminal("sent", REPORT_TRANSITIONS)


class TestImageJobTransitions:
    def test_approval_gate(self) -> None:
        assert successors("ready_for_approval", IMAGE_JOB_TRANSITIONS) == {"approved", "rejected"}

    def test_catalog_only_reachable_from_approved(self) -> None:
        sources = {
            status
            for status, targets in IMAGE_JOB_TRANSITIONS.items()
            if "applied_to_catalog" in targets
        }
        assert sources == {"approved"}

    def test_rejected_cannot_be_retried(self) -> None:
        assert not is_valid_transition("rejected", "generating", IMAGE_JOB_TRANSITIONS)

    def test_failed_goes_back_to_generating(self) -> None:
        assert is_valid_transition("failed", "generating", IMAGE_JOB_TRANSITIONS)

    def test_archived_is_terminal(self) -> None:
        assert is_terminal("archived", IMAGE_JOB_TRANSITIONS)

    def test_retry_limit(self) -> None:
        assert MAX_IMAGE_RETRIES == 3


class TestTicketTransitions:
    def test_resolved_can_reopen(self) -> None:
        assert is_valid_transition("resolved", "open", TICKET_TRANSITIONS)

    def test_closed_is_terminal(self) -> None:
        assert is_terminal("closed", TICKET_TRANSITIONS)

    def test_open_to_open_is_not_a_transition(self) -> None:
        assert not is_valid_transition("open", "open", TICKET_TRANSITIONS)


class TestUnknownStatus:
    def test_unknown_status_has_no_successors(self) -> None:
        assert successors("bogus", ACTION_TRANSITIONS) == frozenset()
        assert is_terminal("bogus", ACTION_TRANSITIONS)


# Independent copy of the transition tables.

EXPECTED_ACTION: dict[StrEnum, set[StrEnum]] = {
    ActionStatus.PLANNED: {ActionStatus.DONE, ActionStatus.DISCARDED},
    ActionStatus.DONE: set(),
    ActionStatus.DISCARDED: set(),
}
EXPECTED_REPORT: dict[StrEnum, set[StrEnum]] = {
    ReportStatus.GENERATING: {ReportStatus.GENERATED, ReportStatus.FAILED},
    ReportStatus.GENERATED: {ReportStatus.SENDING},
    ReportStatus.SENDING: {ReportStatus.SENT, ReportStatus.FAILED},
    ReportStatus.SENT: set(),
    ReportStatus.FAILED: {ReportStatus.SENDING},
}
EXPECTED_IMAGE_JOB: dict[StrEnum, set[StrEnum]] = {
    ImageJobStatus.GENERATING: {ImageJobStatus.READY_FOR_APPROVAL, ImageJobStatus.FAILED},
    ImageJobStatus.READY_FOR_APPROVAL: {ImageJobStatus.APPROVED, ImageJobStatus.REJECTED},
    ImageJobStatus.APPROVED: {ImageJobStatus.APPLIED_TO_CATALOG, ImageJobStatus.FAILED},
    ImageJobStatus.APPLIED_TO_CATALOG: {ImageJobStatus.ARCHIVED},
    ImageJobStatus.REJECTED: {ImageJobStatus.ARCHIVED},
    ImageJobStatus.ARCHIVED: set(),
    ImageJobStatus.FAILED: {ImageJobStatus.GENERATING},
}
EXPECTED_TICKET: dict[StrEnum, set[StrEnum]] = {
    TicketStatus.OPEN: {TicketStatus.IN_PROGRESS, TicketStatus.RESOLVED, TicketStatus.CLOSED},
    TicketStatus.IN_PROGRESS: {TicketStatus.OPEN, TicketStatus.RESOLVED, TicketStatus.CLOSED},
    TicketStatus.RESOLVED: {TicketStatus.OPEN, TicketStatus.CLOSED},
    TicketStatus.CLOSED: set(),
}

_ENTITIES: list[tuple[str, dict[StrEnum, set[StrEnum]], Any, Callable[..., Any], Any]] = [
    ("action", EXPECTED_ACTION, ACTION_TRANSITIONS, make_action, ActionRules),
    ("report", EXPECTED_REPORT, REPORT_TRANSITIONS, make_report, ReportRules),
    ("image_job", EXPECTED_IMAGE_JOB, IMAGE_JOB_TRANSITIONS, make_image_job, ImageJobRules),
    ("ticket", EXPECTED_TICKET, TICKET_TRANSITIONS, make_ticket, TicketRules),
]

_PAIRS = [
    pytest.param(
        table,
        build,
        rules,
        current,
        target,
        target in expected[current],
        id=f"{name}:{current}->{target}",
    )
    for name, expected, table, build, rules in _ENTITIES
    for current, target in itertools.product(expected, repeat=2)
]


class TestEveryPair:
    @pytest.mark.parametrize(("table", "build", "rules", "current", "target", "allowed"), _PAIRS)
    def test_table_matches_expected(
        self,
        table: Any,
        build: Callable[..., Any],
        rules: Any,
        current: StrEnum,
        target: StrEnum,
        allowed: bool,
    ) -> None:
        assert is_valid_transition(current, target, table) is allowed
        assert rules.can_transition_to(build(status=current), target) is allowed

    @pytest.mark.parametrize(
        ("expected", "status_enum"),
        [
            (EXPECTED_ACTION, ActionStatus),
            (EXPECTED_REPORT, ReportStatus),
            (EXPECTED_IMAGE_JOB, ImageJobStatus),
            (EXPECTED_TICKET, TicketStatus),
        ],
        ids=["action", "report", "image_job", "ticket"],
    )
    def test_expected_covers_enum(
        self, expected: dict[StrEnum, set[StrEnum]], status_enum: type[StrEnum]
    ) -> None:
        assert set(expected) == set(status_enum)

    @pytest.mark.parametrize(
        ("table", "current"),
        [
            pytest.param(table, current, id=f"{name}:{current}")
            for name, expected, table, _, _ in _ENTITIES
            for current, targets in expected.items()
            if not targets
        ],
    )
    def test_terminal_statuses(self, table: Any, current: StrEnum) -> None:
        assert is_terminal(current, table)
        assert successors(current, table) == frozenset()
