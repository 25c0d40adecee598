"""Status enums and transition tables for every stateful entity.

The tables below are the single source of truth for legal transitions.
Guards in the per-entity rule classes are expressed in terms of these
tables plus, for image retries, one counter comparison.

A status that has no key in its table has no legal successors.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from types import MappingProxyType

# --- Status enums ---


class ActionStatus(StrEnum):
    """Lifecycle of a remediation action."""

    PLANNED = "planned"
    DONE = "done"
    DISCARDED = "discarded"


class ReportStatus(StrEnum):
    """Lifecycle of a weekly performance report."""

    GENERATING = "generating"
    GENERATED = "generated"
    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"


class ImageJobStatus(StrEnum):
    """Lifecycle of a catalog image generation/approval job."""

    GENERATING = "generating"
    READY_FOR_APPROVAL = "ready_for_approval"
    APPROVED = "approved"
    APPLIED_TO_CATALOG = "applied_to_catalog"
    REJECTED = "rejected"
    ARCHIVED = "archived"
    FAILED = "failed"


class TicketStatus(StrEnum):
    """Lifecycle of a customer support thread."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


# --- Transition maps ---

type TransitionTable = Mapping[str, frozenset[str]]


def _table(edges: dict[str, set[str]]) -> TransitionTable:
    return MappingProxyType({status: frozenset(targets) for status, targets in edges.items()})


ACTION_TRANSITIONS: TransitionTable = _table(
    {
        "planned": {"done", "discarded"},
        "done": set(),
        "discarded": set(),
    }
)

REPORT_TRANSITIONS: TransitionTable = _table(
    {
        "generating": {"generated", "failed"},
        "generated": {"sending"},
        "sending": {"sent", "failed"},
        "sent": set(),
        "failed": {"sending"},  # resend
    }
)

IMAGE_JOB_TRANSITIONS: TransitionTable = _table(
    {
        "generating": {"ready_for_approval", "failed"},
        "ready_for_approval": {"approved", "rejected"},
        "approved": {"applied_to_catalog", "failed"},
        "applied_to_catalog": {"archived"},
        "rejected": {"archived"},
        "archived": set(),
        "failed": {"generating"},  # bounded by MAX_IMAGE_RETRIES
    }
)

TICKET_TRANSITIONS: TransitionTable = _table(
    {
        "open": {"in_progress", "resolved", "closed"},
        "in_progress": {"open", "resolved", "closed"},
        "resolved": {"open", "closed"},  # reopenable
        "closed": set(),
    }
)

MAX_IMAGE_RETRIES = 3


def successors(current: str, transitions: TransitionTable) -> frozenset[str]:
    """Legal targets from *current*; empty for terminal or undeclared statuses."""
    return transitions.get(current, frozenset())


def is_valid_transition(
    current: str,
    target: str,
    transitions: TransitionTable,
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    return target in successors(current, transitions)


def is_terminal(current: str, transitions: TransitionTable) -> bool:
    """True when no transition leaves *current*."""
    return not successors(current, transitions)
