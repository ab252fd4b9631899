"""Result types shared by the balancer, resolver and engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from src.allocation.items import Item

Assignment = dict[str, list[Item]]


class RejectionReason(Enum):
    """Why an item ended up in the unassigned list."""

    CAPACITY = auto()  # no carrier had room during the greedy pass
    CONFLICT = auto()  # evicted for incompatibility and no reassignment attempt succeeded
    RECONCILED = auto()  # missing from every carrier after resolution


class AllocationStatus(Enum):
    """Outcome of one allocation run."""

    COMPLETE = auto()  # every leaf item placed
    PARTIAL = auto()  # some leaf items unassigned
    EMPTY = auto()  # no items were supplied


@dataclass
class AllocationResult:
    """Unified engine output.

    ``assignment`` and ``unassigned`` are the contract results; the remaining
    fields are diagnostics and do not take part in determinism checks.
    """

    assignment: Assignment
    unassigned: list[Item]
    status: AllocationStatus
    solve_time_ms: float = 0.0
    splits: dict[str, list[Item]] = field(default_factory=dict)
    rejections: dict[str, RejectionReason] = field(default_factory=dict)

    @property
    def n_splits(self) -> int:
        return len(self.splits)

    @property
    def assigned_weight(self) -> int:
        return sum(item.weight for items in self.assignment.values() for item in items)

    @property
    def unassigned_weight(self) -> int:
        return sum(item.weight for item in self.unassigned)

    def carrier_of(self, item_id: str) -> str | None:
        """Carrier holding ``item_id``, or None if it is not assigned."""
        for carrier_id, items in self.assignment.items():
            if any(item.id == item_id for item in items):
                return carrier_id
        return None
