"""
Conflict Resolver: removes incompatible items from carriers and re-homes them.

Pass 1: detection
    Each carrier's provisional list is walked in order. An item is kept only if
    it is compatible with every item already kept on that carrier; otherwise it
    joins a global incompatible pool. First seen wins; this is not a maximum
    compatible subset.

Pass 2: resolution (pool order)
    weight > 1  → split once into [w // 2, w - w // 2]; each part is re-homed.
    weight == 1 → re-homed as is.
    Parts are never split again, even if they fit nowhere.

Re-homing is a bounded retry: up to ``max_attempts`` scans over the carriers
in order, taking the first carrier where the item is compatible with every
current item and still fits. Items that exhaust their attempts are reported
as unassigned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from src.allocation.balancer import ProvisionalAssignment
from src.allocation.carriers import Carrier
from src.allocation.items import Item
from src.allocation.results import Assignment, RejectionReason

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


@dataclass
class Resolution:
    """Resolver output.

    Attributes:
        lists: final carrier id → items.
        loads: final carrier id → total weight.
        unassigned: capacity rejections from the greedy pass, then resolution failures.
        splits: parent id → parts, for every item split during resolution.
        rejections: item id → reason, for every entry of ``unassigned``.
    """

    lists: Assignment = field(default_factory=dict)
    loads: dict[str, int] = field(default_factory=dict)
    unassigned: list[Item] = field(default_factory=list)
    splits: dict[str, list[Item]] = field(default_factory=dict)
    rejections: dict[str, RejectionReason] = field(default_factory=dict)


class ConflictResolver:
    """Detects per-carrier incompatibilities and re-homes the evicted items.

    Args:
        max_attempts: reassignment attempts per item before giving up.
        split_incompatible: split evicted items with weight > 1 before
            re-homing them.
    """

    def __init__(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS, split_incompatible: bool = True) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.split_incompatible = split_incompatible

    def resolve(self, provisional: ProvisionalAssignment, carriers: Sequence[Carrier]) -> Resolution:
        """Run detection then resolution over a provisional assignment."""

        result = Resolution()
        for item in provisional.rejected:
            self._reject(result, item, RejectionReason.CAPACITY)

        pool = self._detect(provisional, carriers, result)
        if pool:
            logger.info("Resolving %d incompatible item(s)", len(pool))
        for item in pool:
            self._handle(item, carriers, result)
        return result

    # ── Pass 1 ────────────────────────────────────────────────────────────────

    @staticmethod
    def _detect(
        provisional: ProvisionalAssignment,
        carriers: Sequence[Carrier],
        result: Resolution,
    ) -> list[Item]:
        pool: list[Item] = []
        for carrier in carriers:
            kept: list[Item] = []
            for item in provisional.lists.get(carrier.id, []):
                clash = next((k for k in kept if not item.is_compatible_with(k)), None)
                if clash is None:
                    kept.append(item)
                else:
                    logger.warning("Incompatible: %s and %s on carrier %s", item.id, clash.id, carrier.id)
                    pool.append(item)
            result.lists[carrier.id] = kept
            result.loads[carrier.id] = sum(i.weight for i in kept)
        return pool

    # ── Pass 2 ────────────────────────────────────────────────────────────────

    def _handle(self, item: Item, carriers: Sequence[Carrier], result: Resolution) -> None:
        if self.split_incompatible and item.splittable:
            parts = item.halve()
            result.splits[item.id] = parts
            logger.info("Split item %s into %s", item.id, ", ".join(p.id for p in parts))
        else:
            parts = [item]

        for part in parts:
            if not self._reassign(part, carriers, result):
                logger.error("Could not place item %s after %d attempts", part.id, self.max_attempts)
                self._reject(result, part, RejectionReason.CONFLICT)

    def _reassign(self, item: Item, carriers: Sequence[Carrier], result: Resolution) -> bool:
        for attempt in range(1, self.max_attempts + 1):
            for carrier in carriers:
                if result.loads[carrier.id] + item.weight > carrier.capacity:
                    continue
                if not all(item.is_compatible_with(other) for other in result.lists[carrier.id]):
                    continue
                result.lists[carrier.id].append(item)
                result.loads[carrier.id] += item.weight
                item.assigned = True
                logger.info("Item %s reassigned to carrier %s", item.id, carrier.id)
                return True
            logger.warning("Attempt %d: no compatible carrier for %s", attempt, item.id)
        return False

    @staticmethod
    def _reject(result: Resolution, item: Item, reason: RejectionReason) -> None:
        item.assigned = False
        result.unassigned.append(item)
        result.rejections[item.id] = reason
