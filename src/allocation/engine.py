"""
Allocation Engine: runs one allocation.

    capacity map → carriers
    items        → Greedy Balancer → provisional assignment
                 → Conflict Resolver → final assignment + unassigned
                 → reconciliation (every leaf item is either placed or unassigned)

Usage:
    assignment, unassigned = allocate(items, {"Vehicle-0": 100, "Vehicle-1": 80})

    engine = AllocationEngine(AllocatorConfig(max_attempts=3))
    result = engine.allocate_with_diagnostics(items, capacities)
    print(result.status, result.solve_time_ms)

Partial allocation is a normal outcome: items that cannot be placed are
returned in the unassigned list, never raised as an error.
"""

from __future__ import annotations

import logging
import time
from typing import Mapping, Sequence

from src.allocation.balancer import balance
from src.allocation.carriers import carriers_from_capacities
from src.allocation.config import AllocatorConfig
from src.allocation.errors import InvalidItemError
from src.allocation.items import Item, check_unique_ids, total_weight
from src.allocation.resolver import ConflictResolver, Resolution
from src.allocation.results import (
    AllocationResult,
    AllocationStatus,
    Assignment,
    RejectionReason,
)

logger = logging.getLogger(__name__)


def _validate_items(items: Sequence[Item]) -> None:
    for item in items:
        if not isinstance(item, Item):
            raise InvalidItemError(f"Expected Item, got {type(item).__name__}")
    check_unique_ids(item.id for item in items)


def _leaf_items(items: Sequence[Item], splits: dict[str, list[Item]]) -> list[Item]:
    """Originals that were never split, plus the parts of those that were."""
    leaves: list[Item] = []
    for item in items:
        leaves.extend(splits.get(item.id, [item]))
    return leaves


def _reconcile(items: Sequence[Item], resolution: Resolution) -> None:
    placed = {item.id for lst in resolution.lists.values() for item in lst}
    unplaced = {item.id for item in resolution.unassigned}

    for leaf in _leaf_items(items, resolution.splits):
        if leaf.id in placed or leaf.id in unplaced:
            continue
        logger.warning("Item %s missing from the final assignment; marking unassigned", leaf.id)
        resolution.unassigned.append(leaf)
        resolution.rejections[leaf.id] = RejectionReason.RECONCILED
        unplaced.add(leaf.id)

    for lst in resolution.lists.values():
        for item in lst:
            item.assigned = True
    for item in resolution.unassigned:
        item.assigned = False


class AllocationEngine:
    """Runs the balancer, the resolver and reconciliation for one batch.

    The engine holds no state between runs apart from cumulative counters.
    """

    def __init__(self, config: AllocatorConfig | None = None) -> None:
        self.config = config or AllocatorConfig()
        self.resolver = ConflictResolver(
            max_attempts=self.config.max_attempts,
            split_incompatible=self.config.split_incompatible,
        )
        self.total_runs: int = 0
        self.total_solve_time_ms: float = 0.0

    def allocate(
        self,
        items: Sequence[Item],
        carrier_capacities: Mapping[str, int],
    ) -> tuple[Assignment, list[Item]]:
        """Return ``(assignment, unassigned)``."""
        result = self.allocate_with_diagnostics(items, carrier_capacities)
        return result.assignment, result.unassigned

    def allocate_with_diagnostics(
        self,
        items: Sequence[Item],
        carrier_capacities: Mapping[str, int],
    ) -> AllocationResult:
        """Allocate and return the full result.

        Raises:
            NoCarriersError: if ``carrier_capacities`` is empty.
            InvalidItemError: on duplicate or colliding ids, or non-Item entries.
            InvalidCarrierError: on a negative or non-integer capacity.
        """
        t0 = time.perf_counter()
        carriers = carriers_from_capacities(carrier_capacities)
        items = list(items)
        _validate_items(items)

        weight = total_weight(items)
        logger.info("Allocating %d item(s), total weight %d, over %d carrier(s)", len(items), weight, len(carriers))
        logger.info("Target weight per carrier: %d", weight // len(carriers))

        provisional = balance(items, carriers)
        resolution = self.resolver.resolve(provisional, carriers)
        _reconcile(items, resolution)

        if not items:
            status = AllocationStatus.EMPTY
        elif resolution.unassigned:
            status = AllocationStatus.PARTIAL
        else:
            status = AllocationStatus.COMPLETE

        ms = (time.perf_counter() - t0) * 1e3
        self.total_runs += 1
        self.total_solve_time_ms += ms
        logger.info(
            "Allocation %s: %d unassigned item(s), %d split(s), %.2f ms",
            status.name,
            len(resolution.unassigned),
            len(resolution.splits),
            ms,
        )
        return AllocationResult(
            assignment=resolution.lists,
            unassigned=resolution.unassigned,
            status=status,
            solve_time_ms=ms,
            splits=resolution.splits,
            rejections=resolution.rejections,
        )


def allocate(
    items: Sequence[Item],
    carrier_capacities: Mapping[str, int],
    config: AllocatorConfig | None = None,
) -> tuple[Assignment, list[Item]]:
    """Allocate ``items`` over the carriers in ``carrier_capacities``."""
    return AllocationEngine(config).allocate(items, carrier_capacities)
