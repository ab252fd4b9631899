"""
Greedy Balancer: first-pass load-balancing assignment.

Items are taken heaviest first and each one goes to the least-loaded carrier
that still has room for it. This is a load-balancing variant of first-fit:
it favours even load over tight packing.

Ordering rules (all exact, for reproducibility):
  • items sorted by weight descending; ties keep input order (stable sort)
  • carrier ties broken by carrier order (first found wins)
  • an item no carrier can hold goes to ``rejected`` and never enters a list
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from src.allocation.carriers import Carrier
from src.allocation.items import Item
from src.allocation.results import Assignment

logger = logging.getLogger(__name__)


@dataclass
class ProvisionalAssignment:
    """Greedy-pass output.

    Attributes:
        lists: carrier id → items in placement order (every carrier present).
        loads: carrier id → running load after the pass.
        rejected: items no carrier had capacity for, in placement order.
    """

    lists: Assignment = field(default_factory=dict)
    loads: dict[str, int] = field(default_factory=dict)
    rejected: list[Item] = field(default_factory=list)


def _least_loaded_fit(item: Item, carriers: Sequence[Carrier], loads: dict[str, int]) -> Carrier | None:
    best: Carrier | None = None
    for carrier in carriers:
        load = loads[carrier.id]
        if load + item.weight > carrier.capacity:
            continue
        # strict < keeps the first carrier on ties
        if best is None or load < loads[best.id]:
            best = carrier
    return best


def balance(items: Sequence[Item], carriers: Sequence[Carrier]) -> ProvisionalAssignment:
    """Distribute ``items`` across ``carriers``, heaviest first, honouring capacity."""

    result = ProvisionalAssignment(
        lists={c.id: [] for c in carriers},
        loads={c.id: 0 for c in carriers},
    )

    for item in sorted(items, key=lambda i: -i.weight):
        carrier = _least_loaded_fit(item, carriers, result.loads)
        if carrier is None:
            logger.warning("Item %s (w=%d) exceeds remaining capacity on every carrier", item.id, item.weight)
            result.rejected.append(item)
            continue
        result.lists[carrier.id].append(item)
        result.loads[carrier.id] += item.weight
        logger.debug("Item %s assigned to carrier %s", item.id, carrier.id)

    for carrier in carriers:
        logger.info(
            "Carrier %s received items weighing %d / %d",
            carrier.id,
            result.loads[carrier.id],
            carrier.capacity,
        )
    return result
