"""
Load metrics and invariant checks for a finished allocation.

KPIs:
- Per-carrier load and utilisation (% of capacity)
- Target load (total input weight / number of carriers)
- Load imbalance (max − min) and standard deviation across carriers
- Assigned / unassigned weight and the assignment rate by weight
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import combinations
from typing import Sequence

import numpy as np

from src.allocation.carriers import Carrier
from src.allocation.items import Item
from src.allocation.results import Assignment


@dataclass
class LoadMetrics:
    """Summary statistics for one allocation."""

    carrier_loads: dict[str, int] = field(default_factory=dict)
    carrier_utilization_pct: dict[str, float] = field(default_factory=dict)
    target_load: float = 0.0
    load_imbalance: int = 0
    load_std: float = 0.0
    assigned_weight: int = 0
    unassigned_weight: int = 0
    n_assigned: int = 0
    n_unassigned: int = 0

    @property
    def assignment_rate(self) -> float:
        """Fraction of total weight that was placed (1.0 for an empty batch)."""
        total = self.assigned_weight + self.unassigned_weight
        return self.assigned_weight / total if total else 1.0


def compute_load_metrics(
    assignment: Assignment,
    carriers: Sequence[Carrier],
    unassigned: Sequence[Item] = (),
) -> LoadMetrics:
    """Compute load KPIs for ``assignment`` over ``carriers``."""

    if not carriers:
        return LoadMetrics()

    loads = np.array(
        [sum(item.weight for item in assignment.get(c.id, [])) for c in carriers],
        dtype=np.int64,
    )
    caps = np.array([c.capacity for c in carriers], dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        util = np.where(caps > 0, loads / caps * 100.0, 0.0)

    assigned_weight = int(loads.sum())
    unassigned_weight = sum(item.weight for item in unassigned)

    return LoadMetrics(
        carrier_loads={c.id: int(w) for c, w in zip(carriers, loads)},
        carrier_utilization_pct={c.id: float(u) for c, u in zip(carriers, util)},
        target_load=(assigned_weight + unassigned_weight) / len(carriers),
        load_imbalance=int(loads.max() - loads.min()),
        load_std=float(np.std(loads)),
        assigned_weight=assigned_weight,
        unassigned_weight=unassigned_weight,
        n_assigned=sum(len(assignment.get(c.id, [])) for c in carriers),
        n_unassigned=len(unassigned),
    )


def check_invariants(assignment: Assignment, carriers: Sequence[Carrier]) -> list[str]:
    """Return capacity and compatibility violations; empty when the assignment is valid."""

    violations: list[str] = []
    for carrier in carriers:
        items = assignment.get(carrier.id, [])
        load = sum(item.weight for item in items)
        if load > carrier.capacity:
            violations.append(f"{carrier.id}: load {load} exceeds capacity {carrier.capacity}")
        for a, b in combinations(items, 2):
            if not a.is_compatible_with(b):
                violations.append(f"{carrier.id}: {a.id} is incompatible with {b.id}")
    return violations
