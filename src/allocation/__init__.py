"""
Cargo allocation engine.

Places weighted items on capacity-limited carriers: a greedy load-balancing
pass, then conflict resolution (eviction, one-generation splitting, bounded
reassignment), then reconciliation of unplaced items.

Quick start:
    from src.allocation import Item, allocate
    assignment, unassigned = allocate(
        [Item("A", 20, {"B"}), Item("B", 20, {"A"})],
        {"V1": 20, "V2": 20},
    )
"""

from src.allocation.carriers import Carrier, carriers_from_capacities
from src.allocation.config import AllocatorConfig
from src.allocation.engine import AllocationEngine, allocate
from src.allocation.errors import (
    AllocationError,
    InvalidCarrierError,
    InvalidItemError,
    InvalidSplitError,
    NoCarriersError,
)
from src.allocation.items import Item, normalize_id
from src.allocation.results import AllocationResult, AllocationStatus, RejectionReason

__all__ = [
    "Carrier",
    "carriers_from_capacities",
    "AllocatorConfig",
    "AllocationEngine",
    "allocate",
    "AllocationError",
    "InvalidCarrierError",
    "InvalidItemError",
    "InvalidSplitError",
    "NoCarriersError",
    "Item",
    "normalize_id",
    "AllocationResult",
    "AllocationStatus",
    "RejectionReason",
]
