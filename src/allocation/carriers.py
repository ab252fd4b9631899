"""Carrier model: a named resource with a fixed weight capacity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from src.allocation.errors import InvalidCarrierError, NoCarriersError


@dataclass(frozen=True)
class Carrier:
    """Immutable carrier description.

    Current load is engine working state, never stored here.
    """

    id: str
    capacity: int

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise InvalidCarrierError(f"Carrier id must be a non-empty string, got {self.id!r}")
        if (
            not isinstance(self.capacity, int)
            or isinstance(self.capacity, bool)
            or self.capacity < 0
        ):
            raise InvalidCarrierError(
                f"Carrier {self.id!r}: capacity must be a non-negative integer, "
                f"got {self.capacity!r}"
            )


def carriers_from_capacities(capacities: Mapping[str, int]) -> list[Carrier]:
    """Build carriers in mapping order.

    Raises:
        NoCarriersError: if ``capacities`` is empty.
    """
    if not capacities:
        raise NoCarriersError("At least one carrier is required to allocate items")
    return [Carrier(carrier_id, capacity) for carrier_id, capacity in capacities.items()]
