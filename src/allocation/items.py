"""
Item model: a divisible, weighted unit of cargo with exclusion constraints.

Identity rules:
- Split parts are named ``<parent>_part<N>``. Input data may also carry
  ``_batch<N>``, ``_unit<N>`` and ``_box<N>`` suffixes.
- ``normalize_id`` strips those suffixes so an item and every part derived
  from it share one base identity. All compatibility checks compare base ids.

Usage:
    a = Item("A", 20, {"B"})
    b = Item("B", 20)
    a.is_compatible_with(b)          # False (checked in both directions)
    a.split([10, 10])                # [Item("A_part0", 10), Item("A_part1", 10)]
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from src.allocation.errors import InvalidItemError, InvalidSplitError

PART_SUFFIX = "_part"

# A trailing run of split/batch/unit/box suffixes. Matching the whole run
# keeps normalize_id idempotent for ids like "A_box2_part0".
_SUFFIX_RE = re.compile(r"(?:_(?:part|batch|unit|box)\d+)+$")


def normalize_id(item_id: str) -> str:
    """Return the base identity of ``item_id`` with split suffixes removed."""
    return _SUFFIX_RE.sub("", item_id)


def _is_weight(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


@dataclass
class Item:
    """A weighted unit of cargo.

    Attributes:
        id: Unique identifier. Split parts append ``_part<N>``.
        weight: Positive integer weight.
        incompatible_with: Base ids this item may not share a carrier with.
            Stored as a frozenset of normalized ids.
        assigned: Result marker set by the engine. Not part of equality.
    """

    id: str
    weight: int
    incompatible_with: frozenset[str] = field(default_factory=frozenset)
    assigned: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise InvalidItemError(f"Item id must be a non-empty string, got {self.id!r}")
        if not _is_weight(self.weight):
            raise InvalidItemError(
                f"Item {self.id!r}: weight must be a positive integer, got {self.weight!r}"
            )
        if isinstance(self.incompatible_with, str):
            raise InvalidItemError(
                f"Item {self.id!r}: incompatibilities must be a collection of ids, not a string"
            )
        normalized = frozenset(normalize_id(i) for i in self.incompatible_with)
        # split parts are handed the parent's set, which is already normalized
        if not isinstance(self.incompatible_with, frozenset) or normalized != self.incompatible_with:
            self.incompatible_with = normalized

    @property
    def base_id(self) -> str:
        """Normalized identity shared with all parts split from the same item."""
        return normalize_id(self.id)

    def is_compatible_with(self, other: Item) -> bool:
        """True iff neither item excludes the other's base id.

        Items sharing a base id (parts of one original) are always compatible.
        """
        if self.base_id == other.base_id:
            return True
        return (
            other.base_id not in self.incompatible_with
            and self.base_id not in other.incompatible_with
        )

    def split(self, weights: Sequence[int]) -> list[Item]:
        """Split into one part per entry of ``weights``.

        Raises:
            InvalidSplitError: if the weights do not sum to ``self.weight`` or
                any part weight is not a positive integer.
        """
        weights = list(weights)
        if not weights:
            raise InvalidSplitError(f"Item {self.id!r}: split needs at least one part")
        if not all(_is_weight(w) for w in weights):
            raise InvalidSplitError(
                f"Item {self.id!r}: part weights must be positive integers, got {weights}"
            )
        if sum(weights) != self.weight:
            raise InvalidSplitError(
                f"Item {self.id!r}: part weights {weights} sum to {sum(weights)}, "
                f"expected {self.weight}"
            )
        return [
            Item(f"{self.id}{PART_SUFFIX}{i}", w, self.incompatible_with)
            for i, w in enumerate(weights)
        ]

    def halve(self) -> list[Item]:
        """Split into ``[w // 2, w - w // 2]``; requires weight > 1."""
        half = self.weight // 2
        return self.split([half, self.weight - half])

    @property
    def splittable(self) -> bool:
        return self.weight > 1


_PART_RE = re.compile(rf"^(.+){PART_SUFFIX}\d+$")


def check_unique_ids(ids: Iterable[str]) -> None:
    """Reject duplicated ids and ids a split of another input item would produce.

    Raises:
        InvalidItemError: if an id repeats, or ``X_partN`` appears alongside ``X``.
    """
    ids = list(ids)
    seen: set[str] = set()
    for item_id in ids:
        if item_id in seen:
            raise InvalidItemError(f"Duplicate item id {item_id!r}")
        seen.add(item_id)

    for item_id in ids:
        match = _PART_RE.match(item_id)
        if match and match.group(1) in seen:
            raise InvalidItemError(
                f"Item id {item_id!r} collides with a split part of item {match.group(1)!r}"
            )


def total_weight(items: Iterable[Item]) -> int:
    return sum(item.weight for item in items)
