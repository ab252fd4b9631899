"""
Item records in and allocation results out.

Input records have the shape ``{"id": str, "weight": int, "incompatibilities": [str]}``
and may be wrapped as ``{"goods": [...]}``. They are validated here, at the
boundary, so the engine only ever sees well-formed ``Item`` objects.

Output is a plain JSON document:
    {
      "status": "PARTIAL",
      "assignment": {"Vehicle-0": [{"id": ..., "weight": ..., "incompatibilities": [...]}]},
      "unassigned": [{"id": ..., "weight": ..., "incompatibilities": [...], "reason": "CONFLICT"}]
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping

from src.allocation.errors import InvalidItemError
from src.allocation.items import Item, check_unique_ids
from src.allocation.results import AllocationResult

ITEMS_KEY = "goods"


def parse_item(record: Mapping[str, Any]) -> Item:
    """Build one Item from a record, rejecting missing keys and bad weights."""
    if not isinstance(record, Mapping):
        raise InvalidItemError(f"Item record must be an object, got {type(record).__name__}")
    try:
        item_id = record["id"]
        weight = record["weight"]
    except KeyError as exc:
        raise InvalidItemError(f"Item record {dict(record)!r} is missing {exc.args[0]!r}") from exc

    incompatibilities = record.get("incompatibilities") or []
    if isinstance(incompatibilities, str) or not isinstance(incompatibilities, Iterable):
        raise InvalidItemError(f"Item {item_id!r}: 'incompatibilities' must be a list of ids")
    return Item(item_id, weight, frozenset(str(i) for i in incompatibilities))


def parse_items(records: Iterable[Mapping[str, Any]] | Mapping[str, Any]) -> list[Item]:
    """Parse a batch of records, preserving order.

    Raises:
        InvalidItemError: on a malformed record, a duplicated id, or an id that
            collides with a split part of another item.
    """
    if isinstance(records, Mapping):
        if ITEMS_KEY not in records:
            raise InvalidItemError(f"Expected a list of items or an object with a {ITEMS_KEY!r} key")
        records = records[ITEMS_KEY]

    items = [parse_item(record) for record in records]
    check_unique_ids(item.id for item in items)
    return items


def load_items(path: str | Path) -> list[Item]:
    """Read and validate an item batch from a JSON file."""
    with open(Path(path), encoding="utf-8") as f:
        return parse_items(json.load(f))


def item_to_dict(item: Item) -> dict[str, Any]:
    return {
        "id": item.id,
        "weight": item.weight,
        "incompatibilities": sorted(item.incompatible_with),
    }


def result_to_dict(result: AllocationResult) -> dict[str, Any]:
    """JSON-ready view of an allocation result."""
    unassigned = []
    for item in result.unassigned:
        entry = item_to_dict(item)
        reason = result.rejections.get(item.id)
        if reason is not None:
            entry["reason"] = reason.name
        unassigned.append(entry)

    return {
        "status": result.status.name,
        "assignment": {
            carrier_id: [item_to_dict(item) for item in items]
            for carrier_id, items in result.assignment.items()
        },
        "unassigned": unassigned,
    }


def save_result(result: AllocationResult, path: str | Path) -> Path:
    """Write ``result`` as pretty-printed JSON and return the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(result_to_dict(result), f, indent=2, ensure_ascii=False)
        f.write("\n")
    return path
