"""
Fleet configuration dataclasses and YAML loader.

Carrier capacities and engine knobs live here as typed dataclasses.
Load from YAML with `load_config()` or construct directly for tests.

Example YAML:
    carriers:
      Vehicle-0: 100
      Vehicle-1: 80
    allocator:
      max_attempts: 3
      split_incompatible: true
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

import yaml

from src.allocation.carriers import Carrier, carriers_from_capacities
from src.allocation.config import AllocatorConfig
from src.allocation.errors import ConfigError

DEFAULT_CONFIG_PATH = Path("config/default_fleet.yaml")
TOP_LEVEL_KEYS = {"carriers", "allocator"}

# Fleet used when no config file is available: three vehicles of equal capacity.
DEFAULT_CARRIERS = {"Vehicle-0": 100, "Vehicle-1": 100, "Vehicle-2": 100}


@dataclass(frozen=True)
class FleetConfig:
    """Top-level configuration: the carrier set plus engine parameters."""

    carriers: dict[str, int] = field(default_factory=dict)  # carrier id → capacity, in scan order
    allocator: AllocatorConfig = field(default_factory=AllocatorConfig)

    @classmethod
    def default(cls) -> FleetConfig:
        """The shipped three-vehicle fleet with default engine parameters."""
        return cls(carriers=dict(DEFAULT_CARRIERS))

    def build_carriers(self) -> list[Carrier]:
        """Validated Carrier objects in configuration order."""
        return carriers_from_capacities(self.carriers)

    def with_capacities(self, overrides: Mapping[str, int]) -> FleetConfig:
        """Copy with capacities replaced or added; new carriers go last."""
        merged = dict(self.carriers)
        merged.update(overrides)
        return FleetConfig(carriers=merged, allocator=self.allocator)


def parse_capacity(override: str) -> tuple[str, int]:
    """Parse a ``CARRIER=CAPACITY`` string (CLI override syntax)."""
    carrier_id, sep, raw = override.partition("=")
    if not sep or not carrier_id.strip():
        raise ConfigError(f"Expected CARRIER=CAPACITY, got {override!r}")
    try:
        return carrier_id.strip(), int(raw)
    except ValueError as exc:
        raise ConfigError(f"Capacity for {carrier_id!r} is not an integer: {raw!r}") from exc


def load_config(path: str | Path) -> FleetConfig:
    """Load a FleetConfig from a YAML file.

    Args:
        path: Path to a YAML config file.

    Returns:
        FleetConfig with carriers in file order.

    Raises:
        ConfigError: if a section has the wrong shape or an unknown key.
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: top level must be a mapping")

    unknown = set(raw) - TOP_LEVEL_KEYS
    if unknown:
        raise ConfigError(f"{path}: unknown top-level key(s): {', '.join(sorted(map(str, unknown)))}")

    carriers = raw.get("carriers") or {}
    if not isinstance(carriers, dict):
        raise ConfigError(f"{path}: 'carriers' must map carrier ids to capacities")

    allocator_raw = raw.get("allocator") or {}
    try:
        allocator = AllocatorConfig(**allocator_raw)
    except (TypeError, ConfigError) as exc:
        raise ConfigError(f"{path}: invalid 'allocator' section: {exc}") from exc

    return FleetConfig(
        carriers={str(k): v for k, v in carriers.items()},
        allocator=allocator,
    )
