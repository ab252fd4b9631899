"""Tunable engine parameters."""

from __future__ import annotations

from dataclasses import dataclass

from src.allocation.errors import ConfigError
from src.allocation.resolver import DEFAULT_MAX_ATTEMPTS


@dataclass(frozen=True)
class AllocatorConfig:
    """Engine knobs.

    max_attempts        : reassignment attempts per evicted item (or part), >= 1
    split_incompatible  : split evicted items with weight > 1 in two before
                          re-homing them (single generation only)
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    split_incompatible: bool = True

    def __post_init__(self) -> None:
        if (
            not isinstance(self.max_attempts, int)
            or isinstance(self.max_attempts, bool)
            or self.max_attempts < 1
        ):
            raise ConfigError(f"max_attempts must be an integer >= 1, got {self.max_attempts!r}")
        if not isinstance(self.split_incompatible, bool):
            raise ConfigError(f"split_incompatible must be true or false, got {self.split_incompatible!r}")
