"""Exceptions raised by the allocation engine.

Structural problems (bad split arguments, empty carrier set, malformed
input records) are raised immediately. Allocation infeasibility is never an
exception: items that cannot be placed come back in the unassigned list.
"""


class AllocationError(Exception):
    """Base class for every error raised by this package."""


class InvalidSplitError(AllocationError, ValueError):
    """Raised when split part weights do not sum to the parent item's weight."""


class NoCarriersError(AllocationError):
    """Raised when an allocation is requested with an empty carrier set."""


class InvalidItemError(AllocationError, ValueError):
    """Raised when an item record is malformed or an item id is duplicated."""


class InvalidCarrierError(AllocationError, ValueError):
    """Raised when a carrier capacity is negative or not an integer."""


class ConfigError(AllocationError):
    """Raised when a fleet configuration file has unexpected content."""
