"""Errors raised by the network planner.

Every planning failure is raised synchronously by the call that detects it and
rejects the whole plan. Each error carries enough context (group, zone, block)
to report the problem precisely.
"""

from typing import Any


class PlanningError(Exception):
    """Base class for all planning failures."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = {key: value for key, value in context.items() if value is not None}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            **{key: str(value) for key, value in self.context.items()},
        }


class InvalidAddressBlockError(PlanningError, ValueError):
    """Malformed address block (bad syntax, host bits set, prefix out of range)."""


class CapacityError(PlanningError):
    """Requested netmask or zone count does not fit in the available space."""


class ZoneCountMismatchError(PlanningError):
    """Explicit cidrs (or zone names) do not match the zone count."""


class OverlapError(PlanningError):
    """Two allocations collide."""


class UnsatisfiableRouteError(PlanningError):
    """A route references a gateway that does not exist in this topology."""
