"""Exception taxonomy for facility rules."""

from __future__ import annotations


class FacilityError(Exception):
    """Base class for every error raised by the facility rules."""


class InvalidArgumentError(FacilityError, ValueError):
    """Malformed caller input such as a negative amount or an empty name."""


class OutOfRangeError(FacilityError, ValueError):
    """A value outside its permitted bounds, e.g. damage above 100."""


class InvalidOperationError(FacilityError):
    """The request is well formed but not allowed in the current state."""


class NotFoundError(FacilityError, LookupError):
    """An identifier does not refer to a known facility, unit, or campaign."""
