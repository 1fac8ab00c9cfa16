"""
Error types raised by hull construction.

Two families are kept apart:
- input/geometry errors (too few points, degenerate seed, malformed arrays),
  raised before any hull state is mutated;
- internal topology errors, which mean the mesh bookkeeping itself is broken.
"""

from typing import Optional


class HullError(Exception):
    """Base class for all hull construction errors."""


class HullInputError(HullError, ValueError):
    """The input point set cannot produce a hull."""


class InvalidPointsError(HullInputError):
    """Point array has the wrong shape, length or non-finite values."""


class InvalidToleranceError(HullInputError):
    """Tolerance is not a finite positive number."""

    def __init__(self, tolerance: float):
        super().__init__(f"Tolerance must be a finite positive number, got {tolerance!r}")
        self.tolerance = tolerance


class InsufficientPointsError(HullInputError):
    """Fewer than 4 points were given."""

    def __init__(self, n_points: int):
        super().__init__(f"At least 4 points are required, got {n_points}")
        self.n_points = n_points


class DegenerateSeedError(HullInputError):
    """No non-degenerate seed tetrahedron exists.

    Attributes:
        kind: "coincident", "collinear" or "coplanar"
    """

    def __init__(self, kind: str, detail: Optional[str] = None):
        message = f"Failed to create the initial simplex: points are {kind}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.kind = kind


class InternalTopologyError(HullError, RuntimeError):
    """The face/edge bookkeeping reached an inconsistent state."""


class HullCancelledError(HullError):
    """The build was cancelled between two expansion steps."""
