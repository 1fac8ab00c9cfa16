"""
Public entry points for 3D convex hull construction.

Usage:
    from hull3d import ConvexHull, convex_hull, convex_hull_flat

    faces = convex_hull(points)                  # (F, 3) int32
    hull = ConvexHull(points)                    # keeps state for queries
    indices, n_faces = convex_hull_flat(coords, n_points)

Flat buffer ownership:
    ``convex_hull_flat`` and ``ConvexHull.copy_faces`` hand out index arrays
    that the hull object never references again. The caller owns the buffer
    from then on; it is released when the caller drops its last reference.
"""

import logging
import threading
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from hull3d.config import HullConfig
from hull3d.errors import InternalTopologyError, InvalidPointsError, InvalidToleranceError
from hull3d.geometry.hull_stats import HullStatistics, calculate_hull_statistics
from hull3d.hull.expansion import ExpansionStats, expand
from hull3d.hull.simplex import build_initial_simplex
from hull3d.hull.state import HullState
from hull3d.io.validator import ValidationReport, validate_hull
from hull3d.logging_config import log_timing, timed

logger = logging.getLogger(__name__)


def as_point_array(points: ArrayLike) -> NDArray[np.float64]:
    """Copy ``points`` into a read-only (N, 3) float64 array.

    Raises:
        InvalidPointsError: on a wrong shape or non-finite coordinates
    """
    try:
        arr = np.array(points, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidPointsError(f"Points are not numeric: {exc}") from exc

    if arr.ndim != 2 or arr.shape[1] != 3:
        raise InvalidPointsError(f"Expected an (N, 3) point array, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise InvalidPointsError("Points contain NaN or infinite coordinates")

    arr.setflags(write=False)
    return arr


def check_tolerance(tolerance: float) -> float:
    """Return ``tolerance`` as a float.

    Raises:
        InvalidToleranceError: if it is not a finite number greater than 0
    """
    try:
        value = float(tolerance)
    except (TypeError, ValueError):
        raise InvalidToleranceError(tolerance) from None
    if not np.isfinite(value) or value <= 0.0:
        raise InvalidToleranceError(value)
    return value


class ConvexHull:
    """Convex hull of a 3D point set, computed on construction.

    Args:
        points: (N, 3) array-like of coordinates, N >= 4
        tolerance: Plane distance tolerance (default from ``config``)
        config: HullConfig; defaults are used if None
        cancel_event: Optional event that aborts the build between steps

    Raises:
        InvalidPointsError: malformed point array
        InvalidToleranceError: tolerance not finite or not greater than 0
        InsufficientPointsError: fewer than 4 points
        DegenerateSeedError: all points coincident, collinear or coplanar
        InternalTopologyError: mesh bookkeeping broke, or the output check failed
        HullCancelledError: ``cancel_event`` was set during the build
    """

    def __init__(
        self,
        points: ArrayLike,
        tolerance: Optional[float] = None,
        config: Optional[HullConfig] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.config = config or HullConfig()
        self.tolerance = check_tolerance(
            tolerance if tolerance is not None else self.config.hull.tolerance
        )
        self.points = as_point_array(points)
        self.expansion: Optional[ExpansionStats] = None
        self._state: Optional[HullState] = None
        self._faces: NDArray[np.int32] = np.zeros((0, 3), dtype=np.int32)
        self._compute(cancel_event)

    def _compute(self, cancel_event: Optional[threading.Event]) -> None:
        n_points = len(self.points)
        with log_timing(logger, "Convex hull", n_points=n_points, tolerance=self.tolerance):
            state = build_initial_simplex(self.points, self.tolerance)
            self.expansion = expand(state, cancel_event)
            self._state = state
            self._faces = state.store.faces_array()

            if self.config.hull.check_output:
                report = self.validate()
                if not report.is_valid:
                    raise InternalTopologyError(
                        "Computed hull failed validation:\n" + report.summary()
                    )

        logger.info(
            "Convex hull: %d points -> %d faces, %d vertices",
            n_points, self.num_faces, len(self.vertex_indices),
        )

    @property
    def faces(self) -> NDArray[np.int32]:
        """(F, 3) int32 array of outward-wound triangles (copy)."""
        return self._faces.copy()

    @property
    def num_faces(self) -> int:
        return int(len(self._faces))

    @property
    def normals(self) -> NDArray[np.float64]:
        """(F, 3) outward unit normals, row-aligned with ``faces``."""
        return self._state.store.normals_array()

    @property
    def vertex_indices(self) -> NDArray[np.int32]:
        """Sorted indices of the input points that are hull vertices."""
        return np.unique(self._faces).astype(np.int32)

    @property
    def exterior_points(self) -> NDArray[np.intp]:
        """Points left in the exterior set at termination (normally empty)."""
        return self._state.exterior.copy()

    @property
    def centroid(self) -> NDArray[np.float64]:
        """Interior reference point used to orient faces."""
        return self._state.centroid.copy()

    def copy_faces(self, out: Optional[NDArray[np.int32]] = None) -> NDArray[np.int32]:
        """Write the face indices, flattened, into ``out`` (length 3 * F).

        Args:
            out: Caller-owned int32 buffer; a new one is allocated if None

        Returns:
            The filled buffer
        """
        flat = self._faces.ravel()
        if out is None:
            return flat.copy()
        if out.shape != flat.shape:
            raise ValueError(f"Output buffer must have shape {flat.shape}, got {out.shape}")
        out[:] = flat
        return out

    def statistics(self) -> HullStatistics:
        return calculate_hull_statistics(self.points, self._faces)

    def validate(self) -> ValidationReport:
        return validate_hull(self.points, self._faces, self.tolerance)

    def __repr__(self) -> str:
        return f"ConvexHull(n_points={len(self.points)}, n_faces={self.num_faces})"


def convex_hull(
    points: ArrayLike,
    tolerance: Optional[float] = None,
    config: Optional[HullConfig] = None,
) -> NDArray[np.int32]:
    """Triangles of the convex hull of ``points`` as an (F, 3) int32 array."""
    return ConvexHull(points, tolerance=tolerance, config=config).faces


@timed(operation="Flat convex hull")
def convex_hull_flat(
    coords: Union[Sequence[float], NDArray[np.float64]],
    n_points: int,
    tolerance: Optional[float] = None,
    config: Optional[HullConfig] = None,
) -> Tuple[NDArray[np.int32], int]:
    """Convex hull over flat buffers.

    Args:
        coords: 3 * n_points coordinates, x0 y0 z0 x1 y1 z1 ...
        n_points: Number of points

    Returns:
        (indices, n_faces): a freshly allocated int32 array of 3 * n_faces
        vertex indices, owned by the caller, and the face count
    """
    flat = np.asarray(coords, dtype=np.float64).ravel()
    if n_points < 0 or flat.size != 3 * n_points:
        raise InvalidPointsError(
            f"Expected {3 * n_points} coordinates for {n_points} points, got {flat.size}"
        )
    hull = ConvexHull(flat.reshape(n_points, 3), tolerance=tolerance, config=config)
    indices = np.empty(3 * hull.num_faces, dtype=np.int32)
    hull.copy_faces(indices)
    return indices, hull.num_faces
