"""
Seed tetrahedron for the incremental hull.

Picks four well separated points (axis extremes -> farthest pair -> farthest
from their line -> farthest from their plane), builds the four faces around
their centroid and drops every point the tetrahedron already encloses.
"""

import logging
from typing import List, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from hull3d.errors import DegenerateSeedError, InsufficientPointsError
from hull3d.geometry.vec3 import cross, len_sq, signed_distances, unit
from hull3d.hull.state import HullState
from hull3d.topology.face_store import FaceStore, HullFace

logger = logging.getLogger(__name__)

# Vertex triples of the seed faces, as positions in the 4-point seed.
SIMPLEX_FACES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (0, 2, 3),
    (1, 2, 3),
    (0, 1, 3),
)


def axis_extremes(points: NDArray[np.float64]) -> List[int]:
    """Indices of the points reaching min/max x, min/max y, min/max z.

    Ties keep the lowest index.
    """
    bounds: List[int] = []
    for axis in range(3):
        bounds.append(int(np.argmin(points[:, axis])))
        bounds.append(int(np.argmax(points[:, axis])))
    return bounds


def farthest_pair(points: NDArray[np.float64], candidates: Sequence[int]) -> Tuple[int, int, float]:
    """Pair of candidates with the largest squared distance (first found on ties)."""
    best = (candidates[0], candidates[0])
    max_d = -np.inf
    for i in range(len(candidates)):
        pi = points[candidates[i]]
        for j in range(i + 1, len(candidates)):
            d = len_sq(pi - points[candidates[j]])
            if d > max_d:
                best = (candidates[i], candidates[j])
                max_d = d
    return best[0], best[1], max_d


def farthest_from_line(points: NDArray[np.float64], i0: int, i1: int) -> Tuple[int, float]:
    """Point with the largest perpendicular distance from the line i0-i1."""
    ref = points[i0]
    direction = unit(points[i1] - ref)
    rel = points - ref
    perp = rel - np.outer(rel @ direction, direction)
    dist_sq = np.einsum("ij,ij->i", perp, perp)
    idx = int(np.argmax(dist_sq))
    return idx, float(np.sqrt(dist_sq[idx]))


def farthest_from_plane(points: NDArray[np.float64], i0: int, i1: int, i2: int) -> Tuple[int, float]:
    """Point with the largest absolute distance from the plane i0-i1-i2."""
    ref = points[i0]
    normal = unit(cross(points[i1] - ref, points[i2] - ref))
    dist = np.abs(signed_distances(points, ref, normal))
    idx = int(np.argmax(dist))
    return idx, float(dist[idx])


def select_seed(points: NDArray[np.float64], tolerance: float) -> List[int]:
    """Choose the four seed vertices.

    Args:
        points: (N, 3) input points, N >= 4
        tolerance: Plane distance tolerance

    Returns:
        Four distinct point indices

    Raises:
        InsufficientPointsError: if N < 4
        DegenerateSeedError: if the points are coincident, collinear or coplanar
    """
    n_points = len(points)
    if n_points < 4:
        raise InsufficientPointsError(n_points)

    candidates = list(range(4)) if n_points == 4 else axis_extremes(points)

    i0, i1, pair_d = farthest_pair(points, candidates)
    if pair_d <= 0.0:
        raise DegenerateSeedError("coincident")

    i2, line_d = farthest_from_line(points, i0, i1)
    if line_d <= tolerance:
        raise DegenerateSeedError("collinear", f"max distance from line {line_d:.3g}")

    i3, plane_d = farthest_from_plane(points, i0, i1, i2)
    if plane_d <= tolerance:
        raise DegenerateSeedError("coplanar", f"max distance from plane {plane_d:.3g}")

    if n_points == 4:
        # Four points are used as given once they are known to span a volume.
        return [0, 1, 2, 3]
    return [i0, i1, i2, i3]


def build_initial_simplex(points: NDArray[np.float64], tolerance: float) -> HullState:
    """Build the seed tetrahedron and the initial exterior point set.

    Args:
        points: (N, 3) input points
        tolerance: Plane distance tolerance

    Returns:
        HullState holding the four seed faces (ids 0-3)
    """
    seed = select_seed(points, tolerance)
    centroid = points[seed].mean(axis=0)

    store = FaceStore(points, centroid, tolerance)
    state = HullState(
        points=points,
        store=store,
        exterior=np.arange(len(points), dtype=np.intp),
        centroid=centroid,
        tolerance=tolerance,
    )

    faces = []
    for ia, ib, ic in SIMPLEX_FACES:
        face = HullFace(state.new_face_id(), seed[ia], seed[ib], seed[ic])
        faces.append(store.add_face(face))

    ext = state.exterior
    ext_pts = points[ext]
    outside = np.zeros(len(ext), dtype=bool)
    for face in faces:
        outside |= signed_distances(ext_pts, points[face.a], face.normal) > tolerance
    keep = outside & ~np.isin(ext, seed)
    state.exterior = ext[keep]

    logger.debug(
        "Seed tetrahedron %s, %d of %d points still exterior",
        seed, state.n_exterior, len(points),
    )
    return state
