"""
Measurements of a triangulated hull.

Provides:
- Surface area and enclosed volume
- Edge count and Euler characteristic
- HullStatistics summary for reporting

Faces index into the original point array, so points that are not hull
vertices are simply ignored.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)


@dataclass
class HullStatistics:
    """Summary of a hull mesh.

    Attributes:
        n_points: Number of input points
        n_vertices: Number of distinct points used by faces
        n_faces: Number of triangles
        n_edges: Number of distinct edges
        surface_area: Total triangle area
        volume: Signed enclosed volume (positive for outward winding)
        is_closed: Every edge is shared by exactly two faces
        euler_characteristic: V - E + F (2 for a closed convex hull)
    """
    n_points: int
    n_vertices: int
    n_faces: int
    n_edges: int
    surface_area: float
    volume: float
    is_closed: bool
    euler_characteristic: int
    face_areas: Optional[NDArray[np.float64]] = field(default=None, repr=False)

    @property
    def n_interior_points(self) -> int:
        """Input points that are not hull vertices."""
        return self.n_points - self.n_vertices

    @property
    def sphericity(self) -> float:
        """36*pi*V^2 / A^3; 1 for a sphere, smaller for anything else."""
        if self.surface_area < 1e-12:
            return 0.0
        return float((36 * np.pi * self.volume ** 2) / (self.surface_area ** 3))

    def summary(self) -> str:
        lines = [
            "Convex Hull Statistics",
            "=" * 40,
            f"Input points:  {self.n_points:,}",
            f"Hull vertices: {self.n_vertices:,}",
            f"Faces:         {self.n_faces:,}",
            f"Edges:         {self.n_edges:,}",
            "",
            f"Surface area:  {self.surface_area:.6g}",
            f"Volume:        {self.volume:.6g}",
            f"Closed:        {'Yes' if self.is_closed else 'No'}",
            f"Euler char:    {self.euler_characteristic}",
        ]
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            'n_points': self.n_points,
            'n_vertices': self.n_vertices,
            'n_faces': self.n_faces,
            'n_edges': self.n_edges,
            'surface_area': self.surface_area,
            'volume': self.volume,
            'is_closed': self.is_closed,
            'euler_characteristic': self.euler_characteristic,
        }


def calculate_face_areas(
    points: NDArray[np.float64],
    faces: NDArray[np.int32],
) -> NDArray[np.float64]:
    """Area of each triangle: 0.5 * |(v1 - v0) x (v2 - v0)|."""
    if len(faces) == 0:
        return np.array([], dtype=np.float64)

    v0 = points[faces[:, 0]]
    v1 = points[faces[:, 1]]
    v2 = points[faces[:, 2]]
    return 0.5 * np.linalg.norm(np.cross(v1 - v0, v2 - v0), axis=1)


def calculate_surface_area(points: NDArray[np.float64], faces: NDArray[np.int32]) -> float:
    return float(np.sum(calculate_face_areas(points, faces)))


def calculate_volume(points: NDArray[np.float64], faces: NDArray[np.int32]) -> float:
    """Signed volume by the divergence theorem: (1/6) * sum(v0 . (v1 x v2)).

    Positive when faces are wound with outward normals.
    """
    if len(faces) == 0:
        return 0.0

    # Shift to a local origin to keep the triple products small.
    origin = points[faces[0, 0]]
    v0 = points[faces[:, 0]] - origin
    v1 = points[faces[:, 1]] - origin
    v2 = points[faces[:, 2]] - origin
    return float(np.sum(np.einsum("ij,ij->i", v0, np.cross(v1, v2))) / 6.0)


def edge_face_counts(faces: NDArray[np.int32]) -> Counter:
    """Number of faces on each unordered edge."""
    counts: Counter = Counter()
    for face in faces:
        for i in range(3):
            u, v = int(face[i]), int(face[(i + 1) % 3])
            counts[(min(u, v), max(u, v))] += 1
    return counts


def count_edges(faces: NDArray[np.int32]) -> int:
    """Number of distinct unordered edges."""
    if len(faces) == 0:
        return 0
    edges = np.vstack([np.sort(faces[:, [i, (i + 1) % 3]], axis=1) for i in range(3)])
    return int(len(np.unique(edges, axis=0)))


def calculate_hull_statistics(
    points: NDArray[np.float64],
    faces: NDArray[np.int32],
) -> HullStatistics:
    """Compute HullStatistics for ``faces`` over ``points``."""
    faces = np.asarray(faces, dtype=np.int32).reshape(-1, 3)
    n_vertices = int(len(np.unique(faces))) if len(faces) else 0
    n_edges = count_edges(faces)
    areas = calculate_face_areas(points, faces)
    counts = edge_face_counts(faces)

    stats = HullStatistics(
        n_points=len(points),
        n_vertices=n_vertices,
        n_faces=len(faces),
        n_edges=n_edges,
        surface_area=float(np.sum(areas)),
        volume=calculate_volume(points, faces),
        is_closed=bool(counts) and all(c == 2 for c in counts.values()),
        euler_characteristic=n_vertices - n_edges + len(faces),
        face_areas=areas,
    )

    logger.debug(
        "Hull statistics calculated",
        extra={
            'faces': stats.n_faces,
            'surface_area': stats.surface_area,
            'volume': stats.volume,
        },
    )
    return stats
