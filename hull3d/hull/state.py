"""Mutable state shared by the simplex builder and the expansion engine."""

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from hull3d.geometry.vec3 import Vec3
from hull3d.topology.face_store import FaceStore


@dataclass
class HullState:
    """Everything one hull build mutates.

    Attributes:
        points: (N, 3) read-only input points
        store: Face map and edge adjacency index
        exterior: Ascending indices of points not yet known to be enclosed
        centroid: Interior reference point (seed tetrahedron centroid)
        tolerance: Plane distance tolerance
        next_id: Next unused face id
    """
    points: NDArray[np.float64]
    store: FaceStore
    exterior: NDArray[np.intp]
    centroid: Vec3
    tolerance: float
    next_id: int = field(default=0)

    def new_face_id(self) -> int:
        face_id = self.next_id
        self.next_id += 1
        return face_id

    @property
    def n_exterior(self) -> int:
        return int(len(self.exterior))
