"""
Face and edge bookkeeping for a hull under construction.

The store owns:
- a face map: face id -> HullFace (ids are never reused)
- an edge map: unordered edge (u, v) -> EdgeFaces, the (at most two) faces
  bordering that edge

A closed hull never has more than two faces on an edge, so a third face on
an edge is reported as an InternalTopologyError.

Usage:
    from hull3d.topology.face_store import FaceStore, HullFace

    store = FaceStore(points, centroid, tolerance=1e-9)
    store.add_face(HullFace(0, 0, 1, 2))
    popped = store.pop_face(0)
    for edge, neighbor in popped.sides:
        ...
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from hull3d.errors import InternalTopologyError
from hull3d.geometry.vec3 import UNSET, Vec3, cross, is_valid, signed_distance, unit

logger = logging.getLogger(__name__)

Edge = Tuple[int, int]  # (min(u, v), max(u, v))


def make_edge(u: int, v: int) -> Edge:
    """Normalize an edge to (min, max) so both windings hit the same key."""
    return (u, v) if u < v else (v, u)


@dataclass
class HullFace:
    """An oriented hull triangle.

    Attributes:
        id: Face identifier, unique for the whole build
        a, b, c: Point indices; with ``normal`` they orient the face outward
        normal: Cached outward unit normal (UNSET until the face is stored)
    """
    id: int
    a: int
    b: int
    c: int
    normal: Vec3 = field(default_factory=lambda: UNSET.copy(), repr=False)

    @property
    def vertices(self) -> Tuple[int, int, int]:
        return (self.a, self.b, self.c)

    def flip(self) -> None:
        """Reverse the winding and the normal."""
        self.b, self.c = self.c, self.b
        self.normal = -self.normal

    def edge(self, index: int) -> Edge:
        """Return side ``index`` (0: a-b, 1: b-c, 2: c-a) as an unordered edge."""
        if index == 0:
            return make_edge(self.a, self.b)
        if index == 1:
            return make_edge(self.b, self.c)
        if index == 2:
            return make_edge(self.c, self.a)
        raise InternalTopologyError(f"Invalid edge index {index} for face {self.id}")

    def edges(self) -> List[Edge]:
        return [self.edge(i) for i in range(3)]

    def contains_vertex(self, index: int) -> bool:
        return index == self.a or index == self.b or index == self.c


@dataclass
class EdgeFaces:
    """Faces bordering one edge: at most two slots."""
    first: Optional[int] = None
    second: Optional[int] = None

    def add(self, face_id: int) -> bool:
        """Put ``face_id`` into a free slot; False if both are taken."""
        if self.first is None:
            self.first = face_id
            return True
        if self.second is None:
            self.second = face_id
            return True
        return False

    def discard(self, face_id: int) -> None:
        if self.first == face_id:
            self.first = None
        elif self.second == face_id:
            self.second = None

    def other(self, face_id: int) -> Optional[int]:
        """The face across the edge from ``face_id``, if any."""
        if self.first == face_id:
            return self.second
        if self.second == face_id:
            return self.first
        return None

    def __contains__(self, face_id: object) -> bool:
        return face_id is not None and (self.first == face_id or self.second == face_id)

    def __len__(self) -> int:
        return (self.first is not None) + (self.second is not None)

    def ids(self) -> List[int]:
        return [fid for fid in (self.first, self.second) if fid is not None]


@dataclass
class PoppedFace:
    """A face removed from the store together with what bordered it.

    Attributes:
        face: The removed face
        sides: For each of the three edges, the edge and the neighbouring
            face across it (None if nothing borders it any more)
    """
    face: HullFace
    sides: List[Tuple[Edge, Optional[HullFace]]]


class FaceStore:
    """Face map plus edge adjacency index for one hull build.

    Args:
        points: (N, 3) input points, referenced by index only
        centroid: Interior reference point used to orient faces outward
        tolerance: Plane distance tolerance for visibility tests
    """

    def __init__(
        self,
        points: NDArray[np.float64],
        centroid: Vec3,
        tolerance: float,
    ):
        self.points = points
        self.centroid = centroid
        self.tolerance = tolerance
        self._faces: Dict[int, HullFace] = {}
        self._edge_map: Dict[Edge, EdgeFaces] = {}

    def __len__(self) -> int:
        return len(self._faces)

    def __iter__(self) -> Iterator[HullFace]:
        return iter(self.faces())

    def __contains__(self, face_id: object) -> bool:
        return face_id in self._faces

    def faces(self) -> List[HullFace]:
        """Stored faces in ascending id order."""
        return sorted(self._faces.values(), key=lambda f: f.id)

    def face_ids(self) -> List[int]:
        return list(self._faces.keys())

    @property
    def n_edges(self) -> int:
        return len(self._edge_map)

    def face_visible(self, face: HullFace, point: Vec3) -> bool:
        """True if ``point`` is beyond the face plane by more than the tolerance."""
        if not is_valid(face.normal):
            return False
        return signed_distance(point, self.points[face.a], face.normal) > self.tolerance

    def add_face(self, face: HullFace) -> HullFace:
        """Orient ``face`` outward and register it.

        Raises:
            InternalTopologyError: if one of its edges already has two faces
        """
        pa = self.points[face.a]
        face.normal = unit(cross(self.points[face.b] - pa, self.points[face.c] - pa))
        if self.face_visible(face, self.centroid):
            face.flip()

        self._faces[face.id] = face
        for edge in face.edges():
            entry = self._edge_map.setdefault(edge, EdgeFaces())
            if not entry.add(face.id):
                raise InternalTopologyError(
                    f"Failed to add face {face.id} to edge {edge}: "
                    f"already bordered by faces {entry.ids()}"
                )
        return face

    def pop_face(self, face_id: int) -> Optional[PoppedFace]:
        """Remove a face and report its neighbours.

        Returns:
            PoppedFace, or None if no face with this id is stored
        """
        face = self._faces.pop(face_id, None)
        if face is None:
            return None

        sides: List[Tuple[Edge, Optional[HullFace]]] = []
        for edge in face.edges():
            entry = self._edge_map.get(edge)
            if entry is None or face_id not in entry:
                sides.append((edge, None))
                continue
            neighbor_id = entry.other(face_id)
            entry.discard(face_id)
            if not len(entry):
                del self._edge_map[edge]
            neighbor = self._faces.get(neighbor_id) if neighbor_id is not None else None
            sides.append((edge, neighbor))

        return PoppedFace(face=face, sides=sides)

    def get_face(self, face_id: int) -> Optional[HullFace]:
        return self._faces.get(face_id)

    def get_edge_faces(self, edge: Edge) -> Optional[EdgeFaces]:
        return self._edge_map.get(make_edge(*edge))

    def faces_array(self) -> NDArray[np.int32]:
        """Stored faces as an (F, 3) int32 array, in ascending id order."""
        if not self._faces:
            return np.zeros((0, 3), dtype=np.int32)
        return np.array([f.vertices for f in self.faces()], dtype=np.int32)

    def normals_array(self) -> NDArray[np.float64]:
        """Stored face normals as an (F, 3) array, matching ``faces_array``."""
        if not self._faces:
            return np.zeros((0, 3), dtype=np.float64)
        return np.array([f.normal for f in self.faces()], dtype=np.float64)
