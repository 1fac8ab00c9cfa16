"""
Incremental expansion of a seed hull.

Each step takes a pending face that still has exterior points beyond it,
picks the farthest such point (the apex), removes every face the apex can see
(the visible region), closes the hole with a fan of new faces from the apex
to the horizon, and drops exterior points that are now enclosed.

Two separate queues drive this:
- PendingFaces: faces still to be checked for exterior points
- RemovalQueue: faces of the visible region waiting to be popped
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Iterable, List, Optional, Set

import numpy as np

from hull3d.errors import HullCancelledError
from hull3d.geometry.vec3 import is_valid, signed_distances
from hull3d.hull.state import HullState
from hull3d.topology.face_store import Edge, HullFace

logger = logging.getLogger(__name__)


class PendingFaces:
    """FIFO of face ids whose exterior points have not been checked yet."""

    def __init__(self, face_ids: Iterable[int] = ()):
        self._queue: Deque[int] = deque(face_ids)

    def push(self, face_id: int) -> None:
        self._queue.append(face_id)

    def pop(self) -> int:
        return self._queue.popleft()

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)


class RemovalQueue:
    """FIFO of faces in the visible region; each face is queued at most once."""

    def __init__(self, start_id: int):
        self._queue: Deque[int] = deque([start_id])
        self._seen: Set[int] = {start_id}

    def push(self, face_id: int) -> bool:
        """Queue ``face_id``; False if it was queued before."""
        if face_id in self._seen:
            return False
        self._seen.add(face_id)
        self._queue.append(face_id)
        return True

    def pop(self) -> int:
        return self._queue.popleft()

    def __bool__(self) -> bool:
        return bool(self._queue)


@dataclass
class VisibleRegion:
    """Faces removed for one apex and the edges bounding the hole."""
    popped: List[HullFace] = field(default_factory=list)
    horizon: List[Edge] = field(default_factory=list)


@dataclass
class ExpansionStats:
    """Counters for one expansion run."""
    steps: int = 0
    faces_popped: int = 0
    faces_created: int = 0
    skipped: int = 0


def find_farthest_point(state: HullState, face: HullFace) -> Optional[int]:
    """Exterior point farthest beyond the face plane.

    The face's own vertices are never candidates, and a point must be beyond
    the tolerance to count. Ties keep the lowest index.

    Returns:
        Point index, or None if no exterior point is beyond the face
    """
    if not len(state.exterior) or not is_valid(face.normal):
        return None
    ext = state.exterior
    candidates = ext[(ext != face.a) & (ext != face.b) & (ext != face.c)]
    if not len(candidates):
        return None
    dist = signed_distances(state.points[candidates], state.points[face.a], face.normal)
    idx = int(np.argmax(dist))
    if dist[idx] <= state.tolerance:
        return None
    return int(candidates[idx])


def discover_region(state: HullState, start_id: int, apex: int) -> VisibleRegion:
    """Pop the connected set of faces visible from ``apex``, starting at ``start_id``."""
    store = state.store
    apex_pt = state.points[apex]
    region = VisibleRegion()
    queue = RemovalQueue(start_id)

    while queue:
        popped = store.pop_face(queue.pop())
        if popped is None:
            continue
        region.popped.append(popped.face)

        for edge, neighbor in popped.sides:
            if neighbor is None:
                continue
            if store.face_visible(neighbor, apex_pt):
                queue.push(neighbor.id)
            else:
                region.horizon.append(edge)

    return region


def cap_hole(
    state: HullState,
    apex: int,
    horizon: List[Edge],
    pending: PendingFaces,
) -> List[HullFace]:
    """Close the hole with one face per horizon edge and queue the new faces."""
    new_faces = []
    for u, v in horizon:
        face = state.store.add_face(HullFace(state.new_face_id(), apex, u, v))
        pending.push(face.id)
        new_faces.append(face)
    return new_faces


def _visible_from_any(state: HullState, idx: np.ndarray, faces: Iterable[HullFace]) -> np.ndarray:
    """Mask over ``idx``: point is beyond at least one of ``faces``."""
    pts = state.points[idx]
    mask = np.zeros(len(idx), dtype=bool)
    for face in faces:
        if not is_valid(face.normal):
            continue
        mask |= signed_distances(pts, state.points[face.a], face.normal) > state.tolerance
    return mask


def update_exterior(
    state: HullState,
    popped: List[HullFace],
    new_faces: List[HullFace],
) -> int:
    """Drop exterior points enclosed after one expansion step.

    Points that were only beyond faces that survive are left alone. Points
    beyond a popped face stay only if a new cap face has them beyond it: a
    point that sees a surviving face and a popped face also sees the cap
    face over the horizon edge between them.

    Returns:
        Number of points dropped
    """
    ext = state.exterior
    if not len(ext):
        return 0

    popped_vertices = [v for face in popped for v in face.vertices]
    on_popped = np.isin(ext, popped_vertices)
    beyond_popped = _visible_from_any(state, ext, popped) & ~on_popped

    keep = ~on_popped & ~beyond_popped
    recheck = np.flatnonzero(beyond_popped)
    if len(recheck):
        keep[recheck] = _visible_from_any(state, ext[recheck], new_faces)

    state.exterior = ext[keep]
    return int(len(ext) - len(state.exterior))


def expand(
    state: HullState,
    cancel_event: Optional[threading.Event] = None,
) -> ExpansionStats:
    """Grow the hull until no face has an exterior point beyond it.

    Args:
        state: Seed state from ``build_initial_simplex``; mutated in place
        cancel_event: Optional event; checked before each step

    Returns:
        ExpansionStats for the run

    Raises:
        HullCancelledError: if ``cancel_event`` is set
        InternalTopologyError: if the mesh bookkeeping breaks
    """
    stats = ExpansionStats()
    pending = PendingFaces(state.store.face_ids())

    while pending:
        if cancel_event is not None and cancel_event.is_set():
            raise HullCancelledError(
                f"Hull build cancelled after {stats.steps} steps"
            )

        face = state.store.get_face(pending.pop())
        apex = find_farthest_point(state, face) if face is not None else None
        if apex is None:
            stats.skipped += 1
            continue

        region = discover_region(state, face.id, apex)
        new_faces = cap_hole(state, apex, region.horizon, pending)
        dropped = update_exterior(state, region.popped, new_faces)

        stats.steps += 1
        stats.faces_popped += len(region.popped)
        stats.faces_created += len(new_faces)
        logger.debug(
            "Step %d: apex %d, popped %d, horizon %d, dropped %d, exterior %d",
            stats.steps, apex, len(region.popped), len(region.horizon),
            dropped, state.n_exterior,
        )

    return stats
