"""
3-vector primitives on numpy float64 arrays.

Everything here works on plain ``np.ndarray`` of shape (3,), except
``signed_distances`` which takes an (N, 3) block of points.
"""

import numpy as np
from numpy.typing import NDArray

Vec3 = NDArray[np.float64]

# Marker for "no vector"; compares unequal to every finite vector.
UNSET: Vec3 = np.full(3, np.nan)
UNSET.setflags(write=False)


def vec3(x: float, y: float, z: float) -> Vec3:
    """Build a 3-vector."""
    return np.array([x, y, z], dtype=np.float64)


def sub(a: Vec3, b: Vec3) -> Vec3:
    return a - b


def cross(a: Vec3, b: Vec3) -> Vec3:
    return np.cross(a, b)


def dot(a: Vec3, b: Vec3) -> float:
    return float(np.dot(a, b))


def len_sq(a: Vec3) -> float:
    return float(np.dot(a, a))


def unit(a: Vec3) -> Vec3:
    """Normalize to unit length; a zero vector yields ``UNSET``."""
    length = np.sqrt(len_sq(a))
    if length == 0.0 or not np.isfinite(length):
        return UNSET.copy()
    return a / length


def is_valid(a: Vec3) -> bool:
    """True if every component is finite."""
    return bool(np.all(np.isfinite(a)))


def signed_distance(point: Vec3, origin: Vec3, normal: Vec3) -> float:
    """Distance of ``point`` to the plane (origin, normal); positive on the normal side."""
    return dot(point - origin, normal)


def signed_distances(
    points: NDArray[np.float64],
    origin: Vec3,
    normal: Vec3,
) -> NDArray[np.float64]:
    """Vectorized ``signed_distance`` for an (N, 3) array of points."""
    return (points - origin) @ normal
