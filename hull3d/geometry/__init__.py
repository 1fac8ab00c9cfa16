"""Geometric primitives and hull mesh statistics."""

from hull3d.geometry.vec3 import (
    UNSET,
    cross,
    dot,
    is_valid,
    len_sq,
    signed_distance,
    signed_distances,
    sub,
    unit,
    vec3,
)
from hull3d.geometry.hull_stats import (
    HullStatistics,
    calculate_hull_statistics,
    calculate_surface_area,
    calculate_volume,
    count_edges,
)

__all__ = [
    "UNSET",
    "cross",
    "dot",
    "is_valid",
    "len_sq",
    "signed_distance",
    "signed_distances",
    "sub",
    "unit",
    "vec3",
    "HullStatistics",
    "calculate_hull_statistics",
    "calculate_surface_area",
    "calculate_volume",
    "count_edges",
]
