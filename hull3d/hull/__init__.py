"""Incremental 3D convex hull: seed simplex, expansion loop, entry points."""

from hull3d.hull.convex_hull import ConvexHull, as_point_array, convex_hull, convex_hull_flat
from hull3d.hull.expansion import ExpansionStats, expand
from hull3d.hull.simplex import build_initial_simplex, select_seed
from hull3d.hull.state import HullState

__all__ = [
    "ConvexHull",
    "as_point_array",
    "convex_hull",
    "convex_hull_flat",
    "ExpansionStats",
    "expand",
    "build_initial_simplex",
    "select_seed",
    "HullState",
]
