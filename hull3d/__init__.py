"""
hull3d: incremental 3D convex hull on numpy point arrays.

    from hull3d import convex_hull
    faces = convex_hull(points)   # (F, 3) int32, outward winding
"""

__version__ = "0.1.0"

from hull3d.config import PLANE_DIST_TOL, HullConfig, load_config
from hull3d.errors import (
    DegenerateSeedError,
    HullCancelledError,
    HullError,
    HullInputError,
    InsufficientPointsError,
    InternalTopologyError,
    InvalidPointsError,
    InvalidToleranceError,
)
from hull3d.hull.convex_hull import ConvexHull, convex_hull, convex_hull_flat
from hull3d.logging_config import (
    LogContext,
    configure_default_logging,
    get_logger,
    log_timing,
    setup_logging,
    timed,
)

__all__ = [
    "__version__",
    "PLANE_DIST_TOL",
    "HullConfig",
    "load_config",
    "DegenerateSeedError",
    "HullCancelledError",
    "HullError",
    "HullInputError",
    "InsufficientPointsError",
    "InternalTopologyError",
    "InvalidPointsError",
    "InvalidToleranceError",
    "ConvexHull",
    "convex_hull",
    "convex_hull_flat",
    "LogContext",
    "configure_default_logging",
    "get_logger",
    "log_timing",
    "setup_logging",
    "timed",
]
