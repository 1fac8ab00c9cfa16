"""Point cloud / hull mesh files and hull validation."""

from hull3d.io.point_io import PointLoadError, load_points, save_hull
from hull3d.io.validator import ValidationReport, ValidationSeverity, validate_hull

__all__ = [
    "PointLoadError",
    "load_points",
    "save_hull",
    "ValidationReport",
    "ValidationSeverity",
    "validate_hull",
]
