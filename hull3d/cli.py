"""
Command line entry point: convex hull of a point file.

Usage:
    hull3d <points_file> [--output OUTPUT] [--config CONFIG] [--stats] [--validate]

Examples:
    hull3d cloud.xyz -o cloud_hull.stl
    hull3d part.stl --stats --validate -v
    python -m hull3d cloud.npy -o faces.txt --tolerance 1e-7
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from hull3d.config import HullConfig, load_config
from hull3d.errors import HullError, HullInputError
from hull3d.hull.convex_hull import ConvexHull
from hull3d.io.point_io import PointLoadError, load_points, save_hull
from hull3d.logging_config import LogContext, setup_logging

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="hull3d",
        description="Compute the 3D convex hull of a point cloud.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "points_file",
        help="Input points (.stl, .npy, .xyz, .txt or .csv).",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output hull file (.stl, .npy or .txt). "
             "Default: <input stem><output.suffix>.<output.format> next to the input.",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to a .hull3d.json configuration file.",
    )
    parser.add_argument(
        "--tolerance", "-t",
        type=float,
        default=None,
        help="Plane distance tolerance (overrides hull.tolerance).",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print hull statistics.",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate the hull against the input points and print the report.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging.",
    )
    parser.add_argument(
        "--json-log",
        default=None,
        dest="json_log",
        help="Also write JSON-lines logs to this file.",
    )
    return parser.parse_args(argv)


def default_output_path(input_path: Path, config: HullConfig) -> Path:
    out_dir = Path(config.output.output_dir) if config.output.output_dir else input_path.parent
    return out_dir / f"{input_path.stem}{config.output.suffix}.{config.output.format}"


def run(
    input_path: Path,
    output_path: Path,
    config: HullConfig,
    tolerance: Optional[float] = None,
    show_stats: bool = False,
    validate: bool = False,
) -> ConvexHull:
    """Load points, build the hull, save it and print the requested reports."""
    points = load_points(input_path)
    hull = ConvexHull(points, tolerance=tolerance, config=config)
    save_hull(hull.points, hull.faces, output_path)

    if show_stats:
        print(hull.statistics().summary())
    if validate:
        report = hull.validate()
        print(report.summary())
        if not report.is_valid:
            logger.warning("Hull for %s did not pass validation", input_path.name)
    return hull


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    input_path = Path(args.points_file)
    config = load_config(input_path=input_path, explicit_config=args.config)

    level = logging.DEBUG if args.verbose else config.logging.level_value
    setup_logging(
        level=level,
        json_file=args.json_log or config.logging.json_file,
        use_colors=config.logging.use_colors,
    )

    output_path = Path(args.output) if args.output else default_output_path(input_path, config)

    try:
        with LogContext(input_file=input_path.name):
            run(input_path, output_path, config, args.tolerance, args.stats, args.validate)
    except (PointLoadError, HullInputError) as exc:
        logger.critical("Cannot build hull: %s", exc)
        return 1
    except HullError as exc:
        logger.critical("Hull construction failed: %s", exc, exc_info=True)
        return 2
    except Exception as exc:
        logger.critical("Unexpected error: %s", exc, exc_info=True)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
