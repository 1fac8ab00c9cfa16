"""
Reading point clouds and writing hulls.

Input formats (chosen by file suffix):
- .stl: triangle mesh via numpy-stl; its deduplicated vertices are the points
- .npy: (N, 3) array saved with numpy
- .xyz / .txt / .csv: one point per line, whitespace or comma separated;
  lines starting with '#' are ignored, extra columns are dropped

Output formats:
- .stl: the hull triangles with their coordinates
- .npy: (F, 3) int32 face index array
- .txt: one face per line as three point indices
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Optional, Union

import numpy as np
from numpy.typing import NDArray
from stl import mesh

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class PointFormat(Enum):
    """Point / hull file format."""
    STL = "stl"
    NPY = "npy"
    TEXT = "txt"


class PointLoadError(Exception):
    """Point file missing, unreadable or not a list of 3D points."""


_SUFFIXES = {
    ".stl": PointFormat.STL,
    ".npy": PointFormat.NPY,
    ".xyz": PointFormat.TEXT,
    ".txt": PointFormat.TEXT,
    ".csv": PointFormat.TEXT,
}


def detect_format(path: PathLike) -> PointFormat:
    """Format for ``path`` by suffix (case-insensitive).

    Raises:
        PointLoadError: for an unknown suffix
    """
    suffix = Path(path).suffix.lower()
    try:
        return _SUFFIXES[suffix]
    except KeyError:
        raise PointLoadError(
            f"Unsupported file type {suffix!r} for {str(path)!r}; "
            f"expected one of {sorted(_SUFFIXES)}"
        ) from None


def _load_stl_vertices(path: Path) -> NDArray[np.float64]:
    try:
        stl_mesh = mesh.Mesh.from_file(str(path))
    except Exception as exc:
        raise PointLoadError(f"Could not read STL file {str(path)!r}: {exc}") from exc

    if len(stl_mesh.vectors) == 0:
        raise PointLoadError(f"STL file {str(path)!r} contains no triangles")

    # Round to 6 decimals so float noise in shared corners collapses to one vertex.
    raw = np.round(stl_mesh.vectors.reshape(-1, 3).astype(np.float64), 6)
    _, first = np.unique(raw, axis=0, return_index=True)
    return raw[np.sort(first)]


def _load_text_points(path: Path) -> NDArray[np.float64]:
    delimiter: Optional[str] = None
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            stripped = line.strip()
            if stripped and not stripped.startswith('#'):
                delimiter = ',' if ',' in stripped else None
                break
    try:
        return np.loadtxt(path, delimiter=delimiter, comments='#', ndmin=2, dtype=np.float64)
    except ValueError as exc:
        raise PointLoadError(f"Could not parse points in {str(path)!r}: {exc}") from exc


def load_points(path: PathLike) -> NDArray[np.float64]:
    """Load an (N, 3) float64 point array from a file.

    Raises:
        PointLoadError: if the file is missing, unreadable or not 3D points
    """
    path = Path(path)
    if not path.exists():
        raise PointLoadError(f"File not found: {str(path)!r}")

    fmt = detect_format(path)
    logger.info("Loading points: %s (format: %s, size: %.1f KB)",
                path, fmt.value, os.path.getsize(path) / 1024)

    if fmt is PointFormat.STL:
        points = _load_stl_vertices(path)
    elif fmt is PointFormat.NPY:
        try:
            points = np.load(path, allow_pickle=False).astype(np.float64)
        except (OSError, ValueError) as exc:
            raise PointLoadError(f"Could not read {str(path)!r}: {exc}") from exc
    else:
        points = _load_text_points(path)

    if points.ndim != 2 or points.shape[1] < 3:
        raise PointLoadError(f"Expected rows of 3 coordinates in {str(path)!r}, got shape {points.shape}")
    points = np.ascontiguousarray(points[:, :3])

    logger.info("Loaded %d points", len(points))
    return points


def save_hull(
    points: NDArray[np.float64],
    faces: NDArray[np.int32],
    path: PathLike,
    fmt: Optional[PointFormat] = None,
) -> Path:
    """Write a hull to ``path``.

    Args:
        points: (N, 3) input points
        faces: (F, 3) hull triangles indexing ``points``
        path: Output file
        fmt: Output format; taken from the suffix if None

    Returns:
        The written path
    """
    path = Path(path)
    fmt = fmt or detect_format(path)
    faces = np.asarray(faces, dtype=np.int32).reshape(-1, 3)

    if fmt is PointFormat.STL:
        hull_mesh = mesh.Mesh(np.zeros(len(faces), dtype=mesh.Mesh.dtype))
        hull_mesh.vectors[:] = np.asarray(points, dtype=np.float64)[faces]
        hull_mesh.update_normals()
        hull_mesh.save(str(path))
    elif fmt is PointFormat.NPY:
        np.save(path, faces)
    else:
        np.savetxt(path, faces, fmt="%d")

    logger.info("Hull saved: %s (%d faces, format: %s)", path, len(faces), fmt.value)
    return path
