"""
Pytest configuration and fixtures for hull3d.

Provides:
- Point set fixtures (cube, tetrahedron, random clouds, sphere samples)
- Point file fixtures written to tmp_path
- Logger isolation between tests
- Assertion helpers for hull meshes
"""

import itertools
import logging
from collections import Counter
from pathlib import Path

import numpy as np
import pytest

from hull3d.logging_config import PACKAGE_LOGGER


# ============================================================================
# Logger isolation
# ============================================================================

@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo setup_logging() calls made by a test."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate


# ============================================================================
# Point Set Fixtures
# ============================================================================

@pytest.fixture
def cube_points() -> np.ndarray:
    """Unit cube corners; index = 4x + 2y + z."""
    return np.array(list(itertools.product([0.0, 1.0], repeat=3)), dtype=np.float64)


@pytest.fixture
def tetra_points() -> np.ndarray:
    """Corner tetrahedron with volume 1/6."""
    return np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.0, 0.0, 1.0],
    ], dtype=np.float64)


@pytest.fixture
def tetra_with_centroid(tetra_points) -> np.ndarray:
    """Tetrahedron plus its centroid as point 4."""
    return np.vstack([tetra_points, tetra_points.mean(axis=0)])


@pytest.fixture
def coplanar_points() -> np.ndarray:
    """Four points on z = 0."""
    return np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [1.0, 1.0, 0.0],
    ], dtype=np.float64)


@pytest.fixture
def random_cloud() -> np.ndarray:
    """200 uniform points in the unit cube."""
    rng = np.random.default_rng(42)
    return rng.random((200, 3))


@pytest.fixture
def sphere_points() -> np.ndarray:
    """150 points on the unit sphere; all of them are hull vertices."""
    rng = np.random.default_rng(7)
    pts = rng.normal(size=(150, 3))
    return pts / np.linalg.norm(pts, axis=1, keepdims=True)


# ============================================================================
# Point File Fixtures
# ============================================================================

@pytest.fixture
def cube_xyz_path(tmp_path: Path, cube_points: np.ndarray) -> Path:
    path = tmp_path / "cube.xyz"
    np.savetxt(path, cube_points)
    return path


@pytest.fixture
def cloud_xyz_path(tmp_path: Path, random_cloud: np.ndarray) -> Path:
    path = tmp_path / "cloud.xyz"
    np.savetxt(path, random_cloud)
    return path


@pytest.fixture
def coplanar_xyz_path(tmp_path: Path, coplanar_points: np.ndarray) -> Path:
    path = tmp_path / "flat.xyz"
    np.savetxt(path, coplanar_points)
    return path


# ============================================================================
# Assertion Helpers
# ============================================================================

def assert_closed_manifold(faces: np.ndarray) -> None:
    """Every edge is shared by exactly two faces and V - E + F == 2."""
    counts: Counter = Counter()
    for face in faces:
        for i in range(3):
            u, v = int(face[i]), int(face[(i + 1) % 3])
            counts[(min(u, v), max(u, v))] += 1
    assert counts, "mesh has no edges"
    assert all(c == 2 for c in counts.values()), counts
    n_vertices = len(np.unique(faces))
    assert n_vertices - len(counts) + len(faces) == 2


def assert_contains(points: np.ndarray, faces: np.ndarray, tolerance: float = 1e-9) -> None:
    """No point lies beyond any face plane."""
    v0 = points[faces[:, 0]]
    normals = np.cross(points[faces[:, 1]] - v0, points[faces[:, 2]] - v0)
    normals /= np.linalg.norm(normals, axis=1, keepdims=True)
    for p in points:
        dist = np.einsum("ij,ij->i", p - v0, normals)
        assert np.all(dist <= tolerance), dist.max()


def assert_valid_faces(faces: np.ndarray, n_points: int) -> None:
    """Faces are an (F, 3) int32 array of distinct in-range indices."""
    assert isinstance(faces, np.ndarray)
    assert faces.ndim == 2
    assert faces.shape[1] == 3
    assert faces.dtype == np.int32
    assert np.all(faces >= 0)
    assert np.all(faces < n_points)
    assert np.all(faces[:, 0] != faces[:, 1])
    assert np.all(faces[:, 1] != faces[:, 2])
    assert np.all(faces[:, 0] != faces[:, 2])
