"""
Tests for the public hull API (hull3d.hull.convex_hull).

Tests:
- Known shapes (tetrahedron, cube, sphere samples)
- Input errors and degenerate inputs
- Mesh properties: closed, outward, containing every point
- Flat buffer API and caller-owned output buffers
- Cancellation and output checking
"""

import itertools
import threading

import numpy as np
import pytest

from conftest import assert_closed_manifold, assert_contains, assert_valid_faces
from hull3d import ConvexHull, convex_hull, convex_hull_flat
from hull3d.config import HullConfig, HullSettings
from hull3d.errors import (
    DegenerateSeedError,
    HullCancelledError,
    HullInputError,
    InsufficientPointsError,
    InvalidPointsError,
    InvalidToleranceError,
)
from hull3d.geometry.hull_stats import calculate_volume


# ============================================================================
# Known Shapes
# ============================================================================

class TestKnownShapes:
    """Hulls whose face count is known in advance."""

    def test_tetrahedron(self, tetra_points):
        """Four points in general position give four faces."""
        faces = convex_hull(tetra_points)
        assert_valid_faces(faces, 4)
        assert len(faces) == 4
        assert_closed_manifold(faces)

    def test_tetrahedron_with_centroid(self, tetra_with_centroid):
        """An interior point never becomes a hull vertex."""
        hull = ConvexHull(tetra_with_centroid)
        assert hull.num_faces == 4
        assert 4 not in hull.faces
        assert hull.vertex_indices.tolist() == [0, 1, 2, 3]

    def test_unit_cube(self, cube_points):
        """Eight cube corners give twelve triangles and nothing left over."""
        hull = ConvexHull(cube_points)
        assert hull.num_faces == 12
        assert len(hull.exterior_points) == 0
        assert hull.vertex_indices.tolist() == list(range(8))
        assert_closed_manifold(hull.faces)

    def test_cube_with_face_centers_and_interior(self, cube_points):
        """Points on the cube faces or inside it are not vertices."""
        centers = np.array([
            [0.5, 0.5, 0.0], [0.5, 0.5, 1.0],
            [0.5, 0.0, 0.5], [0.5, 1.0, 0.5],
            [0.0, 0.5, 0.5], [1.0, 0.5, 0.5],
        ])
        inner = np.random.default_rng(3).uniform(0.1, 0.9, size=(50, 3))
        points = np.vstack([cube_points, centers, inner])

        hull = ConvexHull(points)

        assert hull.num_faces == 12
        assert hull.vertex_indices.tolist() == list(range(8))
        assert hull.statistics().volume == pytest.approx(1.0)

    def test_duplicate_points(self, cube_points):
        """Repeated corners do not produce extra faces."""
        points = np.vstack([cube_points, cube_points])
        hull = ConvexHull(points)
        assert hull.num_faces == 12
        assert hull.vertex_indices.tolist() == list(range(8))

    def test_sphere_samples(self, sphere_points):
        """Every point on a sphere is a vertex; F = 2V - 4 for a triangulated hull."""
        hull = ConvexHull(sphere_points)
        n = len(sphere_points)
        assert len(hull.vertex_indices) == n
        assert hull.num_faces == 2 * n - 4
        assert_closed_manifold(hull.faces)

    def test_translated_cube(self, cube_points):
        hull = ConvexHull(cube_points * 10.0 + np.array([1000.0, -500.0, 250.0]))
        assert hull.num_faces == 12
        assert hull.statistics().volume == pytest.approx(1000.0)


# ============================================================================
# Input Errors
# ============================================================================

class TestInputErrors:
    """Malformed and degenerate inputs."""

    def test_three_points(self):
        with pytest.raises(InsufficientPointsError):
            convex_hull([[0, 0, 0], [1, 0, 0], [0, 1, 0]])

    def test_no_points(self):
        with pytest.raises(InsufficientPointsError):
            convex_hull(np.zeros((0, 3)))

    def test_four_coplanar_points(self, coplanar_points):
        with pytest.raises(DegenerateSeedError):
            convex_hull(coplanar_points)

    def test_collinear_cloud(self):
        t = np.linspace(0.0, 1.0, 20)
        with pytest.raises(DegenerateSeedError) as exc_info:
            convex_hull(np.column_stack([t, 2 * t, 3 * t]))
        assert exc_info.value.kind == "collinear"

    @pytest.mark.parametrize("shape", [(5,), (5, 2), (5, 4), (2, 5, 3)])
    def test_wrong_shape(self, shape):
        with pytest.raises(InvalidPointsError):
            convex_hull(np.zeros(shape))

    def test_nan_coordinates(self, cube_points):
        cube_points[3, 1] = np.nan
        with pytest.raises(InvalidPointsError):
            convex_hull(cube_points)

    def test_non_numeric(self):
        with pytest.raises(InvalidPointsError):
            convex_hull([["a", "b", "c"]] * 4)

    def test_input_errors_are_value_errors(self, coplanar_points):
        for bad in (coplanar_points, coplanar_points[:3], np.zeros((4, 2))):
            with pytest.raises(HullInputError):
                convex_hull(bad)
            with pytest.raises(ValueError):
                convex_hull(bad)


# ============================================================================
# Mesh Properties
# ============================================================================

class TestHullProperties:
    """Properties that hold for every successful hull."""

    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_random_cloud_is_valid(self, seed):
        points = np.random.default_rng(seed).normal(size=(300, 3))
        hull = ConvexHull(points)
        faces = hull.faces

        assert_valid_faces(faces, len(points))
        assert_closed_manifold(faces)
        assert_contains(points, faces)
        assert len(hull.exterior_points) == 0
        assert hull.validate().is_valid

    def test_normals_point_outward(self, random_cloud):
        hull = ConvexHull(random_cloud)
        normals = hull.normals
        origins = random_cloud[hull.faces[:, 0]]
        d = np.einsum("ij,ij->i", hull.centroid - origins, normals)
        assert np.all(d < 0)
        np.testing.assert_allclose(np.linalg.norm(normals, axis=1), 1.0)

    def test_winding_matches_normals(self, random_cloud):
        hull = ConvexHull(random_cloud)
        f = hull.faces
        v0 = random_cloud[f[:, 0]]
        cross = np.cross(random_cloud[f[:, 1]] - v0, random_cloud[f[:, 2]] - v0)
        assert np.all(np.einsum("ij,ij->i", cross, hull.normals) > 0)

    def test_deterministic(self, random_cloud):
        np.testing.assert_array_equal(convex_hull(random_cloud), convex_hull(random_cloud))

    def test_volume_independent_of_order(self, random_cloud):
        perm = np.random.default_rng(11).permutation(len(random_cloud))
        shuffled = random_cloud[perm]
        v1 = calculate_volume(random_cloud, convex_hull(random_cloud))
        v2 = calculate_volume(shuffled, convex_hull(shuffled))
        assert v1 == pytest.approx(v2, rel=1e-12)

    def test_matches_scipy(self, random_cloud):
        spatial = pytest.importorskip("scipy.spatial")
        reference = spatial.ConvexHull(random_cloud)
        hull = ConvexHull(random_cloud)

        assert set(hull.vertex_indices.tolist()) == set(reference.vertices.tolist())
        assert hull.statistics().volume == pytest.approx(reference.volume, rel=1e-9)
        assert hull.statistics().surface_area == pytest.approx(reference.area, rel=1e-9)

    def test_input_not_modified(self, random_cloud):
        before = random_cloud.copy()
        ConvexHull(random_cloud)
        np.testing.assert_array_equal(random_cloud, before)

    def test_points_are_read_only_copy(self, cube_points):
        hull = ConvexHull(cube_points)
        assert not hull.points.flags.writeable
        assert hull.points is not cube_points

    def test_faces_property_is_a_copy(self, cube_points):
        hull = ConvexHull(cube_points)
        hull.faces[:] = 0
        assert hull.num_faces == 12
        assert_closed_manifold(hull.faces)

    def test_repr(self, cube_points):
        assert repr(ConvexHull(cube_points)) == "ConvexHull(n_points=8, n_faces=12)"


# ============================================================================
# Flat Buffers
# ============================================================================

class TestFlatBuffers:
    """convex_hull_flat and ConvexHull.copy_faces."""

    def test_flat_matches_array_api(self, cube_points):
        indices, n_faces = convex_hull_flat(cube_points.ravel(), 8)
        assert n_faces == 12
        assert indices.dtype == np.int32
        assert indices.shape == (36,)
        np.testing.assert_array_equal(indices, convex_hull(cube_points).ravel())

    def test_flat_accepts_plain_lists(self, tetra_points):
        coords = [float(c) for c in tetra_points.ravel()]
        indices, n_faces = convex_hull_flat(coords, 4)
        assert n_faces == 4
        assert sorted(set(indices.tolist())) == [0, 1, 2, 3]

    def test_flat_length_mismatch(self, cube_points):
        with pytest.raises(InvalidPointsError):
            convex_hull_flat(cube_points.ravel(), 9)

    def test_flat_too_few_points(self):
        with pytest.raises(InsufficientPointsError):
            convex_hull_flat([0.0] * 9, 3)

    def test_copy_faces_into_caller_buffer(self, cube_points):
        hull = ConvexHull(cube_points)
        out = np.full(3 * hull.num_faces, -1, dtype=np.int32)
        result = hull.copy_faces(out)
        assert result is out
        np.testing.assert_array_equal(out, hull.faces.ravel())

    def test_copy_faces_buffer_is_independent(self, cube_points):
        hull = ConvexHull(cube_points)
        buf = hull.copy_faces()
        buf[:] = 0
        assert hull.faces.max() == 7

    def test_copy_faces_wrong_size(self, cube_points):
        hull = ConvexHull(cube_points)
        with pytest.raises(ValueError):
            hull.copy_faces(np.zeros(5, dtype=np.int32))


# ============================================================================
# Options
# ============================================================================

class TestOptions:
    """Tolerance, output check and cancellation."""

    def test_config_tolerance_used(self, cube_points):
        config = HullConfig(hull=HullSettings(tolerance=1e-6))
        hull = ConvexHull(cube_points, config=config)
        assert hull.tolerance == 1e-6

    def test_explicit_tolerance_overrides_config(self, cube_points):
        config = HullConfig(hull=HullSettings(tolerance=1e-6))
        hull = ConvexHull(cube_points, tolerance=1e-3, config=config)
        assert hull.tolerance == 1e-3

    @pytest.mark.parametrize("tolerance", [0.0, -1e-3, float("nan"), float("inf")])
    def test_invalid_tolerance_rejected(self, cube_points, tolerance):
        with pytest.raises(InvalidToleranceError):
            ConvexHull(cube_points, tolerance=tolerance)
        with pytest.raises(InvalidToleranceError):
            convex_hull(cube_points, tolerance=tolerance)
        with pytest.raises(InvalidToleranceError):
            convex_hull_flat(cube_points.ravel(), len(cube_points), tolerance=tolerance)

    def test_invalid_tolerance_is_input_error(self, tetra_points):
        with pytest.raises(HullInputError) as excinfo:
            ConvexHull(tetra_points, tolerance=float("nan"))
        assert isinstance(excinfo.value, ValueError)
        assert "finite positive" in str(excinfo.value)

    def test_invalid_tolerance_from_settings(self, cube_points):
        config = HullConfig(hull=HullSettings(tolerance=-1.0))
        with pytest.raises(InvalidToleranceError) as excinfo:
            ConvexHull(cube_points, config=config)
        assert excinfo.value.tolerance == -1.0

    def test_large_tolerance_absorbs_near_surface_point(self, cube_points):
        bump = np.array([[0.5, 0.5, 1.0 + 1e-4]])
        points = np.vstack([cube_points, bump])
        assert ConvexHull(points).num_faces > 12
        assert ConvexHull(points, tolerance=1e-3).num_faces == 12

    def test_check_output(self, random_cloud):
        config = HullConfig(hull=HullSettings(check_output=True))
        hull = ConvexHull(random_cloud, config=config)
        assert hull.num_faces > 0

    def test_cancel_before_start(self, random_cloud):
        event = threading.Event()
        event.set()
        with pytest.raises(HullCancelledError):
            ConvexHull(random_cloud, cancel_event=event)

    def test_cancel_not_triggered(self, cube_points):
        hull = ConvexHull(cube_points, cancel_event=threading.Event())
        assert hull.num_faces == 12

    def test_expansion_stats_recorded(self, cube_points):
        hull = ConvexHull(cube_points)
        assert hull.expansion.steps == 4
        assert hull.expansion.faces_created == 12


def test_octahedron():
    points = np.array([p for p in itertools.product([-1, 0, 1], repeat=3)
                       if sum(abs(c) for c in p) == 1], dtype=np.float64)
    hull = ConvexHull(points)
    assert hull.num_faces == 8
    assert hull.statistics().volume == pytest.approx(4.0 / 3.0)
