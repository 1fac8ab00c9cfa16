"""
Unit tests for hull3d.hull.simplex.

Tests:
- Seed selection on regular and degenerate inputs
- Initial tetrahedron orientation and exterior pruning
"""

import numpy as np
import pytest

from hull3d.errors import DegenerateSeedError, HullInputError, InsufficientPointsError
from hull3d.hull.simplex import (
    axis_extremes,
    build_initial_simplex,
    farthest_from_line,
    farthest_from_plane,
    farthest_pair,
    select_seed,
)

TOL = 1e-9


class TestSeedHelpers:
    """Tests for the individual seed search steps."""

    def test_axis_extremes(self, cube_points):
        assert axis_extremes(cube_points) == [0, 4, 0, 2, 0, 1]

    def test_farthest_pair_first_found_on_ties(self, cube_points):
        i0, i1, d = farthest_pair(cube_points, [0, 4, 0, 2, 0, 1])
        assert (i0, i1) == (4, 2)
        assert d == pytest.approx(2.0)

    def test_farthest_from_line(self):
        pts = np.array([[0, 0, 0], [2, 0, 0], [1, 3, 0], [1, -1, 0]], dtype=np.float64)
        idx, dist = farthest_from_line(pts, 0, 1)
        assert idx == 2
        assert dist == pytest.approx(3.0)

    def test_farthest_from_plane_uses_absolute_distance(self):
        pts = np.array(
            [[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1], [0, 0, -4]], dtype=np.float64
        )
        idx, dist = farthest_from_plane(pts, 0, 1, 2)
        assert idx == 4
        assert dist == pytest.approx(4.0)


class TestSelectSeed:
    """Tests for select_seed."""

    def test_too_few_points(self):
        pts = np.zeros((3, 3))
        with pytest.raises(InsufficientPointsError) as exc_info:
            select_seed(pts, TOL)
        assert exc_info.value.n_points == 3
        assert "got 3" in str(exc_info.value)

    def test_four_points_used_as_given(self, tetra_points):
        assert select_seed(tetra_points, TOL) == [0, 1, 2, 3]

    def test_cube_seed(self, cube_points):
        assert select_seed(cube_points, TOL) == [4, 2, 1, 7]

    def test_four_coplanar_points(self, coplanar_points):
        with pytest.raises(DegenerateSeedError) as exc_info:
            select_seed(coplanar_points, TOL)
        assert exc_info.value.kind == "coplanar"

    def test_four_collinear_points(self):
        pts = np.array([[0, 0, 0], [1, 0, 0], [2, 0, 0], [3, 0, 0]], dtype=np.float64)
        with pytest.raises(DegenerateSeedError) as exc_info:
            select_seed(pts, TOL)
        assert exc_info.value.kind == "collinear"

    def test_coincident_points(self):
        pts = np.ones((6, 3))
        with pytest.raises(DegenerateSeedError) as exc_info:
            select_seed(pts, TOL)
        assert exc_info.value.kind == "coincident"

    def test_planar_grid(self):
        xs, ys = np.meshgrid(np.arange(5.0), np.arange(5.0))
        pts = np.column_stack([xs.ravel(), ys.ravel(), np.zeros(25)])
        with pytest.raises(DegenerateSeedError) as exc_info:
            select_seed(pts, TOL)
        assert exc_info.value.kind == "coplanar"

    def test_degenerate_is_input_error(self, coplanar_points):
        with pytest.raises(HullInputError):
            select_seed(coplanar_points, TOL)
        with pytest.raises(ValueError):
            select_seed(coplanar_points, TOL)


class TestBuildInitialSimplex:
    """Tests for build_initial_simplex."""

    def test_four_faces(self, tetra_points):
        state = build_initial_simplex(tetra_points, TOL)
        assert len(state.store) == 4
        assert state.store.face_ids() == [0, 1, 2, 3]
        assert state.next_id == 4

    def test_faces_oriented_outward(self, tetra_points):
        state = build_initial_simplex(tetra_points, TOL)
        for face in state.store:
            d = np.dot(state.centroid - tetra_points[face.a], face.normal)
            assert d < 0

    def test_enclosed_points_dropped(self, tetra_with_centroid):
        state = build_initial_simplex(tetra_with_centroid, TOL)
        assert state.n_exterior == 0
        np.testing.assert_allclose(state.centroid, [0.25, 0.25, 0.25])

    def test_seed_vertices_not_exterior(self, cube_points):
        state = build_initial_simplex(cube_points, TOL)
        assert not np.isin(state.exterior, [4, 2, 1, 7]).any()

    def test_cube_corners_outside_seed(self, cube_points):
        state = build_initial_simplex(cube_points, TOL)
        assert state.exterior.tolist() == [0, 3, 5, 6]
