"""Tests for the UV preservation heuristic."""

import numpy as np
import pytest

from progmesh.geometry import bounding_sphere
from progmesh.simplifier import MeshSimplifier
from progmesh.uv import apply_uv_correction, texture_shift_percentage, vertex_shift_percentage


class TestShiftPercentages:
    def test_vertex_shift_relative_to_diameter(self):
        shift = vertex_shift_percentage(np.zeros(3), np.array([1.0, 0.0, 0.0]), sphere_radius=5.0)
        assert shift == pytest.approx(10.0)

    def test_vertex_shift_zero_sized_model(self):
        assert vertex_shift_percentage(np.zeros(3), np.ones(3), sphere_radius=0.0) == 0.0

    def test_texture_shift_uses_largest_axis(self):
        shift = texture_shift_percentage(np.array([0.2, 0.5]), np.array([0.3, 0.1]))
        assert shift == pytest.approx(40.0)


class TestApplyUvCorrection:
    def test_large_mismatch_is_skipped(self):
        corner = np.array([0.0, 0.0])
        applied = apply_uv_correction(corner, np.array([0.5, 0.0]), vertex_shift=1.0)

        assert not applied
        np.testing.assert_array_equal(corner, [0.0, 0.0])

    def test_matching_shift_is_applied(self):
        corner = np.array([0.1, 0.1])
        target = np.array([0.12, 0.1])
        applied = apply_uv_correction(corner, target, vertex_shift=1.5)

        assert applied
        np.testing.assert_allclose(corner, target)

    def test_tolerance_is_configurable(self):
        corner = np.array([0.0, 0.0])
        applied = apply_uv_correction(corner, np.array([0.2, 0.0]), vertex_shift=12.0,
                                      tolerance=10.0)
        assert applied
        np.testing.assert_allclose(corner, [0.2, 0.0])


class TestCollapseUvs:
    def _collapse_center_onto_corner(self, mesh):
        simplifier = MeshSimplifier(min_vertices=0, verbose=False)
        simplifier._initialize(mesh, preserve_texture=True)
        graph = simplifier._graph

        center = graph.vertices[4]
        moved = [fi for fi in center.faces if not graph.triangles[fi].has_vertex(2)]
        old_uvs = {fi: graph.triangles[fi].uv_at(4).copy() for fi in moved}

        center.collapse_neighbor = 2
        simplifier._collapse(center)
        graph.check_invariants()
        return graph, moved, old_uvs

    def test_consistent_uvs_follow_the_collapse(self, uv_grid):
        # Diagonal edge: 50% of the bounding diameter in space and in UV
        graph, moved, _ = self._collapse_center_onto_corner(uv_grid)

        assert 4 not in graph.vertices
        for fi in moved:
            np.testing.assert_allclose(graph.triangles[fi].uv_at(2), [1.0, 0.0])

    def test_inconsistent_uvs_keep_their_value(self, uv_grid):
        uv_grid.face_uvs = uv_grid.face_uvs * 0.1
        graph, moved, old_uvs = self._collapse_center_onto_corner(uv_grid)

        for fi in moved:
            np.testing.assert_allclose(graph.triangles[fi].uv_at(2), old_uvs[fi])

    def test_side_faces_are_removed(self, uv_grid):
        graph, moved, _ = self._collapse_center_onto_corner(uv_grid)
        assert graph.triangle_count == len(uv_grid.faces) - 2
        assert set(moved) <= set(graph.triangles)


class TestBoundingSphere:
    def test_centred_on_box(self):
        points = np.array([[0, 0, 0], [2, 0, 0], [0, 2, 0], [2, 2, 0]], dtype=float)
        center, radius = bounding_sphere(points)
        np.testing.assert_allclose(center, [1.0, 1.0, 0.0])
        assert radius == pytest.approx(np.sqrt(2.0))

    def test_empty_points(self):
        center, radius = bounding_sphere(np.zeros((0, 3)))
        np.testing.assert_array_equal(center, np.zeros(3))
        assert radius == 0.0
