"""Tests for mesh containers and buffer conversion."""

import numpy as np
import pytest
import trimesh

from progmesh.mesh import IndexedMesh, TriangleSoup, from_indexed_mesh, to_indexed_mesh


SQUARE_SOUP = np.array([
    [0, 0, 0], [1, 0, 0], [0, 1, 0],
    [1, 0, 0], [1, 1, 0], [0, 1, 0],
], dtype=float)


class TestIndexedMesh:
    def test_uv_count_validated(self):
        with pytest.raises(ValueError):
            IndexedMesh(vertices=np.zeros((3, 3)), faces=[[0, 1, 2]], face_uvs=np.zeros((2, 3, 2)))

    def test_material_count_validated(self):
        with pytest.raises(ValueError):
            IndexedMesh(vertices=np.zeros((3, 3)), faces=[[0, 1, 2]], material_indices=[0, 1])

    def test_surface_area(self):
        mesh = IndexedMesh(vertices=SQUARE_SOUP[[0, 1, 2, 4]], faces=[[0, 1, 2], [1, 3, 2]])
        assert mesh.surface_area() == pytest.approx(1.0)

    def test_merge_keeps_first_occurrence_order(self):
        mesh = IndexedMesh(vertices=SQUARE_SOUP, faces=np.arange(6).reshape(2, 3))
        merged = mesh.merge_vertices()

        np.testing.assert_array_equal(merged.vertices, SQUARE_SOUP[[0, 1, 2, 4]])
        np.testing.assert_array_equal(merged.faces, [[0, 1, 2], [1, 3, 2]])

    def test_merge_drops_collapsed_triangles(self):
        vertices = np.array([[0, 0, 0], [1, 0, 0], [1, 0, 0], [0, 1, 0]], dtype=float)
        faces = [[0, 1, 2], [0, 1, 3]]
        uvs = np.arange(12, dtype=float).reshape(2, 3, 2)
        merged = IndexedMesh(vertices=vertices, faces=faces, face_uvs=uvs).merge_vertices()

        assert merged.vertex_count == 3
        np.testing.assert_array_equal(merged.faces, [[0, 1, 2]])
        np.testing.assert_array_equal(merged.face_uvs, uvs[1:])

    def test_trimesh_round_trip_with_uvs(self):
        mesh = IndexedMesh(
            vertices=SQUARE_SOUP[[0, 1, 2, 4]],
            faces=[[0, 1, 2], [1, 3, 2]],
            face_uvs=SQUARE_SOUP[[0, 1, 2, 1, 4, 2]][:, :2].reshape(2, 3, 2),
        )
        tm = mesh.to_trimesh()
        assert isinstance(tm, trimesh.Trimesh)
        assert len(tm.vertices) == 4

        back = IndexedMesh.from_trimesh(tm).merge_vertices()
        assert back.vertex_count == 4
        np.testing.assert_allclose(back.face_uvs, mesh.face_uvs)

    def test_trimesh_keeps_uv_seams_split(self):
        # Shared edge 1-2 carries different UVs on each face
        uvs = np.array([
            [[0.0, 0.0], [0.5, 0.0], [0.0, 0.5]],
            [[0.6, 0.0], [1.0, 1.0], [0.0, 0.6]],
        ])
        mesh = IndexedMesh(vertices=SQUARE_SOUP[[0, 1, 2, 4]],
                           faces=[[0, 1, 2], [1, 3, 2]], face_uvs=uvs)
        tm = mesh.to_trimesh()
        assert len(tm.vertices) == 6


class TestBufferConversion:
    def test_to_indexed_welds_positions(self):
        soup = TriangleSoup(positions=SQUARE_SOUP, uvs=SQUARE_SOUP[:, :2])
        mesh = to_indexed_mesh(soup)

        assert mesh.vertex_count == 4
        assert mesh.face_count == 2
        np.testing.assert_allclose(mesh.face_uvs.reshape(-1, 2), SQUARE_SOUP[:, :2])

    def test_from_indexed_unwelds_with_normals(self):
        mesh = to_indexed_mesh(TriangleSoup(positions=SQUARE_SOUP))
        soup = from_indexed_mesh(mesh)

        np.testing.assert_allclose(soup.positions, SQUARE_SOUP)
        np.testing.assert_allclose(soup.normals, np.tile([0.0, 0.0, 1.0], (6, 1)), atol=1e-9)
        assert soup.uvs is None

    def test_position_count_must_form_triangles(self):
        with pytest.raises(ValueError):
            TriangleSoup(positions=np.zeros((4, 3)))
