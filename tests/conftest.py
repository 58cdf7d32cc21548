"""Shared pytest fixtures for simplification tests."""

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest
import trimesh

from progmesh.mesh import IndexedMesh
from progmesh.utils import create_grid_mesh


def assert_valid_mesh(mesh: IndexedMesh):
    """Every face references existing vertices and has three distinct corners."""
    if mesh.face_count == 0:
        return
    assert mesh.faces.min() >= 0
    assert mesh.faces.max() < mesh.vertex_count
    f = mesh.faces
    assert np.all(f[:, 0] != f[:, 1])
    assert np.all(f[:, 1] != f[:, 2])
    assert np.all(f[:, 0] != f[:, 2])


@pytest.fixture
def flat_grid() -> IndexedMesh:
    """3x3 flat grid with unit spacing (9 vertices, 8 faces)."""
    return create_grid_mesh(rows=3, cols=3)


@pytest.fixture
def uv_grid() -> IndexedMesh:
    """3x3 flat grid whose UVs are the XY positions scaled into [0, 1]."""
    mesh = create_grid_mesh(rows=3, cols=3)
    mesh.face_uvs = mesh.vertices[:, :2][mesh.faces] / 2
    return mesh


@pytest.fixture
def wavy_grid() -> IndexedMesh:
    """12x12 open grid with a height field and UVs (144 vertices)."""
    return create_grid_mesh(rows=12, cols=12, spacing=0.1, wave=0.2, with_uvs=True)


@pytest.fixture
def icosahedron() -> IndexedMesh:
    """Unit icosahedron: 12 vertices on the unit sphere, 20 faces."""
    tm = trimesh.creation.icosahedron()
    vertices = np.asarray(tm.vertices, dtype=np.float64)
    vertices = vertices / np.linalg.norm(vertices, axis=1, keepdims=True)
    return IndexedMesh(vertices=vertices, faces=np.asarray(tm.faces), name="icosahedron")
