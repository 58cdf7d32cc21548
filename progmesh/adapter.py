"""
Geometry Adapter
================

Translation between plain vertex/face arrays and the ``MeshGraph``
working structure. No simplification decisions are made here.
"""

import numpy as np
from typing import Optional

from .graph import MeshGraph, DegenerateGeometryError
from .mesh import IndexedMesh


DEFAULT_MIN_VERTICES = 50


class MeshTooSmallError(ValueError):
    """The mesh has fewer vertices than the viable floor for simplification."""

    def __init__(self, vertex_count: int, min_vertices: int):
        super().__init__(
            f"Mesh has {vertex_count} vertices, below the minimum of {min_vertices}"
        )
        self.vertex_count = vertex_count
        self.min_vertices = min_vertices


def build(vertices: np.ndarray,
          faces: np.ndarray,
          face_uvs: Optional[np.ndarray] = None,
          material_indices: Optional[np.ndarray] = None,
          min_vertices: int = DEFAULT_MIN_VERTICES,
          preserve_texture: bool = True) -> MeshGraph:
    """
    Build a mesh graph from indexed arrays.

    One vertex is created per position (its index becomes ``Vertex.id``),
    then one triangle per index triple, linking faces and neighbours.
    Duplicate positions must already be merged.

    Args:
        vertices: (N, 3) array of positions
        faces: (M, 3) array of vertex indices
        face_uvs: Optional (M, 3, 2) array of per-corner UVs
        material_indices: Optional (M,) array of material indices
        min_vertices: Viable vertex floor
        preserve_texture: Attach UVs to triangles when available

    Returns:
        Populated mesh graph

    Raises:
        MeshTooSmallError: if ``len(vertices) < min_vertices``
        DegenerateGeometryError: on repeated or out-of-range face indices
    """
    vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)

    if len(vertices) < min_vertices:
        raise MeshTooSmallError(len(vertices), min_vertices)

    if len(faces) and (faces.min() < 0 or faces.max() >= len(vertices)):
        raise DegenerateGeometryError("Face indices out of range")

    if face_uvs is not None:
        face_uvs = np.asarray(face_uvs, dtype=np.float64).reshape(-1, 3, 2)
        if len(face_uvs) != len(faces):
            raise ValueError(f"Expected {len(faces)} face UV triples, got {len(face_uvs)}")

    graph = MeshGraph()
    graph.has_uvs = bool(preserve_texture and face_uvs is not None)
    graph.has_materials = material_indices is not None

    for i, position in enumerate(vertices):
        graph.add_vertex(i, position)

    for fi, face in enumerate(faces):
        graph.add_triangle(
            face,
            uvs=face_uvs[fi] if graph.has_uvs else None,
            material_index=int(material_indices[fi]) if graph.has_materials else None,
        )

    return graph


def build_from_mesh(mesh: IndexedMesh,
                    min_vertices: int = DEFAULT_MIN_VERTICES,
                    preserve_texture: bool = True) -> MeshGraph:
    """Build a mesh graph from an ``IndexedMesh``."""
    return build(
        mesh.vertices,
        mesh.faces,
        face_uvs=mesh.face_uvs,
        material_indices=mesh.material_indices,
        min_vertices=min_vertices,
        preserve_texture=preserve_texture,
    )


def serialize(graph: MeshGraph, name: str = "") -> IndexedMesh:
    """
    Convert the live graph back to indexed arrays.

    Live vertices are renumbered contiguously in their original order.
    Isolated vertices still present in the graph are kept.
    """
    remap = {}
    positions = []
    for vid, vertex in graph.vertices.items():
        remap[vid] = len(positions)
        positions.append(vertex.position)

    faces = []
    uvs = []
    materials = []
    for triangle in graph.triangles.values():
        faces.append([remap[c] for c in triangle.vertices])
        if graph.has_uvs:
            uvs.append(triangle.uvs)
        if graph.has_materials:
            materials.append(triangle.material_index)

    vertices_array = np.array(positions) if positions else np.zeros((0, 3))
    faces_array = np.array(faces, dtype=np.int64) if faces else np.zeros((0, 3), dtype=np.int64)

    face_uvs = None
    if graph.has_uvs:
        face_uvs = np.array(uvs) if uvs else np.zeros((0, 3, 2))

    material_indices = None
    if graph.has_materials:
        material_indices = np.array(materials, dtype=np.int64)

    return IndexedMesh(
        vertices=vertices_array,
        faces=faces_array,
        face_uvs=face_uvs,
        material_indices=material_indices,
        name=name,
    )
