"""
Mesh Graph
==========

Dynamic vertex/triangle adjacency used during edge collapse.

Vertices and triangles live in an arena keyed by stable integer handles.
Cross references (``Vertex.faces``, ``Vertex.neighbors``,
``Triangle.vertices``) are handle sets, so deleting a record only means
popping it from the arena and discarding its handle from its neighbours.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from .geometry import face_normal


class DegenerateGeometryError(AssertionError):
    """An internal consistency check on the mesh graph failed."""


@dataclass
class Vertex:
    """A graph vertex and its cached collapse decision."""
    id: int
    position: np.ndarray
    faces: Set[int] = field(default_factory=set)
    neighbors: Set[int] = field(default_factory=set)
    collapse_cost: float = 0.0
    collapse_neighbor: Optional[int] = None
    min_cost: float = 0.0


@dataclass
class Triangle:
    """A graph triangle; ``uvs`` rows follow the order of ``vertices``."""
    id: int
    vertices: List[int]
    normal: np.ndarray = field(default_factory=lambda: np.zeros(3))
    material_index: Optional[int] = None
    uvs: Optional[np.ndarray] = None

    def has_vertex(self, vertex_id: int) -> bool:
        return vertex_id in self.vertices

    def corner_of(self, vertex_id: int) -> int:
        """Corner slot (0, 1 or 2) holding ``vertex_id``."""
        return self.vertices.index(vertex_id)

    def uv_at(self, vertex_id: int) -> Optional[np.ndarray]:
        """UV row of the corner holding ``vertex_id`` (a view, not a copy)."""
        if self.uvs is None:
            return None
        return self.uvs[self.corner_of(vertex_id)]


class MeshGraph:
    """
    Arena of live vertices and triangles with incremental adjacency.

    Invariants kept by every mutation:
    - ``v in u.neighbors`` iff some live triangle holds both ``u`` and ``v``
    - the three corners of a live triangle are pairwise distinct
    - a triangle normal always matches its current corners
    """

    def __init__(self):
        self.vertices: Dict[int, Vertex] = {}
        self.triangles: Dict[int, Triangle] = {}
        self.has_uvs = False
        self.has_materials = False
        self._next_triangle_id = 0

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles)

    def add_vertex(self, vertex_id: int, position: np.ndarray) -> Vertex:
        if vertex_id in self.vertices:
            raise DegenerateGeometryError(f"Vertex {vertex_id} already exists")

        vertex = Vertex(id=vertex_id, position=np.asarray(position, dtype=np.float64))
        self.vertices[vertex_id] = vertex
        return vertex

    def add_triangle(self, corners: List[int],
                     uvs: Optional[np.ndarray] = None,
                     material_index: Optional[int] = None) -> Triangle:
        """
        Create a triangle and register it on its three corners.

        Raises:
            DegenerateGeometryError: if a corner is missing or repeated
        """
        corners = [int(c) for c in corners]
        if len(set(corners)) != 3:
            raise DegenerateGeometryError(f"Triangle corners must be distinct: {corners}")
        for c in corners:
            if c not in self.vertices:
                raise DegenerateGeometryError(f"Triangle references unknown vertex {c}")

        triangle = Triangle(
            id=self._next_triangle_id,
            vertices=corners,
            material_index=material_index,
            uvs=None if uvs is None else np.array(uvs, dtype=np.float64).reshape(3, 2),
        )
        self._next_triangle_id += 1
        self.triangles[triangle.id] = triangle
        self.compute_normal(triangle)

        for c in corners:
            self.vertices[c].faces.add(triangle.id)
        self._link_corners(triangle)

        return triangle

    def compute_normal(self, triangle: Triangle):
        v0, v1, v2 = (self.vertices[c].position for c in triangle.vertices)
        triangle.normal = face_normal(v0, v1, v2)

    def _link_corners(self, triangle: Triangle):
        for a in triangle.vertices:
            for b in triangle.vertices:
                if a != b:
                    self.vertices[a].neighbors.add(b)

    def remove_if_non_neighbor(self, vertex_id: int, other_id: int):
        """Drop ``other_id`` from the neighbours of ``vertex_id`` unless a face still joins them."""
        vertex = self.vertices[vertex_id]
        if other_id not in vertex.neighbors:
            return

        for fi in vertex.faces:
            if self.triangles[fi].has_vertex(other_id):
                return

        vertex.neighbors.discard(other_id)

    def remove_triangle(self, triangle_id: int):
        """Delete a triangle from the arena and from all adjacency sets."""
        triangle = self.triangles.pop(triangle_id)

        for c in triangle.vertices:
            self.vertices[c].faces.discard(triangle_id)

        corners = triangle.vertices
        for i in range(3):
            a, b = corners[i], corners[(i + 1) % 3]
            self.remove_if_non_neighbor(a, b)
            self.remove_if_non_neighbor(b, a)

    def replace_vertex(self, triangle_id: int, old_id: int, new_id: int):
        """
        Substitute ``old_id`` by ``new_id`` on one triangle.

        Moves the face between the two vertices, repairs the neighbour
        sets of all three corners and recomputes the normal.
        """
        triangle = self.triangles[triangle_id]
        if triangle.has_vertex(new_id):
            raise DegenerateGeometryError(
                f"Triangle {triangle_id} already holds vertex {new_id}"
            )

        triangle.vertices[triangle.corner_of(old_id)] = new_id

        old = self.vertices[old_id]
        old.faces.discard(triangle_id)
        self.vertices[new_id].faces.add(triangle_id)

        for c in triangle.vertices:
            self.remove_if_non_neighbor(old_id, c)
            self.remove_if_non_neighbor(c, old_id)

        self._link_corners(triangle)
        self.compute_normal(triangle)

    def remove_vertex(self, vertex_id: int):
        """
        Delete a vertex that no longer has incident faces.

        Raises:
            DegenerateGeometryError: if the vertex still has faces
        """
        vertex = self.vertices[vertex_id]
        if vertex.faces:
            raise DegenerateGeometryError(
                f"Cannot remove vertex {vertex_id}: {len(vertex.faces)} faces still attached"
            )

        for n in vertex.neighbors:
            self.vertices[n].neighbors.discard(vertex_id)
        vertex.neighbors.clear()

        del self.vertices[vertex_id]

    def check_invariants(self):
        """
        Verify adjacency consistency of the whole graph.

        Raises:
            DegenerateGeometryError: on the first violation found
        """
        expected = {vid: set() for vid in self.vertices}
        faces = {vid: set() for vid in self.vertices}

        for tid, triangle in self.triangles.items():
            corners = triangle.vertices
            if len(set(corners)) != 3:
                raise DegenerateGeometryError(f"Triangle {tid} has repeated corners {corners}")
            for c in corners:
                if c not in self.vertices:
                    raise DegenerateGeometryError(f"Triangle {tid} references removed vertex {c}")
                faces[c].add(tid)
                expected[c].update(x for x in corners if x != c)

        for vid, vertex in self.vertices.items():
            if vertex.faces != faces[vid]:
                raise DegenerateGeometryError(f"Vertex {vid} face set is out of sync")
            if vertex.neighbors != expected[vid]:
                raise DegenerateGeometryError(
                    f"Vertex {vid} neighbors {sorted(vertex.neighbors)} "
                    f"!= {sorted(expected[vid])}"
                )
