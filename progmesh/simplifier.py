"""
Mesh Simplifier
===============

Progressive mesh reduction by iterative edge collapse. The vertex with
the lowest collapse cost is merged onto its chosen neighbour until the
requested number of vertices has been removed.
"""

import numpy as np
import heapq
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union
import trimesh

from .adapter import DEFAULT_MIN_VERTICES, MeshTooSmallError, build_from_mesh, serialize
from .cost import compute_edge_cost_at_vertex
from .geometry import bounding_sphere
from .graph import DegenerateGeometryError, MeshGraph, Vertex
from .mesh import IndexedMesh, TriangleSoup, from_indexed_mesh, to_indexed_mesh
from .uv import DEFAULT_UV_TOLERANCE, apply_uv_correction, vertex_shift_percentage


DEFAULT_BUFFER_MIN_VERTICES = 51


class SimplificationCancelled(RuntimeError):
    """Raised when ``cancel_check`` asks the reduction loop to stop."""


@dataclass(order=True)
class CollapseCandidate:
    """Priority queue entry; equal costs pop the lowest vertex id first."""
    cost: float
    vertex_id: int
    version: int = field(compare=False)  # For lazy deletion


class MeshSimplifier:
    """
    Progressive mesh simplification by greedy edge collapse.

    Implements:
    - Curvature and border aware collapse costs
    - Priority queue with lazy updates, refreshed only around each collapse
    - Optional UV correction on the faces of collapsed vertices
    - Cooperative cancellation and progress reporting
    """

    def __init__(self, min_vertices: int = DEFAULT_MIN_VERTICES,
                 buffer_min_vertices: int = DEFAULT_BUFFER_MIN_VERTICES,
                 uv_tolerance: float = DEFAULT_UV_TOLERANCE,
                 merge_vertices: bool = True,
                 validate: bool = False,
                 verbose: bool = True):
        """
        Initialize the simplifier.

        Args:
            min_vertices: Meshes with fewer vertices are returned unchanged
            buffer_min_vertices: Triangle buffers with fewer than
                ``3 * buffer_min_vertices`` positions are returned unchanged
            uv_tolerance: Allowed gap, in percent, between texture and
                geometric shift before a UV correction is skipped
            merge_vertices: Weld duplicate positions before simplifying
            validate: Check graph invariants after every collapse
            verbose: Print progress information
        """
        self.min_vertices = min_vertices
        self.buffer_min_vertices = buffer_min_vertices
        self.uv_tolerance = uv_tolerance
        self.merge_vertices = merge_vertices
        self.validate = validate
        self.verbose = verbose

        # State variables (initialized per simplification)
        self._graph: Optional[MeshGraph] = None
        self._preserve_texture = False
        self._sphere_radius = 0.0
        self._vertex_versions: Optional[dict] = None
        self._priority_queue: Optional[List[CollapseCandidate]] = None
        self._collapse_history: Optional[List[dict]] = None
        self._exhausted = False

    def simplify(self, mesh: Union[IndexedMesh, TriangleSoup, trimesh.Trimesh],
                 percentage: float,
                 preserve_texture: bool = False,
                 cancel_check: Optional[Callable[[], bool]] = None,
                 progress_callback: Optional[Callable[[float], None]] = None):
        """
        Remove a fraction of the vertices of a mesh.

        Args:
            mesh: ``IndexedMesh``, ``TriangleSoup`` or ``trimesh.Trimesh``
            percentage: Fraction of the original vertex count to remove (0 to 1)
            preserve_texture: Correct face UVs around collapsed vertices
            cancel_check: Polled before every collapse; returning True aborts
            progress_callback: Optional callback for progress updates

        Returns:
            Simplified mesh of the same type as ``mesh``, or ``mesh`` itself
            when it is below the vertex floor
        """
        if not 0.0 <= percentage <= 1.0:
            raise ValueError(f"percentage must be within [0, 1], got {percentage}")

        if isinstance(mesh, TriangleSoup):
            if mesh.position_count < self.buffer_min_vertices * 3:
                return mesh
            indexed = to_indexed_mesh(mesh)
            # Only the position floor applies to buffers
            result = self._simplify_indexed(indexed, percentage, preserve_texture,
                                            cancel_check, progress_callback,
                                            merged=True, min_vertices=0)
            return mesh if result is indexed else from_indexed_mesh(result)

        if isinstance(mesh, trimesh.Trimesh):
            indexed = IndexedMesh.from_trimesh(mesh)
            result = self._simplify_indexed(indexed, percentage, preserve_texture,
                                            cancel_check, progress_callback)
            return mesh if result is indexed else result.to_trimesh()

        if isinstance(mesh, IndexedMesh):
            return self._simplify_indexed(mesh, percentage, preserve_texture,
                                          cancel_check, progress_callback)

        raise TypeError(f"Unsupported mesh type: {type(mesh).__name__}")

    def _simplify_indexed(self, mesh: IndexedMesh, percentage: float,
                          preserve_texture: bool,
                          cancel_check: Optional[Callable[[], bool]],
                          progress_callback: Optional[Callable[[float], None]],
                          merged: bool = False,
                          min_vertices: Optional[int] = None) -> IndexedMesh:
        if min_vertices is None:
            min_vertices = self.min_vertices

        if mesh.vertex_count < min_vertices:
            if self.verbose:
                print(f"Mesh too small to simplify: {mesh.vertex_count} vertices "
                      f"(minimum {min_vertices})")
            return mesh

        working = mesh
        if self.merge_vertices and not merged:
            working = mesh.merge_vertices()

        try:
            self._initialize(working, preserve_texture, min_vertices)
        except MeshTooSmallError as e:
            if self.verbose:
                print(f"Mesh too small to simplify: {e}")
            return mesh

        initial_vertices = self._graph.vertex_count
        # Half-up rounding of the collapse budget
        collapses_to_do = int(np.floor(initial_vertices * percentage + 0.5))

        if self.verbose:
            print(f"Starting simplification: {initial_vertices} vertices, "
                  f"{self._graph.triangle_count} faces, removing {collapses_to_do}")

        collapses_done = 0
        last_progress = 0.0

        while collapses_done < collapses_to_do:
            if cancel_check is not None and cancel_check():
                raise SimplificationCancelled(
                    f"Cancelled after {collapses_done} of {collapses_to_do} collapses"
                )

            vertex = self._pop_best_vertex()

            if vertex is None:
                self._exhausted = True
                if self.verbose:
                    print("No more vertices to collapse")
                break

            self._collapse(vertex)
            collapses_done += 1

            if self.validate:
                self._graph.check_invariants()

            # Progress callback
            if progress_callback is not None:
                progress = collapses_done / max(1, collapses_to_do)
                if progress - last_progress >= 0.05:  # Update every 5%
                    progress_callback(min(1.0, progress))
                    last_progress = progress

        if self.verbose:
            print(f"Simplification complete: {self._graph.vertex_count} vertices, "
                  f"{self._graph.triangle_count} faces, {collapses_done} collapses")

        return serialize(self._graph, name=mesh.name)

    def _initialize(self, mesh: IndexedMesh, preserve_texture: bool,
                    min_vertices: Optional[int] = None):
        """Initialize all data structures for simplification."""
        self._graph = build_from_mesh(
            mesh,
            min_vertices=self.min_vertices if min_vertices is None else min_vertices,
            preserve_texture=preserve_texture,
        )
        self._preserve_texture = self._graph.has_uvs
        self._exhausted = False
        self._collapse_history = []

        if self._preserve_texture:
            _, self._sphere_radius = bounding_sphere(mesh.vertices)
        else:
            self._sphere_radius = 0.0

        # Compute all collapse costs
        self._vertex_versions = {vid: 0 for vid in self._graph.vertices}
        self._priority_queue = []
        for vertex in self._graph.vertices.values():
            self._update_vertex_cost(vertex)

    def _update_vertex_cost(self, vertex: Vertex):
        """Recompute a vertex cost and queue it under a new version."""
        compute_edge_cost_at_vertex(self._graph, vertex)

        self._vertex_versions[vertex.id] += 1
        heapq.heappush(self._priority_queue, CollapseCandidate(
            cost=vertex.collapse_cost,
            vertex_id=vertex.id,
            version=self._vertex_versions[vertex.id],
        ))

    def _pop_best_vertex(self) -> Optional[Vertex]:
        """Get the live vertex with the lowest collapse cost."""
        while self._priority_queue:
            candidate = heapq.heappop(self._priority_queue)

            vertex = self._graph.vertices.get(candidate.vertex_id)
            if vertex is None:
                continue

            # Stale entry from before the last cost update
            if candidate.version != self._vertex_versions[candidate.vertex_id]:
                continue

            return vertex

        return None

    def _collapse(self, u: Vertex):
        """
        Collapse ``u`` onto its collapse neighbour.

        Triangles spanning the edge are deleted, the remaining triangles of
        ``u`` are moved to the neighbour and only ``u``'s former neighbours
        get new costs.
        """
        graph = self._graph

        if u.collapse_neighbor is None:
            # Isolated vertex, just delete it
            graph.remove_vertex(u.id)
            self._record(u, None)
            return

        v = graph.vertices.get(u.collapse_neighbor)
        if v is None:
            raise DegenerateGeometryError(
                f"Vertex {u.id} targets removed vertex {u.collapse_neighbor}"
            )

        neighborhood = sorted(u.neighbors)

        # Delete triangles on edge uv
        target_uv = None
        for fi in sorted(u.faces):
            triangle = graph.triangles[fi]
            if triangle.has_vertex(v.id):
                if self._preserve_texture and triangle.uvs is not None:
                    target_uv = triangle.uv_at(v.id).copy()
                graph.remove_triangle(fi)

        vertex_shift = 0.0
        if self._preserve_texture and target_uv is not None:
            vertex_shift = vertex_shift_percentage(u.position, v.position, self._sphere_radius)

        # Move the remaining triangles of u onto v
        for fi in sorted(u.faces):
            triangle = graph.triangles[fi]
            if target_uv is not None and triangle.uvs is not None:
                apply_uv_correction(triangle.uv_at(u.id), target_uv,
                                    vertex_shift, self.uv_tolerance)
            graph.replace_vertex(fi, u.id, v.id)

        graph.remove_vertex(u.id)
        self._record(u, v)

        # Recompute the collapse costs in the neighbourhood
        for nid in neighborhood:
            neighbor = graph.vertices.get(nid)
            if neighbor is not None:
                self._update_vertex_cost(neighbor)

    def _record(self, u: Vertex, v: Optional[Vertex]):
        self._collapse_history.append({
            'vertex': u.id,
            'target': None if v is None else v.id,
            'cost': u.collapse_cost,
        })

    @property
    def exhausted(self) -> bool:
        """True if the last run ran out of vertices before its budget."""
        return self._exhausted

    def get_collapse_history(self) -> List[dict]:
        """Get the history of collapses performed in the last run."""
        return self._collapse_history.copy() if self._collapse_history else []


def simplify(mesh: Union[IndexedMesh, TriangleSoup, trimesh.Trimesh],
             percentage: float,
             preserve_texture: bool = False,
             min_vertices: int = DEFAULT_MIN_VERTICES,
             buffer_min_vertices: int = DEFAULT_BUFFER_MIN_VERTICES,
             uv_tolerance: float = DEFAULT_UV_TOLERANCE,
             merge_vertices: bool = True,
             verbose: bool = False,
             cancel_check: Optional[Callable[[], bool]] = None,
             progress_callback: Optional[Callable[[float], None]] = None):
    """
    Remove ``round(vertex_count * percentage)`` vertices from a mesh.

    Convenience wrapper creating a ``MeshSimplifier`` for a single call.
    Meshes below the vertex floor are returned unchanged (same object).
    """
    simplifier = MeshSimplifier(
        min_vertices=min_vertices,
        buffer_min_vertices=buffer_min_vertices,
        uv_tolerance=uv_tolerance,
        merge_vertices=merge_vertices,
        verbose=verbose,
    )
    return simplifier.simplify(
        mesh, percentage,
        preserve_texture=preserve_texture,
        cancel_check=cancel_check,
        progress_callback=progress_callback,
    )
