"""
Collapse Cost Evaluation
========================

Edge collapse cost in the style of Stan Melax's progressive mesh
reduction (1998): edge length scaled by a curvature term derived from
face normal divergence, with border edges pushed to maximum curvature.
"""

import numpy as np
from typing import List

from .geometry import edge_length
from .graph import MeshGraph, Vertex


# Cost given to vertices without neighbours so they are always removed first
ISOLATED_VERTEX_COST = -0.01


def side_faces(graph: MeshGraph, u: Vertex, v: Vertex) -> List[int]:
    """Triangles incident to ``u`` that also contain ``v``."""
    return [fi for fi in sorted(u.faces) if graph.triangles[fi].has_vertex(v.id)]


def curvature(graph: MeshGraph, u: Vertex, sides: List[int]) -> float:
    """
    Curvature term for collapsing ``u`` along the edge spanned by ``sides``.

    For every face around ``u`` take the smallest ``(1.001 - n_f . n_s) / 2``
    over the side faces, then keep the largest of those values.
    """
    side_normals = [graph.triangles[si].normal for si in sides]
    result = 0.0

    for fi in u.faces:
        normal = graph.triangles[fi].normal
        min_curvature = 1.0
        for side_normal in side_normals:
            dot = float(np.dot(normal, side_normal))
            min_curvature = min(min_curvature, (1.001 - dot) / 2)
        result = max(result, min_curvature)

    return result


def edge_collapse_cost(graph: MeshGraph, u: Vertex, v: Vertex) -> float:
    """
    Cost of collapsing ``u`` onto ``v``.

    ``length(u, v) * curvature``, where an edge with fewer than two side
    faces (a border) always gets curvature 1. Non-finite results are
    clamped to 0 so costs stay totally ordered.
    """
    length = edge_length(u.position, v.position)
    sides = side_faces(graph, u, v)

    if len(sides) < 2:
        # Border edge
        edge_curvature = 1.0
    else:
        edge_curvature = curvature(graph, u, sides)

    cost = length * edge_curvature
    if not np.isfinite(cost):
        return 0.0
    return cost


def compute_edge_cost_at_vertex(graph: MeshGraph, v: Vertex):
    """
    Refresh ``v.collapse_cost`` and ``v.collapse_neighbor``.

    The neighbour with the cheapest edge becomes the collapse target,
    but the stored priority is the mean cost over all of ``v``'s edges.
    The priority (mean) and the target (minimum) intentionally use
    different metrics; unifying them changes which vertices go first.
    """
    if not v.neighbors:
        v.collapse_neighbor = None
        v.collapse_cost = ISOLATED_VERTEX_COST
        v.min_cost = ISOLATED_VERTEX_COST
        return

    total_cost = 0.0
    cost_count = 0
    v.collapse_neighbor = None

    for nid in sorted(v.neighbors):
        cost = edge_collapse_cost(graph, v, graph.vertices[nid])

        if v.collapse_neighbor is None or cost < v.min_cost:
            v.collapse_neighbor = nid
            v.min_cost = cost

        total_cost += cost
        cost_count += 1

    v.collapse_cost = total_cost / cost_count
