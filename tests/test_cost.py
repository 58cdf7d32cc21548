"""Tests for collapse cost evaluation."""

import numpy as np
import pytest

from progmesh.adapter import build
from progmesh.cost import (
    ISOLATED_VERTEX_COST,
    compute_edge_cost_at_vertex,
    edge_collapse_cost,
    side_faces,
)


@pytest.fixture
def grid_graph(flat_grid):
    return build(flat_grid.vertices, flat_grid.faces, min_vertices=0)


class TestEdgeCollapseCost:
    def test_interior_edge_cheaper_than_border_edge(self, grid_graph):
        v = grid_graph.vertices
        interior = edge_collapse_cost(grid_graph, v[4], v[5])
        border = edge_collapse_cost(grid_graph, v[0], v[1])

        assert interior < border
        assert border == pytest.approx(1.0)
        assert interior == pytest.approx(0.0005)

    def test_side_faces_of_interior_and_border_edges(self, grid_graph):
        v = grid_graph.vertices
        assert len(side_faces(grid_graph, v[4], v[5])) == 2
        assert len(side_faces(grid_graph, v[0], v[1])) == 1

    def test_cost_scales_with_edge_length(self, grid_graph):
        v = grid_graph.vertices
        straight = edge_collapse_cost(grid_graph, v[1], v[4])
        diagonal = edge_collapse_cost(grid_graph, v[1], v[3])
        assert diagonal == pytest.approx(straight * np.sqrt(2))

    def test_bent_neighborhood_costs_more(self):
        # Edge 0-1 has two flat side faces; the third face around 0 is
        # either coplanar or lifted out of the plane
        faces = np.array([[0, 1, 2], [1, 0, 3], [0, 2, 4]])
        base = [[0, 0, 0], [1, 0, 0], [0.5, 1, 0], [0.5, -1, 0]]
        flat = build(np.array(base + [[-1, 0, 0]], dtype=float), faces, min_vertices=0)
        bent = build(np.array(base + [[-1, 0, 1]], dtype=float), faces, min_vertices=0)

        flat_cost = edge_collapse_cost(flat, flat.vertices[0], flat.vertices[1])
        bent_cost = edge_collapse_cost(bent, bent.vertices[0], bent.vertices[1])

        assert flat_cost == pytest.approx(0.0005)
        assert bent_cost > flat_cost

    def test_zero_length_edge_costs_zero(self):
        graph = build(
            np.array([[0, 0, 0], [0, 0, 0], [1, 0, 0]], dtype=float),
            np.array([[0, 1, 2]]),
            min_vertices=0,
        )
        cost = edge_collapse_cost(graph, graph.vertices[0], graph.vertices[1])
        assert cost == 0.0
        assert np.isfinite(cost)


class TestComputeEdgeCostAtVertex:
    def test_isolated_vertex_gets_negative_sentinel(self, flat_grid):
        vertices = np.vstack([flat_grid.vertices, [[5.0, 5.0, 5.0]]])
        graph = build(vertices, flat_grid.faces, min_vertices=0)
        isolated = graph.vertices[9]

        compute_edge_cost_at_vertex(graph, isolated)

        assert isolated.collapse_cost == ISOLATED_VERTEX_COST
        assert isolated.collapse_neighbor is None

    def test_priority_is_mean_but_target_is_minimum(self, grid_graph):
        vertex = grid_graph.vertices[1]

        compute_edge_cost_at_vertex(grid_graph, vertex)

        # Edges 1-0 and 1-2 are borders (cost 1), 1-3 and 1-4 are interior
        costs = [
            edge_collapse_cost(grid_graph, vertex, grid_graph.vertices[n])
            for n in (0, 2, 3, 4)
        ]
        assert vertex.collapse_neighbor == 4
        assert vertex.min_cost == pytest.approx(min(costs))
        assert vertex.collapse_cost == pytest.approx(np.mean(costs))
        assert vertex.collapse_cost > vertex.min_cost

    def test_equal_costs_pick_lowest_neighbor_id(self, grid_graph):
        corner = grid_graph.vertices[0]
        compute_edge_cost_at_vertex(grid_graph, corner)
        # Both edges of the corner are unit length borders
        assert corner.collapse_neighbor == 1
