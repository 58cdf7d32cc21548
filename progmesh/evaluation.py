"""
Mesh Evaluation Module
======================

Quantitative checks for a simplification result:
- Vertex/face count statistics
- Surface area change
- Hausdorff and Chamfer distances
- Boundary preservation
- Degenerate and isolated geometry left behind
"""

import numpy as np
from typing import Dict, Tuple
from scipy.spatial import cKDTree
import trimesh

from .mesh import IndexedMesh


class MeshEvaluator:
    """
    Evaluation tools for assessing simplification quality.
    """

    def __init__(self, sample_points: int = 5000, seed: int = 0):
        """
        Initialize evaluator.

        Args:
            sample_points: Number of surface samples for distance metrics
            seed: Seed for surface sampling, so reports are reproducible
        """
        self.sample_points = sample_points
        self.seed = seed

    def compute_all_metrics(self, original: IndexedMesh,
                            simplified: IndexedMesh) -> Dict[str, float]:
        """
        Compute all available metrics.

        Args:
            original: Input mesh
            simplified: Simplified mesh

        Returns:
            Dictionary of metric names to values
        """
        metrics = {
            'original_vertices': original.vertex_count,
            'simplified_vertices': simplified.vertex_count,
            'original_faces': original.face_count,
            'simplified_faces': simplified.face_count,
            'vertex_reduction_ratio': simplified.vertex_count / max(1, original.vertex_count),
            'face_reduction_ratio': simplified.face_count / max(1, original.face_count),
        }

        metrics['original_area'] = original.surface_area()
        metrics['simplified_area'] = simplified.surface_area()
        metrics['area_error'] = abs(metrics['simplified_area'] - metrics['original_area']) / \
            max(metrics['original_area'], 1e-10)

        hausdorff, forward, backward = self.hausdorff_distance(original, simplified)
        metrics['hausdorff_distance'] = hausdorff
        metrics['hausdorff_forward'] = forward
        metrics['hausdorff_backward'] = backward
        metrics['chamfer_distance'] = self.chamfer_distance(original, simplified)

        metrics.update(self.boundary_preservation_metrics(original, simplified))

        metrics['degenerate_faces'] = self.count_degenerate_faces(simplified)
        metrics['isolated_vertices'] = self.count_isolated_vertices(simplified)

        return metrics

    def sample_surface(self, mesh: IndexedMesh) -> np.ndarray:
        """
        Sample points uniformly by area on the mesh surface.

        Falls back to the vertex positions for meshes without area.
        """
        if mesh.face_count == 0 or mesh.surface_area() <= 0:
            return mesh.vertices

        points, _ = trimesh.sample.sample_surface(
            mesh.to_trimesh(with_uvs=False), self.sample_points, seed=self.seed
        )
        return np.asarray(points)

    def hausdorff_distance(self, mesh1: IndexedMesh,
                           mesh2: IndexedMesh) -> Tuple[float, float, float]:
        """
        Compute symmetric Hausdorff distance between two meshes.

        Returns:
            Tuple of (symmetric_hausdorff, forward, backward) distances
        """
        points1 = self.sample_surface(mesh1)
        points2 = self.sample_surface(mesh2)
        if len(points1) == 0 or len(points2) == 0:
            return np.nan, np.nan, np.nan

        distances_forward, _ = cKDTree(points2).query(points1)
        distances_backward, _ = cKDTree(points1).query(points2)

        forward = float(np.max(distances_forward))
        backward = float(np.max(distances_backward))
        return max(forward, backward), forward, backward

    def chamfer_distance(self, mesh1: IndexedMesh, mesh2: IndexedMesh) -> float:
        """
        Compute symmetric Chamfer distance (sum of mean squared
        nearest-neighbour distances in both directions).
        """
        points1 = self.sample_surface(mesh1)
        points2 = self.sample_surface(mesh2)
        if len(points1) == 0 or len(points2) == 0:
            return np.nan

        distances_forward, _ = cKDTree(points2).query(points1)
        distances_backward, _ = cKDTree(points1).query(points2)

        return float(np.mean(distances_forward ** 2) + np.mean(distances_backward ** 2))

    def boundary_preservation_metrics(self, original: IndexedMesh,
                                      simplified: IndexedMesh) -> Dict[str, float]:
        """
        Compare border edge count and total border length.
        """
        orig_boundaries = self._get_boundary_edges(original)
        simp_boundaries = self._get_boundary_edges(simplified)

        orig_length = self._compute_boundary_length(original, orig_boundaries)
        simp_length = self._compute_boundary_length(simplified, simp_boundaries)

        metrics = {
            'original_boundary_edges': len(orig_boundaries),
            'simplified_boundary_edges': len(simp_boundaries),
            'original_boundary_length': orig_length,
            'simplified_boundary_length': simp_length,
        }

        if orig_length > 0:
            metrics['boundary_length_change'] = abs(simp_length - orig_length) / orig_length
        else:
            metrics['boundary_length_change'] = 0.0

        return metrics

    def count_degenerate_faces(self, mesh: IndexedMesh) -> int:
        """Faces with a repeated vertex index."""
        if mesh.face_count == 0:
            return 0
        f = mesh.faces
        repeated = (f[:, 0] == f[:, 1]) | (f[:, 1] == f[:, 2]) | (f[:, 0] == f[:, 2])
        return int(np.count_nonzero(repeated))

    def count_isolated_vertices(self, mesh: IndexedMesh) -> int:
        """Vertices not referenced by any face."""
        if mesh.face_count == 0:
            return mesh.vertex_count
        return mesh.vertex_count - len(np.unique(mesh.faces))

    def _get_boundary_edges(self, mesh: IndexedMesh) -> set:
        """Find boundary edges of a mesh."""
        edge_count = {}
        for face in mesh.faces:
            for i in range(3):
                edge = tuple(sorted([int(face[i]), int(face[(i + 1) % 3])]))
                edge_count[edge] = edge_count.get(edge, 0) + 1
        return {edge for edge, count in edge_count.items() if count == 1}

    def _compute_boundary_length(self, mesh: IndexedMesh, boundary_edges: set) -> float:
        """Compute total length of boundary edges."""
        total_length = 0.0
        for a, b in boundary_edges:
            total_length += float(np.linalg.norm(mesh.vertices[b] - mesh.vertices[a]))
        return total_length

    def generate_report(self, metrics: Dict[str, float],
                        method_name: str = "Progressive Mesh") -> str:
        """
        Generate a human-readable evaluation report.

        Args:
            metrics: Dictionary of metric values
            method_name: Label shown in the header

        Returns:
            Formatted report string
        """
        lines = [
            "=" * 60,
            f"Mesh Simplification Report - {method_name}",
            "=" * 60,
            "",
            "MESH STATISTICS",
            "-" * 40,
            f"  Original:    {metrics.get('original_vertices', 'N/A'):>8} vertices, "
            f"{metrics.get('original_faces', 'N/A'):>8} faces",
            f"  Simplified:  {metrics.get('simplified_vertices', 'N/A'):>8} vertices, "
            f"{metrics.get('simplified_faces', 'N/A'):>8} faces",
            f"  Reduction:   {metrics.get('vertex_reduction_ratio', 0)*100:>7.2f}% of original vertices",
            "",
            "GEOMETRIC ACCURACY",
            "-" * 40,
            f"  Hausdorff Distance:    {metrics.get('hausdorff_distance', np.nan):>12.6f}",
            f"    Forward:             {metrics.get('hausdorff_forward', np.nan):>12.6f}",
            f"    Backward:            {metrics.get('hausdorff_backward', np.nan):>12.6f}",
            f"  Chamfer Distance:      {metrics.get('chamfer_distance', np.nan):>12.6f}",
            f"  Area Error:            {metrics.get('area_error', 0)*100:>11.4f}%",
            "",
            "BOUNDARY PRESERVATION",
            "-" * 40,
            f"  Original Boundaries:   {metrics.get('original_boundary_edges', 0):>8} edges",
            f"  Simplified Boundaries: {metrics.get('simplified_boundary_edges', 0):>8} edges",
            f"  Length Change:         {metrics.get('boundary_length_change', 0)*100:>11.4f}%",
            "",
            "LEFTOVERS",
            "-" * 40,
            f"  Degenerate Faces:      {metrics.get('degenerate_faces', 0):>8}",
            f"  Isolated Vertices:     {metrics.get('isolated_vertices', 0):>8}",
            "",
            "=" * 60,
        ]

        if 'runtime' in metrics:
            lines.insert(-1, f"  Runtime:               {metrics['runtime']:>11.4f} seconds")

        return "\n".join(lines)

    def print_report(self, metrics: Dict[str, float], method_name: str = "Progressive Mesh"):
        """Print the evaluation report to console."""
        print(self.generate_report(metrics, method_name))
