"""
Mesh Visualization Module
=========================

Matplotlib views of simplification results: side-by-side shaded
comparisons, percentage sweeps and UV layouts.
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.collections import PolyCollection
from mpl_toolkits.mplot3d.art3d import Poly3DCollection
from typing import List, Optional, Tuple

from .mesh import IndexedMesh


class MeshVisualizer:
    """
    Visualization tools for simplification results.

    Provides:
    - Side-by-side mesh comparison
    - Multi-percentage comparison
    - UV layout overlay (before/after)
    """

    def __init__(self, figsize: Tuple[int, int] = (14, 7)):
        """
        Initialize visualizer.

        Args:
            figsize: Default figure size for plots
        """
        self.figsize = figsize

    def plot_mesh_comparison(self, original: IndexedMesh,
                             simplified: IndexedMesh,
                             title: str = "Mesh Comparison",
                             show_wireframe: bool = True,
                             save_path: Optional[str] = None) -> plt.Figure:
        """
        Create side-by-side comparison of original and simplified meshes.

        Args:
            original: Input mesh
            simplified: Simplified mesh
            title: Plot title
            show_wireframe: Whether to draw triangle edges
            save_path: Optional path to save the figure

        Returns:
            Matplotlib figure object
        """
        fig, axes = plt.subplots(1, 2, figsize=self.figsize,
                                 subplot_kw={'projection': '3d'})

        self._plot_single_mesh(axes[0], original,
                               f"Original\n({original.vertex_count} vertices, "
                               f"{original.face_count} faces)",
                               show_wireframe)
        self._plot_single_mesh(axes[1], simplified,
                               f"Simplified\n({simplified.vertex_count} vertices, "
                               f"{simplified.face_count} faces)",
                               show_wireframe)

        fig.suptitle(title, fontsize=14, fontweight='bold')
        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"Saved comparison to {save_path}")

        return fig

    def plot_multi_resolution(self, meshes: List[IndexedMesh],
                              labels: Optional[List[str]] = None,
                              title: str = "Simplification Sweep",
                              save_path: Optional[str] = None) -> plt.Figure:
        """
        Plot several meshes in a grid, e.g. one per removal percentage.
        """
        n = len(meshes)
        cols = min(4, max(1, n))
        rows = (n + cols - 1) // cols

        fig = plt.figure(figsize=(5 * cols, 5 * rows))

        for i, mesh in enumerate(meshes):
            ax = fig.add_subplot(rows, cols, i + 1, projection='3d')
            if labels and i < len(labels):
                label = labels[i]
            else:
                label = f"{mesh.vertex_count} vertices"
            self._plot_single_mesh(ax, mesh, label, show_wireframe=True)

        fig.suptitle(title, fontsize=14, fontweight='bold')
        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"Saved sweep plot to {save_path}")

        return fig

    def plot_uv_layout(self, original: IndexedMesh,
                       simplified: IndexedMesh,
                       title: str = "UV Layout",
                       save_path: Optional[str] = None) -> plt.Figure:
        """
        Draw the face UV triangles of both meshes in texture space.

        Raises:
            ValueError: if either mesh has no face UVs
        """
        if not original.has_uvs or not simplified.has_uvs:
            raise ValueError("Both meshes need face UVs for a UV layout plot")

        fig, axes = plt.subplots(1, 2, figsize=self.figsize)

        for ax, mesh, label in ((axes[0], original, "Original"),
                                (axes[1], simplified, "Simplified")):
            polys = PolyCollection(mesh.face_uvs, facecolors=(0.45, 0.6, 0.85, 0.3),
                                   edgecolors='black', linewidths=0.2)
            ax.add_collection(polys)
            ax.set_xlim(0, 1)
            ax.set_ylim(0, 1)
            ax.set_aspect('equal')
            ax.set_title(f"{label} ({mesh.face_count} faces)", fontsize=10)
            ax.set_xlabel('U')
            ax.set_ylabel('V')

        fig.suptitle(title, fontsize=14, fontweight='bold')
        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"Saved UV layout to {save_path}")

        return fig

    def _plot_single_mesh(self, ax, mesh: IndexedMesh, title: str, show_wireframe: bool):
        """Plot a single mesh on a 3D axis."""
        vertices = mesh.vertices
        if len(vertices) == 0:
            ax.set_title(title, fontsize=10)
            return

        # Normalize to unit cube centered at origin
        center = vertices.mean(axis=0)
        scale = np.max(np.abs(vertices - center))
        if scale <= 0:
            scale = 1.0
        triangles = ((vertices - center) / scale)[mesh.faces]

        poly = Poly3DCollection(triangles, facecolors=self._compute_face_colors(triangles),
                                edgecolors='black' if show_wireframe else 'none',
                                linewidths=0.1 if show_wireframe else 0,
                                alpha=0.9)
        ax.add_collection3d(poly)

        ax.set_xlim(-1, 1)
        ax.set_ylim(-1, 1)
        ax.set_zlim(-1, 1)
        ax.set_box_aspect([1, 1, 1])

        ax.set_title(title, fontsize=10)
        ax.set_xlabel('X')
        ax.set_ylabel('Y')
        ax.set_zlabel('Z')

    def _compute_face_colors(self, triangles: np.ndarray) -> np.ndarray:
        """Diffuse shading from face normals."""
        light_dir = np.array([1, 1, 2]) / np.linalg.norm([1, 1, 2])

        normals = np.cross(triangles[:, 1] - triangles[:, 0], triangles[:, 2] - triangles[:, 0]) \
            if len(triangles) else np.zeros((0, 3))
        lengths = np.linalg.norm(normals, axis=1, keepdims=True)
        normals = np.divide(normals, lengths, out=np.zeros_like(normals), where=lengths > 1e-10)

        intensity = np.clip(normals @ light_dir, 0.2, 1.0)

        colors = np.zeros((len(triangles), 4))
        colors[:, 0] = 0.3 + 0.4 * intensity
        colors[:, 1] = 0.4 + 0.4 * intensity
        colors[:, 2] = 0.6 + 0.3 * intensity
        colors[:, 3] = 1.0
        return colors
