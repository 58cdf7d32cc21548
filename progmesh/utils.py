"""
Utility Functions
=================

Mesh loading, saving and sample mesh creation utilities.
"""

from pathlib import Path
from typing import Union
import numpy as np
import trimesh

from .mesh import IndexedMesh


def load_mesh(path: Union[str, Path]) -> IndexedMesh:
    """
    Load a mesh from file.

    Supports: OBJ, PLY, STL, OFF, GLB and other formats supported by trimesh.
    Scenes are concatenated into a single mesh. Per-vertex UVs, when the
    file has them, become face UV triples.

    Args:
        path: Path to mesh file

    Returns:
        Loaded indexed mesh
    """
    mesh = trimesh.load(str(path), force='mesh', process=False)

    if isinstance(mesh, trimesh.Scene):
        # Convert scene to single mesh
        meshes = [g for g in mesh.geometry.values() if isinstance(g, trimesh.Trimesh)]
        if not meshes:
            raise ValueError(f"No valid meshes found in {path}")
        mesh = trimesh.util.concatenate(meshes)

    return IndexedMesh.from_trimesh(mesh, name=Path(path).stem)


def save_mesh(mesh: IndexedMesh, path: Union[str, Path]):
    """
    Save a mesh to file.

    Args:
        mesh: Mesh to save
        path: Output path, format chosen from the extension
    """
    mesh.to_trimesh().export(str(path))
    print(f"Saved mesh to: {path}")


def create_grid_mesh(rows: int = 10, cols: int = 10,
                     spacing: float = 1.0,
                     wave: float = 0.0,
                     with_uvs: bool = False) -> IndexedMesh:
    """
    Create an open rectangular grid, two triangles per cell.

    Args:
        rows: Number of vertex rows
        cols: Number of vertex columns
        spacing: Distance between adjacent grid vertices
        wave: Amplitude of a sine/cosine height field (0 = flat)
        with_uvs: Map the grid onto the unit UV square

    Returns:
        Open surface mesh with ``rows * cols`` vertices
    """
    x = np.arange(cols) * spacing
    y = np.arange(rows) * spacing
    X, Y = np.meshgrid(x, y)

    Z = np.zeros_like(X)
    if wave:
        Z = wave * np.sin(3 * X / max(x[-1], 1e-9)) * np.cos(3 * Y / max(y[-1], 1e-9))

    vertices = np.column_stack([X.flatten(), Y.flatten(), Z.flatten()])

    faces = []
    for i in range(rows - 1):
        for j in range(cols - 1):
            idx = i * cols + j
            faces.append([idx, idx + 1, idx + cols])
            faces.append([idx + 1, idx + cols + 1, idx + cols])
    faces = np.array(faces, dtype=np.int64).reshape(-1, 3)

    face_uvs = None
    if with_uvs:
        U, V = np.meshgrid(np.linspace(0, 1, cols), np.linspace(0, 1, rows))
        vertex_uvs = np.column_stack([U.flatten(), V.flatten()])
        face_uvs = vertex_uvs[faces]

    return IndexedMesh(vertices=vertices, faces=faces, face_uvs=face_uvs, name="grid")


def create_sample_mesh(mesh_type: str = "sphere") -> IndexedMesh:
    """
    Create a sample mesh for testing.

    Args:
        mesh_type: Type of mesh to create:
            - "sphere": Icosphere
            - "torus": Torus
            - "cylinder": Cylinder
            - "grid": Wavy open grid with UVs

    Returns:
        Generated indexed mesh
    """
    if mesh_type == "grid":
        mesh = create_grid_mesh(rows=30, cols=30, spacing=1.0 / 29, wave=0.1, with_uvs=True)
    else:
        if mesh_type == "torus":
            tm = trimesh.creation.torus(major_radius=1.0, minor_radius=0.3,
                                        major_sections=48, minor_sections=24)
        elif mesh_type == "cylinder":
            tm = trimesh.creation.cylinder(radius=0.5, height=2.0, sections=48)
        else:
            # Default to sphere
            tm = trimesh.creation.icosphere(subdivisions=3, radius=1.0)
        mesh = IndexedMesh.from_trimesh(tm, name=mesh_type)

    print(f"Created {mesh_type} mesh: {mesh.vertex_count} vertices, {mesh.face_count} faces")
    return mesh


def get_mesh_info(mesh: IndexedMesh) -> dict:
    """
    Get basic information about a mesh.

    Args:
        mesh: Input mesh

    Returns:
        Dictionary of mesh properties
    """
    edge_count = {}
    for face in mesh.faces:
        for i in range(3):
            edge = tuple(sorted([int(face[i]), int(face[(i + 1) % 3])]))
            edge_count[edge] = edge_count.get(edge, 0) + 1

    referenced = np.unique(mesh.faces) if mesh.face_count else np.zeros(0, dtype=np.int64)

    return {
        'vertices': mesh.vertex_count,
        'faces': mesh.face_count,
        'edges': len(edge_count),
        'boundary_edges': sum(1 for count in edge_count.values() if count == 1),
        'isolated_vertices': mesh.vertex_count - len(referenced),
        'has_uvs': mesh.has_uvs,
        'area': mesh.surface_area(),
    }


def print_mesh_info(mesh: IndexedMesh, name: str = "Mesh"):
    """
    Print mesh information to console.

    Args:
        mesh: Input mesh
        name: Name to display
    """
    info = get_mesh_info(mesh)

    print(f"\n{name} Information:")
    print("-" * 40)
    print(f"  Vertices:          {info['vertices']}")
    print(f"  Faces:             {info['faces']}")
    print(f"  Edges:             {info['edges']}")
    print(f"  Boundary Edges:    {info['boundary_edges']}")
    print(f"  Isolated Vertices: {info['isolated_vertices']}")
    print(f"  UVs:               {info['has_uvs']}")
    print(f"  Surface Area:      {info['area']:.6f}")
