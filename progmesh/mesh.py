"""
Mesh Containers
===============

Plain array containers exchanged with callers, and the conversions
between the non-indexed triangle buffer layout and the indexed
vertex/face layout the simplifier works on.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional
import trimesh


@dataclass
class IndexedMesh:
    """
    Indexed triangle mesh.

    Attributes:
        vertices: (N, 3) float array of positions
        faces: (M, 3) int array of vertex indices
        face_uvs: Optional (M, 3, 2) float array, one UV per face corner
        material_indices: Optional (M,) int array
        name: Free-form mesh name carried through simplification
    """
    vertices: np.ndarray
    faces: np.ndarray
    face_uvs: Optional[np.ndarray] = None
    material_indices: Optional[np.ndarray] = None
    name: str = ""

    def __post_init__(self):
        self.vertices = np.asarray(self.vertices, dtype=np.float64).reshape(-1, 3)
        self.faces = np.asarray(self.faces, dtype=np.int64).reshape(-1, 3)

        if self.face_uvs is not None:
            self.face_uvs = np.asarray(self.face_uvs, dtype=np.float64).reshape(-1, 3, 2)
            if len(self.face_uvs) != len(self.faces):
                raise ValueError(
                    f"Expected {len(self.faces)} face UV triples, got {len(self.face_uvs)}"
                )

        if self.material_indices is not None:
            self.material_indices = np.asarray(self.material_indices, dtype=np.int64).reshape(-1)
            if len(self.material_indices) != len(self.faces):
                raise ValueError(
                    f"Expected {len(self.faces)} material indices, got {len(self.material_indices)}"
                )

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def face_count(self) -> int:
        return len(self.faces)

    @property
    def has_uvs(self) -> bool:
        return self.face_uvs is not None

    def copy(self) -> "IndexedMesh":
        return IndexedMesh(
            vertices=self.vertices.copy(),
            faces=self.faces.copy(),
            face_uvs=None if self.face_uvs is None else self.face_uvs.copy(),
            material_indices=None if self.material_indices is None else self.material_indices.copy(),
            name=self.name,
        )

    def surface_area(self) -> float:
        """Total area of all triangles."""
        if len(self.faces) == 0:
            return 0.0
        return float(self.to_trimesh(with_uvs=False).area)

    def merge_vertices(self, decimals: int = 4) -> "IndexedMesh":
        """
        Merge vertices sharing a position and drop collapsed triangles.

        Positions are compared after rounding to ``decimals`` places.
        Surviving vertices keep the order of their first occurrence.
        Triangles whose corners merge together are removed along with
        their UVs and material indices.

        Returns:
            New merged mesh
        """
        if len(self.vertices) == 0:
            return self.copy()

        keys = np.round(self.vertices, decimals)
        _, first, inverse = np.unique(keys, axis=0, return_index=True, return_inverse=True)
        inverse = inverse.reshape(-1)

        # Renumber unique rows by first occurrence
        order = np.argsort(first)
        rank = np.empty_like(order)
        rank[order] = np.arange(len(order))

        vertices = self.vertices[first[order]]
        faces = rank[inverse][self.faces] if len(self.faces) else self.faces.copy()

        keep = (
            (faces[:, 0] != faces[:, 1]) &
            (faces[:, 1] != faces[:, 2]) &
            (faces[:, 0] != faces[:, 2])
        )

        return IndexedMesh(
            vertices=vertices,
            faces=faces[keep],
            face_uvs=None if self.face_uvs is None else self.face_uvs[keep],
            material_indices=None if self.material_indices is None else self.material_indices[keep],
            name=self.name,
        )

    def vertex_normals(self) -> np.ndarray:
        """Area weighted per-vertex normals computed by trimesh."""
        if len(self.faces) == 0:
            return np.zeros_like(self.vertices)
        return np.asarray(self.to_trimesh(with_uvs=False).vertex_normals)

    def to_trimesh(self, with_uvs: bool = True) -> trimesh.Trimesh:
        """
        Convert to a trimesh object.

        trimesh stores UVs per vertex, so a mesh with face UVs is unwelded
        into one vertex per face corner and then welded again wherever
        corners share both position and UV. Seams stay split.
        """
        if with_uvs and self.face_uvs is not None:
            corners = self.vertices[self.faces].reshape(-1, 3)
            faces = np.arange(len(corners)).reshape(-1, 3)
            visual = trimesh.visual.TextureVisuals(uv=self.face_uvs.reshape(-1, 2))
            mesh = trimesh.Trimesh(vertices=corners, faces=faces, visual=visual, process=False)
            mesh.merge_vertices(merge_tex=False)
            return mesh

        return trimesh.Trimesh(vertices=self.vertices, faces=self.faces, process=False)

    @classmethod
    def from_trimesh(cls, mesh: trimesh.Trimesh, name: str = "") -> "IndexedMesh":
        """
        Build from a trimesh object, lifting per-vertex UVs to face UVs.
        """
        faces = np.asarray(mesh.faces, dtype=np.int64)
        face_uvs = None

        uv = getattr(mesh.visual, "uv", None)
        if uv is not None and len(uv) == len(mesh.vertices):
            face_uvs = np.asarray(uv, dtype=np.float64)[faces]

        return cls(
            vertices=np.asarray(mesh.vertices, dtype=np.float64),
            faces=faces,
            face_uvs=face_uvs,
            name=name,
        )


@dataclass
class TriangleSoup:
    """
    Non-indexed triangle buffer: every three consecutive rows form a face.

    Attributes:
        positions: (3M, 3) float array
        uvs: Optional (3M, 2) float array
        normals: Optional (3M, 3) float array
        material_indices: Optional (M,) int array
        name: Free-form mesh name
    """
    positions: np.ndarray
    uvs: Optional[np.ndarray] = None
    normals: Optional[np.ndarray] = None
    material_indices: Optional[np.ndarray] = None
    name: str = ""

    def __post_init__(self):
        self.positions = np.asarray(self.positions, dtype=np.float64).reshape(-1, 3)
        if len(self.positions) % 3 != 0:
            raise ValueError(
                f"Position count must be a multiple of 3, got {len(self.positions)}"
            )
        if self.uvs is not None:
            self.uvs = np.asarray(self.uvs, dtype=np.float64).reshape(-1, 2)
            if len(self.uvs) != len(self.positions):
                raise ValueError("UV buffer length must match position buffer length")
        if self.normals is not None:
            self.normals = np.asarray(self.normals, dtype=np.float64).reshape(-1, 3)
        if self.material_indices is not None:
            self.material_indices = np.asarray(self.material_indices, dtype=np.int64).reshape(-1)

    @property
    def position_count(self) -> int:
        return len(self.positions)

    @property
    def face_count(self) -> int:
        return len(self.positions) // 3


def to_indexed_mesh(soup: TriangleSoup, decimals: int = 4) -> IndexedMesh:
    """
    Convert a triangle buffer into an indexed mesh.

    Corners sharing a position (after rounding to ``decimals`` places)
    become a single vertex. UVs stay attached to their face corner.

    Args:
        soup: Non-indexed triangle buffer
        decimals: Rounding used when welding positions

    Returns:
        Indexed mesh with welded vertices
    """
    corner_faces = np.arange(soup.position_count, dtype=np.int64).reshape(-1, 3)
    unwelded = IndexedMesh(
        vertices=soup.positions,
        faces=corner_faces,
        face_uvs=None if soup.uvs is None else soup.uvs.reshape(-1, 3, 2),
        material_indices=soup.material_indices,
        name=soup.name,
    )
    return unwelded.merge_vertices(decimals=decimals)


def from_indexed_mesh(mesh: IndexedMesh) -> TriangleSoup:
    """
    Convert an indexed mesh back into a triangle buffer.

    Vertex normals are recomputed on the indexed mesh so that shading
    stays smooth across shared vertices after unwelding.
    """
    normals = mesh.vertex_normals()

    return TriangleSoup(
        positions=mesh.vertices[mesh.faces].reshape(-1, 3),
        uvs=None if mesh.face_uvs is None else mesh.face_uvs.reshape(-1, 2),
        normals=normals[mesh.faces].reshape(-1, 3),
        material_indices=mesh.material_indices,
        name=mesh.name,
    )
