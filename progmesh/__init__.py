"""
Progressive Mesh Simplification
===============================

A Python implementation of greedy edge-collapse mesh reduction in the
style of Stan Melax's "A Simple, Fast, and Effective Polygon Reduction
Algorithm" (Game Developer, 1998), with curvature and border aware
collapse costs and optional UV preservation.
"""

from .mesh import IndexedMesh, TriangleSoup, to_indexed_mesh, from_indexed_mesh
from .graph import MeshGraph, Vertex, Triangle, DegenerateGeometryError
from .adapter import MeshTooSmallError, build, serialize
from .simplifier import MeshSimplifier, SimplificationCancelled, simplify
from .evaluation import MeshEvaluator
from .visualization import MeshVisualizer

__version__ = "1.0.0"
__all__ = [
    "IndexedMesh",
    "TriangleSoup",
    "to_indexed_mesh",
    "from_indexed_mesh",
    "MeshGraph",
    "Vertex",
    "Triangle",
    "DegenerateGeometryError",
    "MeshTooSmallError",
    "build",
    "serialize",
    "MeshSimplifier",
    "SimplificationCancelled",
    "simplify",
    "MeshEvaluator",
    "MeshVisualizer",
]
