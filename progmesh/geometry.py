"""
Geometry Helpers
================

Small numerical building blocks shared by the cost evaluator, the UV
heuristic and the simplifier: triangle normals, edge lengths
and the bounding sphere used to normalise displacements.
"""

import numpy as np
from typing import Tuple


# Below this length a cross product is treated as a zero-area triangle
DEGENERATE_EPSILON = 1e-12


def face_normal(v0: np.ndarray, v1: np.ndarray, v2: np.ndarray) -> np.ndarray:
    """
    Compute the unit normal of a triangle.

    The normal is ``(v2 - v1) x (v0 - v1)`` normalised, which matches
    counter-clockwise winding for ``(v0, v1, v2)``.

    Args:
        v0, v1, v2: Triangle corner positions

    Returns:
        Unit normal, or the zero vector for a zero-area triangle
    """
    normal = np.cross(v2 - v1, v0 - v1)
    norm_length = np.linalg.norm(normal)

    if not np.isfinite(norm_length) or norm_length < DEGENERATE_EPSILON:
        # Degenerate triangle
        return np.zeros(3)

    return normal / norm_length


def edge_length(a: np.ndarray, b: np.ndarray) -> float:
    """Euclidean distance between two points."""
    return float(np.linalg.norm(b - a))


def bounding_sphere(points: np.ndarray) -> Tuple[np.ndarray, float]:
    """
    Compute a bounding sphere for a point set.

    The sphere is centred on the axis-aligned bounding box and its radius
    is the largest distance from that centre, which is a close and stable
    approximation of the minimal enclosing sphere.

    Args:
        points: (N, 3) array of positions

    Returns:
        Tuple of (center, radius); an empty set gives a zero sphere
    """
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    if len(points) == 0:
        return np.zeros(3), 0.0

    center = (points.min(axis=0) + points.max(axis=0)) / 2
    radius = float(np.max(np.linalg.norm(points - center, axis=1)))
    return center, radius
