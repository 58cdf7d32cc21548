"""
UV Preservation
===============

Texture coordinate correction applied to the faces of a collapsing
vertex. The corner UV of the removed vertex is moved to the UV of the
vertex it collapses onto, unless the texture-space shift and the
geometric shift disagree by more than a tolerance.
"""

import numpy as np

from .geometry import edge_length


DEFAULT_UV_TOLERANCE = 5.0


def vertex_shift_percentage(u_position: np.ndarray, v_position: np.ndarray,
                            sphere_radius: float) -> float:
    """
    Geometric displacement of a collapse as a percentage of model size.

    Model size is the bounding sphere diameter. A zero-size model gives 0.
    """
    size = sphere_radius * 2
    if size <= 0:
        return 0.0
    return 100.0 * edge_length(u_position, v_position) / size


def texture_shift_percentage(source_uv: np.ndarray, target_uv: np.ndarray) -> float:
    """Largest per-axis UV displacement, in percent of the unit UV square."""
    delta = np.abs(100.0 * (np.asarray(target_uv) - np.asarray(source_uv)))
    return float(np.max(delta))


def apply_uv_correction(corner_uv: np.ndarray, target_uv: np.ndarray,
                        vertex_shift: float,
                        tolerance: float = DEFAULT_UV_TOLERANCE) -> bool:
    """
    Overwrite ``corner_uv`` in place with ``target_uv`` when plausible.

    Args:
        corner_uv: (2,) UV row owned by a triangle, modified in place
        target_uv: (2,) UV to move to
        vertex_shift: Geometric shift percentage of the collapse
        tolerance: Maximum allowed gap between texture and vertex shift

    Returns:
        True if the UV was overwritten, False if the safety check skipped it
    """
    texture_shift = texture_shift_percentage(corner_uv, target_uv)

    # Texture moving much further than the geometry means the faces
    # are on different UV islands
    if abs(texture_shift - vertex_shift) > tolerance:
        return False

    corner_uv[:] = target_uv
    return True
