"""
Planar UV Mapping
Projects texture coordinates onto the flat mesh from its bounding box.
"""
from __future__ import annotations

import logging

import numpy as np

from polyscene.model.mesh import Mesh

logger = logging.getLogger(__name__)

# World axes used for the projection: U follows X, V follows Z (ground plane depth)
U_AXIS: int = 0
V_AXIS: int = 2


def _normalizer(lo: float, size: float, axis_name: str, clamp_degenerate: bool):
    if size <= 0.0 and clamp_degenerate:
        logger.warning(f"Mesh has no extent along {axis_name}, clamping texture coordinate to 0.")
        return lambda c: np.zeros_like(c)
    # size == 0 without clamping yields NaN, same as the unguarded projection
    return lambda c: (c - lo) / size


def assign_uvs(mesh: Mesh, clamp_degenerate: bool = True) -> Mesh:
    """
    Fills `mesh.face_vertex_uvs` (in place) with a planar projection.

    U is the vertex X normalized over the bounding box, V is the inverted
    normalized Z, so V grows opposite to world depth (image rows, top-left origin).

    Args:
        mesh: Mesh to map.
        clamp_degenerate: If the box is flat along an axis, emit 0.0 on that
            axis instead of NaN.

    Returns:
        The same mesh, for chaining.
    """
    if mesh.n_faces == 0:
        mesh.face_vertex_uvs = np.empty((0, 3, 2), dtype=np.float64)
        return mesh

    box_min, box_max = mesh.bounds()
    size = box_max - box_min

    corners = mesh.vertices[mesh.faces]  # (M, 3, 3)

    to_u = _normalizer(box_min[U_AXIS], size[U_AXIS], "X", clamp_degenerate)
    # inverted: measure from the far edge
    to_v = _normalizer(-box_max[V_AXIS], size[V_AXIS], "Z", clamp_degenerate)

    with np.errstate(divide="ignore", invalid="ignore"):
        u = to_u(corners[:, :, U_AXIS])
        v = to_v(-corners[:, :, V_AXIS])

    mesh.face_vertex_uvs = np.stack([u, v], axis=-1).astype(np.float64)
    return mesh
