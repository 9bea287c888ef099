"""
Mesh Builder
Converts triangulator output into an indexed mesh in the ground plane.
"""
from __future__ import annotations

import logging
from typing import Iterable

from polyscene.model.geometry import GROUND_ELEVATION, Triangle
from polyscene.model.mesh import DEFAULT_MERGE_PRECISION, Mesh

logger = logging.getLogger(__name__)


def build_mesh(
    triangles: Iterable[Triangle],
    precision: int = DEFAULT_MERGE_PRECISION,
    elevation: float = GROUND_ELEVATION,
) -> Mesh:
    """
    Appends every triangle as three fresh vertices plus one face, then merges
    coincident vertices in a single final pass so neighbouring triangles share
    their edges.

    Args:
        triangles: Triangles in the ground plane.
        precision: Decimal places under which two vertices count as one.
        elevation: World Y of the ground plane.

    Returns:
        The deduplicated mesh. No triangles gives an empty mesh.
    """
    corners = [[p.to_array() for p in tri.lift(elevation)] for tri in triangles]
    mesh = Mesh.from_corners(corners)

    appended = mesh.n_vertices
    mesh.merge_vertices(precision=precision)
    logger.info(f"Built mesh: {mesh.n_faces} faces, {mesh.n_vertices} vertices ({appended} before merge).")
    return mesh
