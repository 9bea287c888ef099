"""
Indexed Triangle Mesh
=====================
The renderable mesh: a vertex buffer, a face list indexed into it, and an
optional per-face-vertex texture coordinate array.

Exports:
    Mesh: The container with vertex deduplication and PyVista export.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, TYPE_CHECKING

import numpy as np
import pyvista as pv

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

# Decimal places used to decide that two vertices coincide
DEFAULT_MERGE_PRECISION: int = 4


def _empty_vertices() -> npt.NDArray[np.float64]:
    return np.empty((0, 3), dtype=np.float64)


def _empty_faces() -> npt.NDArray[np.int64]:
    return np.empty((0, 3), dtype=np.int64)


@dataclass
class Mesh:
    """
    Indexed triangle mesh.

    Attributes:
        vertices: (N, 3) world positions.
        faces: (M, 3) vertex indices per triangle.
        face_vertex_uvs: (M, 3, 2) texture coordinates per face corner, or None
            before the UV mapper ran.
    """
    vertices: npt.NDArray[np.float64] = field(default_factory=_empty_vertices)
    faces: npt.NDArray[np.int64] = field(default_factory=_empty_faces)
    face_vertex_uvs: Optional[npt.NDArray[np.float64]] = None

    @property
    def n_vertices(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def n_faces(self) -> int:
        return int(self.faces.shape[0])

    @property
    def is_empty(self) -> bool:
        return self.n_faces == 0

    @classmethod
    def from_corners(cls, corners) -> Mesh:
        """
        Builds an unshared mesh from an (M, 3, 3) array of triangle corners:
        three fresh vertices and one face per triangle.
        """
        arr = np.asarray(corners, dtype=np.float64)
        if arr.size == 0:
            return cls()
        if arr.ndim != 3 or arr.shape[1:] != (3, 3):
            raise ValueError(f"Expected triangle corners of shape (M, 3, 3), got {arr.shape}.")
        n_faces = arr.shape[0]
        return cls(
            vertices=arr.reshape(-1, 3).copy(),
            faces=np.arange(n_faces * 3, dtype=np.int64).reshape(n_faces, 3),
        )

    def append_triangle(self, v1, v2, v3) -> int:
        """
        Appends three new vertices and a face referencing them.
        Returns the index of the new face.

        Copies the buffers on every call, use `from_corners` for bulk input.
        """
        start = self.n_vertices
        self.vertices = np.vstack([self.vertices, np.asarray([v1, v2, v3], dtype=np.float64)])
        self.faces = np.vstack([self.faces, np.array([[start, start + 1, start + 2]], dtype=np.int64)])
        return self.n_faces - 1

    def indices_valid(self) -> bool:
        """True if every face index points into the vertex buffer."""
        if self.n_faces == 0:
            return True
        return bool(self.faces.min() >= 0 and self.faces.max() < self.n_vertices)

    def bounds(self) -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Axis-aligned bounding box as (min, max)."""
        if self.n_vertices == 0:
            zeros = np.zeros(3, dtype=np.float64)
            return zeros, zeros.copy()
        return self.vertices.min(axis=0), self.vertices.max(axis=0)

    def merge_vertices(self, precision: int = DEFAULT_MERGE_PRECISION) -> int:
        """
        Merges vertices that coincide after rounding to `precision` decimals.

        Two vertices merge only if they round to the same key, so points closer
        than the tolerance but on opposite sides of a rounding boundary
        (0.00004 and 0.00006 at 4 decimals) stay separate.

        Face indices are rewritten to the first occurrence, unused vertices are
        dropped and faces that collapsed (two equal corners) are removed along
        with their UVs.

        Returns:
            Number of vertices removed.
        """
        if self.n_vertices == 0:
            return 0

        # Same trick as a point cache: rounded coordinates act as the key
        lookup: Dict[Tuple[float, float, float], int] = {}
        remap = np.empty(self.n_vertices, dtype=np.int64)
        unique: list[int] = []

        for i, v in enumerate(self.vertices):
            key = (round(float(v[0]), precision), round(float(v[1]), precision), round(float(v[2]), precision))
            if key in lookup:
                remap[i] = lookup[key]
            else:
                lookup[key] = len(unique)
                remap[i] = len(unique)
                unique.append(i)

        n_before = self.n_vertices
        vertices = self.vertices[unique]
        faces = remap[self.faces] if self.n_faces else self.faces

        if self.n_faces:
            keep = (faces[:, 0] != faces[:, 1]) & (faces[:, 1] != faces[:, 2]) & (faces[:, 0] != faces[:, 2])
            if not keep.all():
                logger.debug(f"Dropping {int((~keep).sum())} degenerate faces after merge.")
                faces = faces[keep]
                if self.face_vertex_uvs is not None:
                    self.face_vertex_uvs = self.face_vertex_uvs[keep]

            # Vertices only referenced by dropped faces go as well
            used = np.unique(faces)
            if len(used) < len(vertices):
                compact = np.full(len(vertices), -1, dtype=np.int64)
                compact[used] = np.arange(len(used), dtype=np.int64)
                vertices = vertices[used]
                faces = compact[faces]

        self.vertices = vertices
        self.faces = faces.reshape(-1, 3).astype(np.int64)

        removed = n_before - self.n_vertices
        if removed:
            logger.debug(f"Merged {removed} duplicate vertices, {self.n_vertices} remain.")
        return removed

    def point_uvs(self) -> Optional[npt.NDArray[np.float64]]:
        """
        Collapses face-vertex UVs into one UV per vertex (last write wins).
        The planar projection assigns the same UV to a vertex in every face.
        """
        if self.face_vertex_uvs is None:
            return None
        uvs = np.zeros((self.n_vertices, 2), dtype=np.float64)
        if self.n_faces:
            uvs[self.faces.reshape(-1)] = self.face_vertex_uvs.reshape(-1, 2)
        return uvs

    def to_polydata(self) -> pv.PolyData:
        """Converts to a PyVista PolyData with texture coordinates when available."""
        if self.n_faces == 0:
            return pv.PolyData()

        cells = np.hstack([np.full((self.n_faces, 1), 3, dtype=np.int64), self.faces]).ravel()
        pd = pv.PolyData(self.vertices.copy(), faces=cells)

        uvs = self.point_uvs()
        if uvs is not None:
            pd.active_texture_coordinates = uvs
        return pd
