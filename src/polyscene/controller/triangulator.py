"""
Contour Triangulation (VTK Adapter)
===================================
Turns a closed 2D contour into triangles covering its interior.

Why is this file needed?
------------------------
1. Delegation: The triangulation itself is done by vtkContourTriangulator.
   This module only converts points in and triangles out.
2. Validation: The library does not complain about bad contours, it quietly
   returns garbage. Contours are checked before the call and the output is
   checked against the polygon area after it.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Protocol, Sequence, TYPE_CHECKING

import numpy as np
import pyvista as pv
from vtkmodules.vtkFiltersGeneral import vtkContourTriangulator

from polyscene.errors import InvalidContourError, TriangulationError
from polyscene.model.geometry import (
    Point2D, PointLike, Triangle, as_xy_array, is_simple_polygon, open_ring, polygon_area
)

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

# Relative tolerance for "triangles cover the polygon"
AREA_RTOL: float = 1e-6


class Triangulator(Protocol):
    """Sequence of Point2D -> triangles covering the polygon interior."""
    def triangulate(
        self,
        contour: Iterable[PointLike],
        holes: Optional[Sequence[Iterable[PointLike]]] = None,
    ) -> List[Triangle]: ...


def prepare_ring(contour: Iterable[PointLike], name: str = "contour") -> npt.NDArray[np.float64]:
    """
    Converts a contour to an open (N, 2) ring and checks the precondition.

    Raises:
        InvalidContourError: Fewer than 3 distinct points, zero area or
            self-intersecting edges.
    """
    try:
        ring = open_ring(as_xy_array(contour))
    except (ValueError, TypeError, KeyError, IndexError) as e:
        raise InvalidContourError(f"Cannot read {name} points: {e}") from e

    if len(ring) < 3:
        raise InvalidContourError(f"The {name} needs at least 3 distinct points, got {len(ring)}.")
    if not np.all(np.isfinite(ring)):
        raise InvalidContourError(f"The {name} contains non-finite coordinates.")
    if polygon_area(ring) <= 0.0:
        raise InvalidContourError(f"The {name} encloses no area.")
    if not is_simple_polygon(ring):
        raise InvalidContourError(f"The {name} is self-intersecting.")
    return ring


def check_coverage(triangles: List[Triangle], expected_area: float) -> None:
    """Raises TriangulationError if the triangles do not cover the expected area."""
    if not triangles:
        raise TriangulationError("Triangulation produced no triangles.")
    covered = sum(t.area for t in triangles)
    if not np.isclose(covered, expected_area, rtol=AREA_RTOL, atol=1e-9):
        raise TriangulationError(
            f"Triangles cover {covered:.6g}, polygon area is {expected_area:.6g}."
        )


def rings_to_polydata(rings: List[npt.NDArray[np.float64]]) -> pv.PolyData:
    """Closed polylines on Z=0, one line cell per ring (closed by index)."""
    pts3_list: list[npt.NDArray[np.float64]] = []
    cells_list: list[npt.NDArray[np.int_]] = []
    offset = 0

    for ring in rings:
        n = ring.shape[0]
        pts3_list.append(np.c_[ring, np.zeros((n, 1), dtype=np.float64)])
        # polyline cell: [n + 1, id0, ..., id(n-1), id0]
        ids = np.arange(offset, offset + n, dtype=np.int_)
        cells_list.append(np.hstack([[n + 1], ids, [offset]]))
        offset += n

    pd = pv.PolyData(np.vstack(pts3_list))
    pd.verts = np.empty(0, dtype=np.int_)  # only the polylines go in
    pd.lines = np.concatenate(cells_list).astype(np.int_)
    return pd


class VtkTriangulator:
    """Triangulator backed by vtkContourTriangulator."""

    name = "vtk"

    def triangulate(
        self,
        contour: Iterable[PointLike],
        holes: Optional[Sequence[Iterable[PointLike]]] = None,
    ) -> List[Triangle]:
        outer = prepare_ring(contour)
        hole_rings = [prepare_ring(h, name=f"hole {i}") for i, h in enumerate(holes or [])]

        logger.debug(f"Triangulating contour with {len(outer)} points and {len(hole_rings)} holes.")

        tri = vtkContourTriangulator()
        tri.SetInputData(rings_to_polydata([outer, *hole_rings]))
        tri.Update()
        out = pv.wrap(tri.GetOutput())

        triangles = self._collect_triangles(out)

        expected = polygon_area(outer) - sum(polygon_area(h) for h in hole_rings)
        check_coverage(triangles, expected)

        logger.info(f"Triangulated contour into {len(triangles)} triangles.")
        return triangles

    @staticmethod
    def _collect_triangles(out: pv.PolyData) -> List[Triangle]:
        if out is None or out.n_cells == 0:
            return []

        cells = np.asarray(out.faces).reshape(-1, 4)
        if not np.all(cells[:, 0] == 3):
            raise TriangulationError("Triangulation returned non-triangular cells.")

        xy = np.asarray(out.points)[:, :2]
        triangles: List[Triangle] = []
        for _, i, j, k in cells:
            triangles.append(Triangle(
                Point2D(float(xy[i, 0]), float(xy[i, 1])),
                Point2D(float(xy[j, 0]), float(xy[j, 1])),
                Point2D(float(xy[k, 0]), float(xy[k, 1])),
            ))
        return triangles


def make_triangulator(name: str = "vtk") -> Triangulator:
    """
    Returns a triangulator backend by name ("vtk" or "gmsh").

    Raises:
        ValueError: Unknown backend name.
    """
    key = name.strip().lower()
    if key == "vtk":
        return VtkTriangulator()
    if key == "gmsh":
        # gmsh is heavy and registers signal handlers on init, import on demand
        from polyscene.controller.gmsh_triangulator import GmshTriangulator
        return GmshTriangulator()
    raise ValueError(f"Unknown triangulator backend '{name}'. Use 'vtk' or 'gmsh'.")
