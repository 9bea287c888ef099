"""
Contour Triangulation (Gmsh Adapter)
====================================
Alternative backend that lets gmsh build a constrained Delaunay mesh of the
contour as a single plane surface.

The characteristic length is set well above the contour extent so gmsh keeps
the boundary as given. Gmsh is still free to insert interior nodes, so only
area coverage is guaranteed here, not the N - 2 triangle count.

NOTE: gmsh.initialize() registers signal handlers, call from the main thread.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

import gmsh
import numpy as np

from polyscene.controller.triangulator import check_coverage, prepare_ring
from polyscene.errors import TriangulationError
from polyscene.model.geometry import Point2D, PointLike, Triangle, polygon_area

logger = logging.getLogger(__name__)

# Gmsh element type of a 3-node triangle
GMSH_TRIANGLE = 2


class GmshTriangulator:
    name = "gmsh"

    def __init__(self) -> None:
        self._initialized = False

    def _ensure_init(self) -> None:
        if not self._initialized or not gmsh.is_initialized():
            gmsh.initialize()
            gmsh.option.setNumber("General.Terminal", 0)
            self._initialized = True

    def triangulate(
        self,
        contour: Iterable[PointLike],
        holes: Optional[Sequence[Iterable[PointLike]]] = None,
    ) -> List[Triangle]:
        outer = prepare_ring(contour)
        hole_rings = [prepare_ring(h, name=f"hole {i}") for i, h in enumerate(holes or [])]

        extent = float(np.ptp(outer, axis=0).max())
        lc = 2.0 * extent

        self._ensure_init()
        gmsh.model.add("polyscene-contour")
        try:
            loop_tags = [self._add_loop(ring, lc) for ring in [outer, *hole_rings]]
            gmsh.model.geo.add_plane_surface(loop_tags)
            gmsh.model.geo.synchronize()
            gmsh.model.mesh.generate(2)

            triangles = self._collect_triangles()
        except TriangulationError:
            raise
        except Exception as e:
            # gmsh reports failures as plain Exception("...")
            raise TriangulationError(f"Gmsh failed to mesh the contour: {e}") from e
        finally:
            gmsh.model.remove()

        expected = polygon_area(outer) - sum(polygon_area(h) for h in hole_rings)
        check_coverage(triangles, expected)

        logger.info(f"Gmsh triangulated contour into {len(triangles)} triangles.")
        return triangles

    @staticmethod
    def _add_loop(ring, lc: float) -> int:
        point_tags = [gmsh.model.geo.add_point(float(x), float(y), 0.0, lc) for x, y in ring]
        n = len(point_tags)
        line_tags = [gmsh.model.geo.add_line(point_tags[i], point_tags[(i + 1) % n]) for i in range(n)]
        return gmsh.model.geo.add_curve_loop(line_tags)

    @staticmethod
    def _collect_triangles() -> List[Triangle]:
        node_tags, coords, _ = gmsh.model.mesh.get_nodes()
        coords = np.asarray(coords, dtype=np.float64).reshape(-1, 3)
        nodes: Dict[int, Point2D] = {
            int(tag): Point2D(float(c[0]), float(c[1])) for tag, c in zip(node_tags, coords)
        }

        triangles: List[Triangle] = []
        elem_types, _, elem_node_tags = gmsh.model.mesh.get_elements(dim=2)
        for etype, conn in zip(elem_types, elem_node_tags):
            if etype != GMSH_TRIANGLE:
                raise TriangulationError(f"Gmsh returned element type {etype}, expected triangles.")
            for a, b, c in np.asarray(conn, dtype=np.int64).reshape(-1, 3):
                triangles.append(Triangle(nodes[int(a)], nodes[int(b)], nodes[int(c)]))
        return triangles
