"""
Geometric Primitives for the ground plane and the 3D scene.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple, Union, TYPE_CHECKING
import math

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

# Elevation of the ground plane (world Y, "up")
GROUND_ELEVATION: float = 0.0


@dataclass(frozen=True)
class Point2D:
    """A contour vertex in the ground plane."""
    x: float
    y: float

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y], dtype=np.float64)

    def lift(self, elevation: float = GROUND_ELEVATION) -> Point3D:
        """
        Lifts the point into the 3D scene.
        Ground plane X -> world X, ground plane Y -> world Z, elevation -> world Y.
        """
        return Point3D(self.x, elevation, self.y)

    def distance_to(self, other: Point2D) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class Point3D:
    """A point in 3D world space (Y up)."""
    x: float
    y: float
    z: float

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y, self.z], dtype=np.float64)


@dataclass(frozen=True)
class Triangle:
    """Three corner points, as produced by the triangulator."""
    a: Point2D
    b: Point2D
    c: Point2D

    @property
    def points(self) -> Tuple[Point2D, Point2D, Point2D]:
        return self.a, self.b, self.c

    @property
    def area(self) -> float:
        """Unsigned area, from edge vectors relative to `a`."""
        return abs(
            (self.b.x - self.a.x) * (self.c.y - self.a.y)
            - (self.c.x - self.a.x) * (self.b.y - self.a.y)
        ) / 2.0

    def lift(self, elevation: float = GROUND_ELEVATION) -> Tuple[Point3D, Point3D, Point3D]:
        return self.a.lift(elevation), self.b.lift(elevation), self.c.lift(elevation)


PointLike = Union[Point2D, Sequence[float]]


def as_point2d(p: PointLike) -> Point2D:
    if isinstance(p, Point2D):
        return p
    if isinstance(p, dict):
        return Point2D(float(p["x"]), float(p["y"]))
    x, y = p[0], p[1]
    return Point2D(float(x), float(y))


def as_xy_array(points: Iterable[PointLike]) -> npt.NDArray[np.float64]:
    """
    Converts Point2D objects, dicts or (x, y) pairs into an (N, 2) array.

    Raises:
        ValueError: If the input cannot be read as (N, 2).
    """
    arr = np.array([as_point2d(p).to_array() for p in points], dtype=np.float64)
    if arr.size == 0:
        return np.empty((0, 2), dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f"Expected shape (N, 2), got {arr.shape}.")
    return arr


def lift_points(points: Iterable[PointLike], elevation: float = GROUND_ELEVATION) -> npt.NDArray[np.float64]:
    """(N, 2) ground plane points -> (N, 3) world points (x, elevation, y)."""
    xy = as_xy_array(points)
    out = np.empty((len(xy), 3), dtype=np.float64)
    out[:, 0] = xy[:, 0]
    out[:, 1] = elevation
    out[:, 2] = xy[:, 1]
    return out


def open_ring(points: npt.NDArray[np.float64], tol: float = 1e-9) -> npt.NDArray[np.float64]:
    """
    Removes consecutive duplicates and the explicit closing point, if any.
    The contour is implicitly closed (last point connects to first).
    """
    if len(points) < 2:
        return points

    dist = np.linalg.norm(points[1:] - points[:-1], axis=1)
    cleaned = points[np.concatenate(([True], dist > tol))]

    while len(cleaned) > 1 and np.linalg.norm(cleaned[-1] - cleaned[0]) <= tol:
        cleaned = cleaned[:-1]

    return cleaned


def polygon_area(ring: npt.NDArray[np.float64]) -> float:
    """Unsigned shoelace area of an implicitly closed ring."""
    if len(ring) < 3:
        return 0.0
    # Relative to the first vertex, large absolute coordinates would cancel out
    local = ring - ring[0]
    x, y = local[:, 0], local[:, 1]
    return abs(float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))) / 2.0


def _orientation(p: npt.NDArray[np.float64], q: npt.NDArray[np.float64], r: npt.NDArray[np.float64]) -> float:
    return float((q[0] - p[0]) * (r[1] - p[1]) - (q[1] - p[1]) * (r[0] - p[0]))


def _on_segment(p, q, r, tol: float) -> bool:
    """True if r lies on segment pq (assuming collinearity)."""
    return (
        min(p[0], q[0]) - tol <= r[0] <= max(p[0], q[0]) + tol
        and min(p[1], q[1]) - tol <= r[1] <= max(p[1], q[1]) + tol
    )


def segments_intersect(p1, p2, q1, q2, tol: float = 1e-12) -> bool:
    """Closed segment intersection test (touching counts)."""
    d1 = _orientation(q1, q2, p1)
    d2 = _orientation(q1, q2, p2)
    d3 = _orientation(p1, p2, q1)
    d4 = _orientation(p1, p2, q2)

    if ((d1 > tol and d2 < -tol) or (d1 < -tol and d2 > tol)) and \
       ((d3 > tol and d4 < -tol) or (d3 < -tol and d4 > tol)):
        return True

    if abs(d1) <= tol and _on_segment(q1, q2, p1, tol): return True
    if abs(d2) <= tol and _on_segment(q1, q2, p2, tol): return True
    if abs(d3) <= tol and _on_segment(p1, p2, q1, tol): return True
    if abs(d4) <= tol and _on_segment(p1, p2, q2, tol): return True
    return False


def is_simple_polygon(ring: npt.NDArray[np.float64]) -> bool:
    """
    Checks that no two non-adjacent edges of the implicitly closed ring touch.
    O(n^2), meant for hand-sized contours.
    """
    n = len(ring)
    if n < 3:
        return False

    edges = [(ring[i], ring[(i + 1) % n]) for i in range(n)]
    for i in range(n):
        for j in range(i + 1, n):
            # Adjacent edges share a vertex by construction
            if j == i + 1 or (i == 0 and j == n - 1):
                continue
            if segments_intersect(edges[i][0], edges[i][1], edges[j][0], edges[j][1]):
                return False
    return True
