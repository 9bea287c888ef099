"""
Grid Helper
Reference grid lying in the ground (XZ) plane, centered at the origin.
"""
from typing import List, Optional, Tuple
import numpy as np
import pyvista as pv


class GridHelper:
    def __init__(
        self,
        size: float = 1000.0,
        divisions: int = 10,
        center_color: str = "#444444",
        color: str = "#888888",
    ) -> None:
        self.size = size
        self.divisions = divisions
        self.center_color = center_color
        self.color = color

        self._center_actor: Optional[pv.Actor] = None
        self._grid_actor: Optional[pv.Actor] = None

    @property
    def actors(self) -> List[pv.Actor]:
        return [a for a in (self._grid_actor, self._center_actor) if a is not None]

    def line_positions(self) -> np.ndarray:
        """Offsets of the grid lines along either axis."""
        half = self.size / 2.0
        return np.linspace(-half, half, self.divisions + 1)

    def build_polydata(self) -> Tuple[pv.PolyData, pv.PolyData]:
        """
        Create the grid lines in the XZ plane at Y=0.

        Returns:
            (grid, center) PolyData: regular lines and the two lines through
            the origin, drawn in their own color.
        """
        half = self.size / 2.0
        positions = self.line_positions()
        center_idx = self.divisions // 2 if self.divisions % 2 == 0 else None

        grid_segments = []
        center_segments = []
        for i, p in enumerate(positions):
            along_z = ((p, 0.0, -half), (p, 0.0, half))
            along_x = ((-half, 0.0, p), (half, 0.0, p))
            target = center_segments if i == center_idx else grid_segments
            target.append(along_z)
            target.append(along_x)

        return self._segments_to_polydata(grid_segments), self._segments_to_polydata(center_segments)

    @staticmethod
    def _segments_to_polydata(segments) -> pv.PolyData:
        if not segments:
            return pv.PolyData()
        n = len(segments)
        points = np.asarray(segments, dtype=float).reshape(n * 2, 3)
        cells = np.empty(n * 3, dtype=int)
        cells[0::3] = 2
        cells[1::3] = np.arange(0, n * 2, 2)
        cells[2::3] = np.arange(1, n * 2, 2)
        return pv.PolyData(points, lines=cells)

    def add_to(self, plotter: pv.Plotter) -> None:
        """Adds (or replaces) the grid actors on the plotter."""
        self.clear_actors(plotter)
        grid, center = self.build_polydata()

        self._grid_actor = plotter.add_mesh(
            grid, color=self.color, line_width=1, pickable=False, lighting=False, name="grid"
        )
        if center.n_points:
            self._center_actor = plotter.add_mesh(
                center, color=self.center_color, line_width=1, pickable=False, lighting=False,
                name="grid-center"
            )

    def clear_actors(self, plotter: pv.Plotter) -> None:
        if self._grid_actor: plotter.remove_actor(self._grid_actor)
        if self._center_actor: plotter.remove_actor(self._center_actor)
        self._grid_actor = None
        self._center_actor = None
