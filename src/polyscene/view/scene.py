"""
Scene Assembly
==============
Builds the 3D scene once and keeps every piece of it in one owning object.

Why is this file needed?
------------------------
1. Ownership: Camera, lights, actors, controls and the pending texture load
   live in `SceneContext`. The render loop and the host widget receive that
   object explicitly instead of sharing loose module state.
2. Composition: `SceneAssembler` wires triangulation -> mesh -> UVs -> actors
   and applies the fixed look of the scene (grid, lights, camera, colors).

Classes:
    OrbitControls: Orbit/pan/zoom binding of the camera to the interactor.
    SceneContext: The built scene plus resize/texture/teardown operations.
    SceneAssembler: Builds a SceneContext on a given plotter.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import numpy as np
import pyvista as pv

from polyscene.config import ViewerConfig
from polyscene.controller.mesh_builder import build_mesh
from polyscene.controller.texture_loader import TextureLoader
from polyscene.controller.triangulator import Triangulator, make_triangulator
from polyscene.controller.uv_mapper import assign_uvs
from polyscene.errors import ContourError
from polyscene.model.geometry import lift_points
from polyscene.model.mesh import Mesh
from polyscene.view.widgets.grid_helper import GridHelper

logger = logging.getLogger(__name__)

WORLD_ORIGIN: Tuple[float, float, float] = (0.0, 0.0, 0.0)
WORLD_UP: Tuple[float, float, float] = (0.0, 1.0, 0.0)


class OrbitControls:
    """
    Rotate around the focal point with a fixed up axis, pan and wheel zoom.
    Backed by the VTK terrain interactor style.
    """
    def __init__(self, plotter: pv.Plotter) -> None:
        self.plotter = plotter
        self.enabled: bool = False

    def enable(self) -> None:
        if self.plotter.iren is None:
            logger.debug("Plotter has no interactor, controls stay disabled.")
            return
        self.plotter.enable_terrain_style(mouse_wheel_zooms=True)
        self.enabled = True

    def dispose(self) -> None:
        """Releases the event bindings on the interactor."""
        if not self.enabled:
            return
        self.enabled = False
        iren = self.plotter.iren
        if iren is None:
            # Already torn down together with the render window
            return
        iren.remove_observers()
        iren.interactor.SetInteractorStyle(None)
        logger.debug("Orbit controls disposed.")


class SceneContext:
    def __init__(self, plotter: pv.Plotter, config: ViewerConfig) -> None:
        self.plotter = plotter
        self.config = config

        self.grid: Optional[GridHelper] = None
        self.lights: List[pv.Light] = []
        self.controls: Optional[OrbitControls] = None

        self.points: Optional[pv.PolyData] = None
        self.points_actor: Optional[pv.Actor] = None

        self.mesh: Optional[Mesh] = None
        self.mesh_actor: Optional[pv.Actor] = None
        self.texture: Optional[pv.Texture] = None
        self.texture_loader: Optional[TextureLoader] = None

        # Matches the camera before the first resize
        self.aspect: float = 1.0
        self.surface_size: Tuple[int, int] = tuple(config.window_size)

        self.disposed: bool = False

    # ------------------------------------------------------------------------------
    # Frame & viewport
    # ------------------------------------------------------------------------------

    def render_frame(self) -> None:
        if self.disposed:
            return
        self.plotter.render()

    def handle_resize(self, width: int, height: int) -> None:
        """Recomputes the camera aspect ratio and the renderer surface size."""
        if self.disposed:
            return
        w = max(1, int(width))
        h = max(1, int(height))
        self.aspect = w / h
        self.surface_size = (w, h)

        if tuple(self.plotter.window_size) != (w, h):
            self.plotter.window_size = (w, h)
        logger.debug(f"Viewport resized to {w}x{h} (aspect {self.aspect:.3f}).")

    # ------------------------------------------------------------------------------
    # Texture
    # ------------------------------------------------------------------------------

    def apply_texture(self, image: np.ndarray) -> None:
        """Attaches a decoded RGBA bitmap to the mesh material."""
        if self.disposed:
            logger.debug("Texture arrived after teardown, ignoring it.")
            return
        if self.mesh_actor is None:
            logger.warning("Texture loaded but there is no mesh to put it on.")
            return

        self.texture = pv.Texture(image)
        self.mesh_actor.SetTexture(self.texture)
        # Texture replaces the flat color
        self.mesh_actor.prop.color = "white"
        self.render_frame()

    def on_texture_failed(self, message: str) -> None:
        logger.warning(f"Mesh stays untextured: {message}")

    # ------------------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------------------

    def cancel_pending_loads(self) -> None:
        if self.texture_loader is not None:
            self.texture_loader.cancel()

    def release_renderer(self) -> None:
        """Frees the render window and its GPU resources."""
        if self.disposed:
            return
        self.disposed = True
        self.plotter.close()
        logger.info("Renderer released.")

    def release_controls(self) -> None:
        if self.controls is not None:
            self.controls.dispose()


class SceneAssembler:
    def __init__(self, config: Optional[ViewerConfig] = None, triangulator: Optional[Triangulator] = None) -> None:
        self.config = config or ViewerConfig()
        self.triangulator = triangulator or make_triangulator(self.config.triangulator)

    def build(self, plotter: pv.Plotter, texture_loader: Optional[TextureLoader] = None) -> SceneContext:
        """
        Populates `plotter` and returns the context owning it.
        A texture request is started if the config names a source.
        """
        logger.info("Assembling scene.")
        ctx = SceneContext(plotter, self.config)

        self._setup_renderer(ctx)
        self._setup_camera(ctx)
        self._setup_grid(ctx)
        self._setup_lights(ctx)
        self._setup_points(ctx)
        self._setup_mesh(ctx)
        self._setup_controls(ctx)
        self._request_texture(ctx, texture_loader)

        return ctx

    # ------------------------------------------------------------------------------
    # Internal: one step per scene element
    # ------------------------------------------------------------------------------

    def _setup_renderer(self, ctx: SceneContext) -> None:
        cfg = self.config
        ctx.plotter.set_background(cfg.background_color)
        if cfg.anti_aliasing:
            ctx.plotter.enable_anti_aliasing("msaa")

    def _setup_camera(self, ctx: SceneContext) -> None:
        cfg = self.config
        ctx.plotter.camera_position = [cfg.camera_position, WORLD_ORIGIN, WORLD_UP]
        cam = ctx.plotter.camera
        cam.view_angle = cfg.camera_fov
        cam.clipping_range = (cfg.camera_near, cfg.camera_far)

    def _setup_grid(self, ctx: SceneContext) -> None:
        cfg = self.config
        ctx.grid = GridHelper(
            size=cfg.grid_size,
            divisions=cfg.grid_divisions,
            center_color=cfg.grid_center_color,
            color=cfg.grid_color,
        )
        ctx.grid.add_to(ctx.plotter)

    def _setup_lights(self, ctx: SceneContext) -> None:
        cfg = self.config
        ctx.plotter.remove_all_lights()

        directional = pv.Light(
            position=cfg.directional_light_position,
            focal_point=WORLD_ORIGIN,
            color=cfg.light_color,
            intensity=cfg.directional_light_intensity,
            light_type="scene light",
        )

        # VTK has no ambient light type, use a light that only carries an ambient term
        ambient = pv.Light(light_type="scene light", intensity=cfg.ambient_light_intensity)
        ambient.ambient_color = cfg.light_color
        ambient.diffuse_color = "black"
        ambient.specular_color = "black"

        for light in (directional, ambient):
            ctx.plotter.add_light(light)
            ctx.lights.append(light)

    def _setup_points(self, ctx: SceneContext) -> None:
        cfg = self.config
        ctx.points = pv.PolyData(lift_points(cfg.contour))
        ctx.points_actor = ctx.plotter.add_mesh(
            ctx.points,
            style="points",
            color=cfg.point_color,
            point_size=cfg.point_size,
            render_points_as_spheres=False,
            lighting=False,
            pickable=False,
            name="contour-points",
        )

    def _setup_mesh(self, ctx: SceneContext) -> None:
        cfg = self.config
        try:
            triangles = self.triangulator.triangulate(cfg.contour, holes=cfg.holes or None)
        except ContourError as e:
            # Points stay visible, only the fill is skipped
            logger.error(f"Skipping contour mesh: {e}")
            return

        ctx.mesh = assign_uvs(build_mesh(triangles))
        ctx.mesh_actor = ctx.plotter.add_mesh(
            ctx.mesh.to_polydata(),
            color="lightgrey",
            style="surface",
            show_edges=False,
            lighting=False,  # basic (unlit) material
            culling=False,  # double sided
            pickable=False,
            name="contour-mesh",
        )

    def _setup_controls(self, ctx: SceneContext) -> None:
        ctx.controls = OrbitControls(ctx.plotter)
        ctx.controls.enable()

    def _request_texture(self, ctx: SceneContext, loader: Optional[TextureLoader]) -> None:
        source = self.config.texture_source
        if not source or ctx.mesh_actor is None:
            return

        if loader is None:
            loader = TextureLoader()

        loader.loaded.connect(ctx.apply_texture)
        loader.failed.connect(ctx.on_texture_failed)
        ctx.texture_loader = loader
        loader.load(source)
