import numpy as np
import pytest
from PySide6.QtCore import QObject, Signal

from polyscene.config import ViewerConfig
from polyscene.view.render_loop import SceneLifecycle
from polyscene.view.scene import SceneAssembler

from tests.conftest import EXAMPLE_CONTOUR


class FakeTextureLoader(QObject):
    loaded = Signal(object)
    failed = Signal(str)

    def __init__(self):
        super().__init__()
        self.sources = []
        self.cancelled = 0

    def load(self, source):
        self.sources.append(source)

    def cancel(self):
        self.cancelled += 1


class ResizeSource(QObject):
    resized = Signal(int, int)


@pytest.fixture
def context(qapp, plotter, config):
    return SceneAssembler(config).build(plotter)


def test_scene_contents(context):
    assert context.points.n_points == len(EXAMPLE_CONTOUR)
    np.testing.assert_array_equal(context.points.points[:, 1], 0.0)

    assert context.mesh is not None
    assert context.mesh.n_faces == 1
    assert context.mesh_actor is not None
    assert context.mesh.face_vertex_uvs is not None

    assert len(context.lights) == 2
    assert len(context.grid.actors) == 2


def test_lights(context):
    directional, ambient = context.lights
    assert directional.intensity == pytest.approx(1.5)
    assert tuple(directional.position) == (100.0, 100.0, 100.0)
    assert ambient.intensity == pytest.approx(0.5)


def test_camera(context):
    cam = context.plotter.camera
    assert tuple(cam.position) == pytest.approx((150.0, 150.0, 150.0))
    assert tuple(cam.focal_point) == pytest.approx((0.0, 0.0, 0.0))
    assert cam.view_angle == pytest.approx(60.0)


def test_mesh_is_double_sided_and_unlit(context):
    prop = context.mesh_actor.prop
    assert not prop.lighting
    assert not prop.GetBackfaceCulling()
    assert not prop.GetFrontfaceCulling()


def test_grid_lines(context):
    grid, center = context.grid.build_polydata()
    # 11 positions per axis, the middle one of each is a center line
    assert grid.n_cells == 20
    assert center.n_cells == 2
    np.testing.assert_array_equal(grid.points[:, 1], 0.0)
    assert grid.bounds[0] == pytest.approx(-500.0)
    assert grid.bounds[1] == pytest.approx(500.0)


def test_invalid_contour_keeps_points_and_skips_mesh(qapp, plotter, caplog):
    cfg = ViewerConfig(contour=((0.0, 0.0), (1.0, 1.0)), texture_source=None)
    ctx = SceneAssembler(cfg).build(plotter)

    assert ctx.mesh is None
    assert ctx.mesh_actor is None
    assert ctx.points.n_points == 2
    assert "Skipping contour mesh" in caplog.text


def test_resize_is_idempotent(context):
    context.handle_resize(1200, 600)
    first = (context.aspect, tuple(context.plotter.window_size))

    context.handle_resize(1200, 600)
    assert (context.aspect, tuple(context.plotter.window_size)) == first
    assert first == (2.0, (1200, 600))


def test_resize_guards_zero_height(context):
    context.handle_resize(300, 0)
    assert context.aspect == pytest.approx(300.0)


def test_texture_request_and_apply(qapp, plotter):
    cfg = ViewerConfig(contour=EXAMPLE_CONTOUR, texture_source="texture.png")
    loader = FakeTextureLoader()
    ctx = SceneAssembler(cfg).build(plotter, texture_loader=loader)

    assert loader.sources == ["texture.png"]
    assert ctx.texture is None

    image = np.zeros((4, 4, 4), dtype=np.uint8)
    image[..., 0] = 255
    image[..., 3] = 255
    loader.loaded.emit(image)

    assert ctx.texture is not None
    assert ctx.mesh_actor.GetTexture() is not None


def test_texture_failure_leaves_mesh_untextured(qapp, plotter, caplog):
    cfg = ViewerConfig(contour=EXAMPLE_CONTOUR, texture_source="missing.png")
    loader = FakeTextureLoader()
    ctx = SceneAssembler(cfg).build(plotter, texture_loader=loader)

    loader.failed.emit("404")
    assert ctx.texture is None
    assert "untextured" in caplog.text


def test_lifecycle_teardown_on_real_scene(qapp, plotter):
    cfg = ViewerConfig(contour=EXAMPLE_CONTOUR, texture_source="texture.png")
    loader = FakeTextureLoader()
    ctx = SceneAssembler(cfg).build(plotter, texture_loader=loader)
    source = ResizeSource()

    lifecycle = SceneLifecycle(ctx, source.resized, interval_ms=1)
    lifecycle.mount()
    source.resized.emit(640, 320)
    assert ctx.aspect == pytest.approx(2.0)

    lifecycle.unmount()
    assert ctx.disposed
    assert not ctx.controls.enabled
    assert loader.cancelled == 1

    # Late events are ignored
    source.resized.emit(100, 100)
    assert ctx.aspect == pytest.approx(2.0)
    loader.loaded.emit(np.zeros((2, 2, 4), dtype=np.uint8))
    assert ctx.texture is None
