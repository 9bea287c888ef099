import numpy as np
import pytest

from polyscene.controller.mesh_builder import build_mesh
from polyscene.controller.triangulator import VtkTriangulator
from polyscene.controller.uv_mapper import assign_uvs
from polyscene.model.mesh import Mesh

from tests.conftest import EXAMPLE_CONTOUR


@pytest.fixture
def example_mesh():
    return assign_uvs(build_mesh(VtkTriangulator().triangulate(EXAMPLE_CONTOUR)))


def uv_of(mesh: Mesh, x: float, z: float):
    uvs = mesh.point_uvs()
    idx = int(np.flatnonzero((mesh.vertices[:, 0] == x) & (mesh.vertices[:, 2] == z))[0])
    return uvs[idx]


def test_uvs_cover_unit_square(example_mesh):
    uvs = example_mesh.face_vertex_uvs
    assert uvs.shape == (example_mesh.n_faces, 3, 2)
    assert np.all(uvs >= 0.0)
    assert np.all(uvs <= 1.0)


def test_u_spans_x_extent(example_mesh):
    assert uv_of(example_mesh, 140, 10)[0] == pytest.approx(0.0)
    assert uv_of(example_mesh, 154, 0)[0] == pytest.approx(1.0)
    assert uv_of(example_mesh, 150, 40)[0] == pytest.approx(10 / 14)


def test_v_is_inverted_depth(example_mesh):
    # Farthest vertex (max z) maps to the bottom of the image
    assert uv_of(example_mesh, 150, 40)[1] == pytest.approx(0.0)
    assert uv_of(example_mesh, 154, 0)[1] == pytest.approx(1.0)
    assert uv_of(example_mesh, 140, 10)[1] == pytest.approx(0.75)


def test_face_vertex_uvs_agree_per_vertex():
    mesh = assign_uvs(build_mesh(VtkTriangulator().triangulate([(0, 0), (4, 0), (4, 1), (1, 1), (1, 3), (0, 3)])))
    seen = {}
    for face, face_uvs in zip(mesh.faces, mesh.face_vertex_uvs):
        for vid, uv in zip(face, face_uvs):
            if vid in seen:
                np.testing.assert_allclose(seen[vid], uv)
            seen[vid] = uv


def flat_mesh() -> Mesh:
    # All vertices share z: no extent along the V axis
    mesh = Mesh()
    mesh.append_triangle((0, 0, 5), (1, 0, 5), (2, 0, 5))
    return mesh


def test_degenerate_axis_is_clamped(caplog):
    mesh = assign_uvs(flat_mesh())
    np.testing.assert_allclose(mesh.face_vertex_uvs[0, :, 0], [0.0, 0.5, 1.0])
    np.testing.assert_array_equal(mesh.face_vertex_uvs[0, :, 1], 0.0)
    assert "no extent along Z" in caplog.text


def test_degenerate_axis_unclamped_gives_nan():
    mesh = assign_uvs(flat_mesh(), clamp_degenerate=False)
    assert np.all(np.isnan(mesh.face_vertex_uvs[0, :, 1]))
    assert np.all(np.isfinite(mesh.face_vertex_uvs[0, :, 0]))


def test_empty_mesh():
    mesh = assign_uvs(Mesh())
    assert mesh.face_vertex_uvs.shape == (0, 3, 2)


def test_polydata_carries_texture_coordinates(example_mesh):
    pd = example_mesh.to_polydata()
    tcoords = np.asarray(pd.active_texture_coordinates)
    assert tcoords.shape == (pd.n_points, 2)
