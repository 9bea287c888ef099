import os

# Headless: no display server needed for Qt or VTK
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
import pyvista as pv
from PySide6.QtWidgets import QApplication

from polyscene.config import ViewerConfig

pv.OFF_SCREEN = True

EXAMPLE_CONTOUR = ((154.0, 0.0), (140.0, 10.0), (150.0, 40.0))


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def plotter():
    p = pv.Plotter(off_screen=True, window_size=(800, 600))
    yield p
    if not getattr(p, "_closed", False):
        p.close()


@pytest.fixture
def config():
    """Reference scene without the network texture."""
    return ViewerConfig(contour=EXAMPLE_CONTOUR, texture_source=None)
