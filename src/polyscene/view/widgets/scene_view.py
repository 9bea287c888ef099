"""
3D Scene Widget (PyVista Wrapper)
The host surface: embeds the VTK render window and mounts/unmounts the scene.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Signal
from PySide6.QtGui import QCloseEvent, QResizeEvent
from PySide6.QtWidgets import QVBoxLayout, QWidget
from pyvistaqt import QtInteractor

from polyscene.config import ViewerConfig
from polyscene.controller.texture_loader import TextureLoader
from polyscene.view.render_loop import SceneLifecycle
from polyscene.view.scene import SceneAssembler, SceneContext

logger = logging.getLogger(__name__)


class SceneView(QWidget):
    # Physical pixel size of the drawable surface
    viewport_resized = Signal(int, int)

    def __init__(self, config: Optional[ViewerConfig] = None, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.config = config or ViewerConfig()

        self.layout_box: QVBoxLayout = QVBoxLayout(self)
        self.layout_box.setContentsMargins(0, 0, 0, 0)

        # The render loop drives redraws, the widget must not add its own
        self.plotter: QtInteractor = QtInteractor(self, auto_update=False)
        self.layout_box.addWidget(self.plotter)

        self._texture_loader = TextureLoader(self)
        self.context: SceneContext = SceneAssembler(self.config).build(
            self.plotter, texture_loader=self._texture_loader
        )
        self.lifecycle = SceneLifecycle(
            self.context, self.viewport_resized, interval_ms=self.config.frame_interval_ms, parent=self
        )
        self.lifecycle.mount()

    # ------------------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------------------

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        ratio = self.devicePixelRatioF()
        size = event.size()
        self.viewport_resized.emit(int(round(size.width() * ratio)), int(round(size.height() * ratio)))

    def closeEvent(self, event: QCloseEvent) -> None:
        self.teardown()
        event.accept()

    def teardown(self) -> None:
        """Unmounts the scene. Safe to call more than once."""
        self.lifecycle.unmount()
