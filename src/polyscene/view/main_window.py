"""
Main Application Window
=======================
The top-level container hosting the 3D scene view.
"""
import logging
from typing import Optional

from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import QMainWindow

from polyscene.config import ViewerConfig
from polyscene.view.widgets.scene_view import SceneView

logger = logging.getLogger(__name__)

VISIBLE_APP_NAME = "Polyscene"


class MainWindow(QMainWindow):
    def __init__(self, config: Optional[ViewerConfig] = None) -> None:
        super().__init__()
        self.config = config or ViewerConfig()

        self.setWindowTitle(VISIBLE_APP_NAME)
        self.resize(*self.config.window_size)

        self.scene_view = SceneView(self.config, self)
        self.setCentralWidget(self.scene_view)

    def closeEvent(self, event: QCloseEvent) -> None:
        # Child widgets are not sent a close event, tear the scene down here
        self.scene_view.teardown()
        logger.info("Main window closed.")
        event.accept()
