"""
Application Initialization
==========================
Sets up logging, creates the Qt application and shows the main window.
"""
import logging
import sys

from PySide6.QtWidgets import QApplication

from polyscene.config import ViewerConfig, log_level_from_env
from polyscene.logging_config import setup_logging
from polyscene.view.main_window import MainWindow, VISIBLE_APP_NAME

logger = logging.getLogger(__name__)


def main() -> None:
    # 1. Logging (POLYSCENE_LOG_LEVEL=DEBUG for development)
    setup_logging(level=log_level_from_env())

    # 2. Configuration
    config = ViewerConfig.from_env()
    logger.info(f"Contour: {len(config.contour)} points, triangulator: {config.triangulator}")

    # 3. Qt Application
    app = QApplication(sys.argv)
    app.setApplicationName(VISIBLE_APP_NAME)

    # 4. Main Window
    window = MainWindow(config)
    window.show()

    # 5. Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
