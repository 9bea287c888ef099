import logging

import pytest

from polyscene.logging_config import setup_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger("polyscene")
    old_level, old_handlers = logger.level, list(logger.handlers)
    yield logger
    for h in logger.handlers:
        h.close()
    logger.handlers[:] = old_handlers
    logger.setLevel(old_level)


def test_repeated_setup_does_not_duplicate_handlers(package_logger):
    setup_logging()
    setup_logging(level=logging.DEBUG)
    assert len(package_logger.handlers) == 1
    assert package_logger.level == logging.DEBUG


def test_log_file(package_logger, tmp_path):
    log_file = tmp_path / "polyscene.log"
    setup_logging(log_file=str(log_file))
    logging.getLogger("polyscene.view.scene").info("hello from the scene")

    for h in package_logger.handlers:
        h.flush()
    text = log_file.read_text(encoding="utf-8")
    assert "Logging initialized." in text
    assert "polyscene.view.scene - INFO - hello from the scene" in text
