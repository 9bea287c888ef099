"""
Asynchronous Texture Loading
============================
Fetches the mesh texture (remote URL or local file) without blocking the UI.

Why is this file needed?
------------------------
1. Responsiveness: The download runs in the Qt event loop through
   QNetworkAccessManager, the scene is shown before the bitmap arrives.
2. Teardown: An in-flight request can be aborted, so a late reply never
   touches a scene that was already disposed.

Classes:
    TextureLoader: Emits `loaded(ndarray)` or `failed(str)`.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

import numpy as np
from PySide6.QtCore import QObject, QUrl, Signal
from PySide6.QtGui import QImage
from PySide6.QtNetwork import QNetworkAccessManager, QNetworkReply, QNetworkRequest

from polyscene.errors import TextureLoadError

logger = logging.getLogger(__name__)


def decode_texture(data: bytes) -> np.ndarray:
    """
    Decodes an encoded bitmap (PNG, JPEG, ...) into an (H, W, 4) uint8 RGBA array,
    first row = top of the image.

    Raises:
        TextureLoadError: If Qt cannot decode the data.
    """
    image = QImage()
    if not data or not image.loadFromData(data):
        raise TextureLoadError("Unsupported or corrupt image data.")

    image = image.convertToFormat(QImage.Format.Format_RGBA8888)
    width, height = image.width(), image.height()

    # Rows may be padded, slice them to the visible width
    buf = np.frombuffer(image.constBits(), dtype=np.uint8, count=image.sizeInBytes())
    rows = buf.reshape(height, image.bytesPerLine())
    return rows[:, : width * 4].reshape(height, width, 4).copy()


class TextureLoader(QObject):
    # Signals to hand the result back to the scene
    loaded = Signal(object)  # np.ndarray (H, W, 4)
    failed = Signal(str)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._manager = QNetworkAccessManager(self)
        self._reply: Optional[QNetworkReply] = None

    @property
    def is_pending(self) -> bool:
        return self._reply is not None

    def load(self, source: str) -> None:
        """Starts fetching `source` (URL or file path). A pending request is aborted first."""
        self.cancel()

        url = QUrl.fromUserInput(source, os.getcwd())
        if not url.isValid():
            logger.warning(f"Invalid texture source: {source!r}")
            self.failed.emit(f"Invalid texture source: {source!r}")
            return

        logger.info(f"Loading texture from: {url.toString()}")
        self._reply = self._manager.get(QNetworkRequest(url))
        self._reply.finished.connect(self._on_finished)

    def cancel(self) -> None:
        """Aborts the in-flight request, if any. No signal is emitted for it."""
        reply = self._reply
        if reply is None:
            return
        self._reply = None
        reply.finished.disconnect(self._on_finished)
        reply.abort()
        reply.deleteLater()
        logger.debug("Texture request cancelled.")

    def _on_finished(self) -> None:
        reply = self._reply
        if reply is None:
            return
        self._reply = None
        reply.deleteLater()

        try:
            if reply.error() != QNetworkReply.NetworkError.NoError:
                raise TextureLoadError(reply.errorString())
            image = decode_texture(bytes(reply.readAll().data()))
        except TextureLoadError as e:
            # No retry: the mesh stays untextured
            logger.warning(f"Texture load failed: {e}")
            self.failed.emit(str(e))
            return

        logger.info(f"Texture loaded ({image.shape[1]}x{image.shape[0]}).")
        self.loaded.emit(image)
