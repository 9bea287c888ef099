"""
Render Loop & Lifecycle
=======================
Keeps the scene redrawing while it is mounted and tears it down in a fixed
order when the host removes it.

Why is this file needed?
------------------------
1. Liveness: A QTimer drives one redraw per display refresh. Every tick checks
   the liveness flag first and `stop()` halts the timer synchronously, so no
   redraw can run after teardown.
2. Ordering: Unmounting stops the loop, detaches the resize listener, frees
   the renderer, releases the controls and aborts a pending texture fetch.

Classes:
    RenderLoop: Timer-driven redraw loop.
    LifecycleState: MOUNTED / UNMOUNTED.
    SceneLifecycle: Mount/unmount state machine around a SceneContext.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, SignalInstance

from polyscene.config import FRAME_INTERVAL_MS

logger = logging.getLogger(__name__)


class RenderLoop(QObject):
    def __init__(
        self,
        render_fn: Callable[[], None],
        interval_ms: int = FRAME_INTERVAL_MS,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._render_fn = render_fn
        self._alive: bool = False
        self.frames: int = 0

        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._tick)

    @property
    def is_running(self) -> bool:
        return self._alive

    @property
    def timer(self) -> QTimer:
        return self._timer

    def start(self) -> None:
        if self._alive:
            return
        self._alive = True
        self._timer.start()
        logger.debug(f"Render loop started ({self._timer.interval()} ms).")

    def stop(self) -> None:
        if not self._alive:
            return
        self._alive = False
        self._timer.stop()
        logger.debug(f"Render loop stopped after {self.frames} frames.")

    def _tick(self) -> None:
        # A timeout already queued before stop() must not draw
        if not self._alive:
            return
        self._render_fn()
        self.frames += 1


class LifecycleState(Enum):
    MOUNTED = "mounted"
    UNMOUNTED = "unmounted"


class SceneLifecycle(QObject):
    """
    Owns the render loop of a scene context and the resize subscription.

    The context must provide `render_frame()`, `handle_resize(w, h)`,
    `release_renderer()`, `release_controls()` and `cancel_pending_loads()`.
    """
    def __init__(
        self,
        context,
        resize_signal: SignalInstance,
        interval_ms: int = FRAME_INTERVAL_MS,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.context = context
        self._resize_signal = resize_signal
        self._resize_connected: bool = False
        self.loop = RenderLoop(context.render_frame, interval_ms, parent=self)
        self.state: LifecycleState = LifecycleState.UNMOUNTED

    @property
    def is_mounted(self) -> bool:
        return self.state is LifecycleState.MOUNTED

    def mount(self) -> None:
        if self.is_mounted:
            return
        self._resize_signal.connect(self._on_resize)
        self._resize_connected = True
        self.loop.start()
        self.state = LifecycleState.MOUNTED
        logger.info("Scene mounted.")

    def unmount(self) -> None:
        if not self.is_mounted:
            return
        self.state = LifecycleState.UNMOUNTED

        self.loop.stop()

        # 1. Resize listener
        if self._resize_connected:
            self._resize_signal.disconnect(self._on_resize)
            self._resize_connected = False

        # 2. Renderer
        self.context.release_renderer()

        # 3. Controls
        self.context.release_controls()

        # 4. In-flight texture fetch
        self.context.cancel_pending_loads()

        logger.info("Scene unmounted.")

    def _on_resize(self, width: int, height: int) -> None:
        if not self.is_mounted:
            return
        self.context.handle_resize(width, height)
