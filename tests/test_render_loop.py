import pytest
from PySide6.QtCore import QObject, Signal
from PySide6.QtTest import QTest

from polyscene.view.render_loop import LifecycleState, RenderLoop, SceneLifecycle


class ResizeSource(QObject):
    resized = Signal(int, int)


class FakeContext:
    """Records what the lifecycle asks of the scene."""
    def __init__(self):
        self.frames = 0
        self.resizes = []
        self.calls = []

    def render_frame(self):
        self.frames += 1

    def handle_resize(self, width, height):
        self.resizes.append((width, height))

    def release_renderer(self):
        self.calls.append("release_renderer")

    def release_controls(self):
        self.calls.append("release_controls")

    def cancel_pending_loads(self):
        self.calls.append("cancel_pending_loads")


@pytest.fixture
def source(qapp):
    return ResizeSource()


@pytest.fixture
def lifecycle(source):
    ctx = FakeContext()
    lc = SceneLifecycle(ctx, source.resized, interval_ms=1)
    yield lc
    lc.unmount()


def test_loop_ticks_only_while_alive(qapp):
    counter = []
    loop = RenderLoop(lambda: counter.append(1), interval_ms=1)

    loop.start()
    for _ in range(50):
        QTest.qWait(5)
        if counter:
            break
    assert counter, "timer never fired"
    assert loop.frames == len(counter)

    loop.stop()
    frozen = len(counter)
    QTest.qWait(30)
    assert len(counter) == frozen
    assert not loop.timer.isActive()


def test_stale_tick_after_stop_does_not_render(qapp):
    counter = []
    loop = RenderLoop(lambda: counter.append(1))
    loop.start()
    loop._tick()
    loop.stop()
    loop._tick()
    assert counter == [1]


def test_mount_starts_loop_and_listens_for_resize(lifecycle, source):
    assert lifecycle.state is LifecycleState.UNMOUNTED
    lifecycle.mount()

    assert lifecycle.is_mounted
    assert lifecycle.loop.is_running
    source.resized.emit(640, 480)
    assert lifecycle.context.resizes == [(640, 480)]


def test_unmount_releases_in_order(lifecycle):
    lifecycle.mount()
    lifecycle.unmount()

    assert lifecycle.state is LifecycleState.UNMOUNTED
    assert lifecycle.context.calls == ["release_renderer", "release_controls", "cancel_pending_loads"]


def test_nothing_runs_after_unmount(lifecycle, source):
    lifecycle.mount()
    lifecycle.loop._tick()
    assert lifecycle.context.frames == 1

    lifecycle.unmount()
    lifecycle.loop._tick()
    source.resized.emit(100, 100)
    QTest.qWait(20)

    assert lifecycle.context.frames == 1
    assert lifecycle.context.resizes == []
    assert not lifecycle.loop.timer.isActive()


def test_unmount_twice_releases_once(lifecycle):
    lifecycle.mount()
    lifecycle.unmount()
    lifecycle.unmount()
    assert lifecycle.context.calls.count("release_renderer") == 1


def test_mount_twice_connects_once(lifecycle, source):
    lifecycle.mount()
    lifecycle.mount()
    source.resized.emit(10, 20)
    assert lifecycle.context.resizes == [(10, 20)]
