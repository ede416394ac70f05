"""Test configuration and fixtures.

Provides reusable fixtures for:
- A headless QApplication (offscreen platform)
- A fake playback source that records any write attempts
- Generation workers that finish immediately or on demand
- In-memory render surfaces and download sinks for the exporter
"""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import math
from pathlib import Path

import pytest
from PySide6.QtCore import QObject, Signal
from PySide6.QtWidgets import QApplication

from rapflow.core.models import ExportArtifact


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


# =============================================================================
# Playback
# =============================================================================


class FakeSource(QObject):
    durationChanged = Signal(float)
    positionChanged = Signal(float)
    errorOccurred = Signal(str)

    def __init__(self, duration: float = math.nan):
        super().__init__()
        self._duration = duration
        self._position = 0.0
        self.writes: list[str] = []

    def duration(self) -> float:
        return self._duration

    def position(self) -> float:
        return self._position

    def emit_duration(self, seconds: float):
        self._duration = seconds
        self.durationChanged.emit(seconds)

    def emit_position(self, seconds: float):
        self._position = seconds
        self.positionChanged.emit(seconds)

    # anything below counts as the synchronizer writing to the source
    def load(self, *args, **kwargs):
        self.writes.append("load")

    def play(self):
        self.writes.append("play")

    def pause(self):
        self.writes.append("pause")

    def seek(self, seconds):
        self.writes.append("seek")


@pytest.fixture
def source():
    return FakeSource()


# =============================================================================
# Generation
# =============================================================================


class FakeClient:
    def __init__(self, text="line1\nline2", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def generate(self, request, profile):
        self.calls.append((request, profile))
        if self.error is not None:
            raise self.error
        return self.text


class ImmediateWorker(QObject):
    """Runs the client call synchronously when started."""
    completed = Signal(int, object, object)

    def __init__(self, seq, client, request, profile, parent=None):
        super().__init__(parent)
        self.seq = seq
        self.client = client
        self.request = request
        self.profile = profile

    def start(self):
        try:
            text = self.client.generate(self.request, self.profile)
        except Exception as e:
            self.completed.emit(self.seq, None, e)
            return
        self.completed.emit(self.seq, text, None)


class DeferredWorker(QObject):
    """Holds the call until the test finishes it."""
    completed = Signal(int, object, object)
    started: list = []

    def __init__(self, seq, client, request, profile, parent=None):
        super().__init__(parent)
        self.seq = seq
        self.client = client
        self.request = request
        self.profile = profile

    def start(self):
        DeferredWorker.started.append(self)

    def finish(self, text=None, error=None):
        self.completed.emit(self.seq, text, error)


@pytest.fixture
def deferred_workers():
    DeferredWorker.started = []
    yield DeferredWorker
    DeferredWorker.started = []


# =============================================================================
# Export
# =============================================================================


class FakeRaster:
    def __init__(self, width=400, height=300, png=b"\x89PNG\r\n\x1a\nfake"):
        self.width = width
        self.height = height
        self.png = png
        self.drawn = []

    def text_width(self, text, font_px):
        return len(text) * font_px * 0.5

    def draw_text(self, text, x, y, font_px, color, opacity):
        self.drawn.append({"text": text, "x": x, "y": y, "font_px": font_px,
                           "color": color, "opacity": opacity})

    def encode_png(self):
        return self.png


class FakeSurface:
    def __init__(self, raster=None, on_rasterize=None, fail_at=None):
        self.raster = raster if raster is not None else FakeRaster()
        self.on_rasterize = on_rasterize
        self.fail_at = fail_at
        self.detached = []
        self.released = []
        self.scales = []
        self.ready_calls = 0

    def wait_ready(self):
        self.ready_calls += 1
        if self.fail_at == "ready":
            raise RuntimeError("fonts never loaded")

    def detach(self, node):
        if self.fail_at == "detach":
            raise RuntimeError("cannot copy node")
        copy = ("copy", node)
        self.detached.append(copy)
        return copy

    def rasterize(self, detached, scale):
        self.scales.append(scale)
        if self.on_rasterize:
            self.on_rasterize()
        if self.fail_at == "rasterize":
            raise RuntimeError("canvas exploded")
        return self.raster

    def release(self, detached):
        self.released.append(detached)


class MemorySink:
    def __init__(self):
        self.delivered: list[ExportArtifact] = []

    def deliver(self, artifact):
        self.delivered.append(artifact)
        return Path("/downloads") / artifact.filename


@pytest.fixture
def sink():
    return MemorySink()
