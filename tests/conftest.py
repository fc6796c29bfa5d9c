"""Shared pytest fixtures for annote_review tests."""

from typing import Dict, List

import pytest
from PyQt5.QtCore import QCoreApplication, QObject, pyqtSignal

from annote_review.domain import MediaDocument


@pytest.fixture(scope="session", autouse=True)
def qapp() -> QCoreApplication:
    """One QCoreApplication for the whole run; signals need no display."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


# ------------------------------------------------------------------
# Fake playback engines
# ------------------------------------------------------------------


class FakePrimary(QObject):
    """Records commands; tests emit progress/played/paused themselves."""

    progress = pyqtSignal(float, float)
    played = pyqtSignal()
    paused = pyqtSignal()

    seeks_by_fraction = True

    def __init__(self, duration: float = 120.0):
        super().__init__()
        self._duration = duration
        self.calls: List[tuple] = []

    def seek_to(self, value: float) -> None:
        self.calls.append(("seek_to", value))

    def play(self) -> None:
        self.calls.append(("play",))

    def pause(self) -> None:
        self.calls.append(("pause",))

    def duration(self) -> float:
        return self._duration


class FakeSecondary(QObject):
    """Records commands; never emits in response to one."""

    ready = pyqtSignal()
    error = pyqtSignal(str)
    user_seek = pyqtSignal(float)

    def __init__(self, fail_init: bool = False, fail_destroy: bool = False):
        super().__init__()
        self.fail_init = fail_init
        self.fail_destroy = fail_destroy
        self.init_args = None
        self.calls: List[tuple] = []
        self.current_position = 0.0
        self.destroyed_count = 0

    def init(self, mount_point, media_source, points, segments) -> None:
        self.init_args = (mount_point, media_source, points, segments)
        if self.fail_init:
            raise RuntimeError("decoder unavailable")

    def seek(self, seconds: float) -> None:
        self.calls.append(("seek", seconds))
        self.current_position = seconds

    def play(self) -> None:
        self.calls.append(("play",))

    def pause(self) -> None:
        self.calls.append(("pause",))

    def position(self) -> float:
        return self.current_position

    def destroy(self) -> None:
        self.destroyed_count += 1
        if self.fail_destroy:
            raise RuntimeError("audio device busy")


@pytest.fixture()
def primary() -> FakePrimary:
    return FakePrimary()


@pytest.fixture()
def secondary() -> FakeSecondary:
    return FakeSecondary()


# ------------------------------------------------------------------
# Sample annotation payloads
# ------------------------------------------------------------------


@pytest.fixture()
def scenario_predictions() -> List[Dict]:
    return [
        {"classifier": "violence", "time": 3000, "confidence": 1},
        {"classifier": "nudity", "time": 10000, "confidence": 4},
    ]


@pytest.fixture()
def mixed_predictions() -> List[Dict]:
    return [
        {"classifier": "gunshot", "time": 7000, "duration": 3000, "confidence": 0.8, "model": "audioNet"},
        {"classifier": "violence", "time": 3000, "confidence": 0.9, "model": "modelA",
         "x": 10, "y": 20, "width": 100, "height": 50},
        {"classifier": "nudity", "time": 3000, "confidence": 0.4, "model": "modelB"},
    ]


@pytest.fixture()
def sample_labels() -> List[Dict]:
    return [
        {"classifier": "violence", "time": 3000, "x": 12, "y": 22, "width": 98, "height": 48},
    ]


@pytest.fixture()
def media_doc(mixed_predictions, sample_labels) -> MediaDocument:
    return MediaDocument(
        title="clip-01",
        source_url="/media/clip-01.mp4",
        predictions=mixed_predictions,
        labels=sample_labels,
    )
