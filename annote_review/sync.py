# annote_review/sync.py
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional, Sequence

from PyQt5.QtCore import QObject, pyqtSignal

from .errors import SecondaryEngineInitFailed
from .timeutils import seconds_to_bucket

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    UNBOUND = "unbound"  # no secondary engine attached
    BOUND = "bound"      # secondary attached, still building its waveform/markers
    READY = "ready"      # both engines initialized and cross-wired
    ERROR = "error"      # secondary failed; primary still usable, no mirroring
    CLOSED = "closed"    # torn down


class PlaybackSynchronizer(QObject):
    """
    One logical timeline over two independently clocked engines.

    The primary engine is the only clock. Its progress ticks drive current_time;
    the secondary engine only ever receives commands (play/pause/seek), so nothing
    the secondary does in response can loop back.

    Expected primary interface:
      signals: progress(played_seconds: float, loaded_seconds: float), played(), paused()
      methods: seek_to(value: float), play(), pause(), duration() -> seconds (0 if unknown)
      attribute: seeks_by_fraction (seek_to takes 0..1 of duration instead of seconds)

    Expected secondary interface:
      signals: ready(), error(str), user_seek(float seconds)
      methods: init(mount_point, media_source, points, segments), seek(seconds),
               play(), pause(), position() -> seconds, destroy()
    """

    state_changed = pyqtSignal(str)
    time_changed = pyqtSignal(float)
    second_changed = pyqtSignal(int)
    error_raised = pyqtSignal(object)  # SecondaryEngineInitFailed

    def __init__(self, primary: Any, max_drift_ms: int = 200, parent: Optional[QObject] = None):
        super().__init__(parent)

        self._primary = primary
        self._secondary: Optional[Any] = None
        self._state = SyncState.UNBOUND
        self._max_drift_s = max(0, int(max_drift_ms)) / 1000.0

        self._current_time = 0.0
        self._current_second = 0
        self._primary_playing = False
        self.last_error: Optional[str] = None

        primary.progress.connect(self.on_progress)
        primary.played.connect(self.on_primary_play)
        primary.paused.connect(self.on_primary_pause)

    # ---------------- Properties ----------------

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def current_time(self) -> float:
        return self._current_time

    @property
    def current_second(self) -> int:
        return self._current_second

    def is_ready(self) -> bool:
        return self._state is SyncState.READY

    def _set_state(self, state: SyncState) -> None:
        if state is self._state:
            return
        logger.info("Synchronizer %s -> %s", self._state.value, state.value)
        self._state = state
        self.state_changed.emit(state.value)

    # ---------------- Secondary lifecycle ----------------

    def bind(
        self,
        secondary: Any,
        mount_point: Any,
        media_source: Optional[str],
        points: Sequence[Any],
        segments: Sequence[Any],
    ) -> bool:
        """
        Attach and initialize the secondary engine. Happens once, and only when both
        a mount point and a media reference exist. Returns True if init was started.
        """
        if self._state is not SyncState.UNBOUND:
            logger.debug("bind() ignored in state %s", self._state.value)
            return False
        if mount_point is None or not media_source:
            logger.debug("bind() deferred: mount point or media source missing")
            return False

        self._secondary = secondary
        secondary.ready.connect(self.on_secondary_ready)
        secondary.error.connect(self.on_secondary_error)
        secondary.user_seek.connect(self.on_secondary_seek)
        self._set_state(SyncState.BOUND)

        try:
            secondary.init(mount_point, media_source, list(points), list(segments))
        except Exception as e:
            logger.exception("Secondary engine init raised")
            self.on_secondary_error(str(e) or type(e).__name__)
        return True

    def on_secondary_ready(self) -> None:
        if self._state is not SyncState.BOUND:
            logger.debug("ready ignored in state %s", self._state.value)
            return
        self._set_state(SyncState.READY)
        # Bring the secondary to where the primary already is.
        self._secondary.seek(self._current_time)
        if self._primary_playing:
            self._secondary.play()

    def on_secondary_error(self, message: str) -> None:
        if self._state not in (SyncState.BOUND, SyncState.READY):
            logger.debug("error ignored in state %s: %s", self._state.value, message)
            return
        self.last_error = str(message)
        logger.error("Secondary engine failed: %s", self.last_error)
        self._set_state(SyncState.ERROR)
        self.error_raised.emit(SecondaryEngineInitFailed(self.last_error))

    def teardown(self) -> None:
        """Release the secondary engine. Safe in any state; later calls do nothing."""
        if self._state is SyncState.CLOSED:
            return
        sec = self._secondary
        self._secondary = None
        try:
            if sec is not None:
                self._disconnect(
                    (sec.ready, self.on_secondary_ready),
                    (sec.error, self.on_secondary_error),
                    (sec.user_seek, self.on_secondary_seek),
                )
                sec.destroy()
        finally:
            self._disconnect(
                (self._primary.progress, self.on_progress),
                (self._primary.played, self.on_primary_play),
                (self._primary.paused, self.on_primary_pause),
            )
            self._set_state(SyncState.CLOSED)

    @staticmethod
    def _disconnect(*pairs) -> None:
        for sig, slot in pairs:
            try:
                sig.disconnect(slot)
            except TypeError:
                pass

    # ---------------- Primary -> logical clock ----------------

    def _set_time(self, seconds: float) -> None:
        self._current_time = max(0.0, float(seconds))
        self.time_changed.emit(self._current_time)
        sec = seconds_to_bucket(self._current_time)
        if sec != self._current_second:
            self._current_second = sec
            self.second_changed.emit(sec)

    def on_progress(self, played_seconds: float, loaded_seconds: float = 0.0) -> None:
        if self._state is SyncState.CLOSED:
            return
        self._set_time(played_seconds)

        if self.is_ready() and self._primary_playing and self._max_drift_s > 0:
            drift = abs(float(self._secondary.position()) - self._current_time)
            if drift > self._max_drift_s:
                logger.debug("Secondary drifted %.3fs; re-seeking", drift)
                self._secondary.seek(self._current_time)

    # ---------------- Primary -> secondary (commands only) ----------------

    def on_primary_play(self) -> None:
        self._primary_playing = True
        if self.is_ready():
            self._secondary.play()

    def on_primary_pause(self) -> None:
        self._primary_playing = False
        if self.is_ready():
            self._secondary.pause()

    # ---------------- Seeks ----------------

    def _seek_primary(self, seconds: float) -> None:
        seconds = max(0.0, float(seconds))
        if getattr(self._primary, "seeks_by_fraction", False):
            dur = float(self._primary.duration() or 0.0)
            if dur <= 0:
                logger.debug("Primary duration unknown; seek to %.3fs dropped", seconds)
                return
            self._primary.seek_to(min(1.0, seconds / dur))
        else:
            self._primary.seek_to(seconds)

    def on_secondary_seek(self, seconds: float) -> None:
        """A user seek on the waveform is authoritative for the primary."""
        if not self.is_ready():
            logger.debug("secondary seek ignored in state %s", self._state.value)
            return
        self._seek_primary(seconds)
        self._set_time(seconds)

    def seek_to(self, seconds: float) -> None:
        """Seek both engines (e.g. a table row's Seek action or the transport slider)."""
        if self._state is SyncState.CLOSED:
            return
        self._seek_primary(seconds)
        if self.is_ready():
            self._secondary.seek(max(0.0, float(seconds)))
        self._set_time(seconds)
