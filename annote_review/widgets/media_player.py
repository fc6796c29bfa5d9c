# annote_review/widgets/media_player.py
from __future__ import annotations

import logging
from typing import Optional

from PyQt5.QtCore import QRectF, QSize, Qt, QTimer, QUrl, pyqtSignal
from PyQt5.QtGui import QColor, QPainter, QPen
from PyQt5.QtMultimedia import QMediaContent, QMediaPlayer
from PyQt5.QtMultimediaWidgets import QVideoWidget
from PyQt5.QtWidgets import QSizePolicy, QStackedLayout, QWidget

from ..overlay import NOT_READY, OverlayFrame, ShapeKind, Size, fit_size

logger = logging.getLogger(__name__)


class _OverlayLayer(QWidget):
    """
    Transparent layer above the video. Shapes are in native video coordinates;
    one scale (OverlayFrame.transform) is applied to the whole painter.
    """

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setAttribute(Qt.WA_TransparentForMouseEvents, True)
        self.setAttribute(Qt.WA_NoSystemBackground, True)
        self.setAttribute(Qt.WA_TranslucentBackground, True)
        self._frame: OverlayFrame = NOT_READY
        self._offset = (0.0, 0.0)

    def set_frame(self, frame: OverlayFrame, offset_x: float, offset_y: float) -> None:
        self._frame = frame
        self._offset = (offset_x, offset_y)
        self.update()

    def paintEvent(self, event):
        frame = self._frame
        if not frame.ready or frame.transform is None:
            return

        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        painter.translate(self._offset[0], self._offset[1])
        painter.scale(frame.transform.scale_x, frame.transform.scale_y)

        for shape in frame.shapes:
            c = QColor(shape.color.r, shape.color.g, shape.color.b)
            rect = QRectF(shape.x, shape.y, shape.width, shape.height)
            if shape.kind is ShapeKind.BOX:
                pen = QPen(c, 2)
                pen.setCosmetic(True)
                painter.setPen(pen)
                painter.setBrush(Qt.NoBrush)
                painter.drawRect(rect)
            elif shape.kind is ShapeKind.MARKER:
                painter.setPen(Qt.NoPen)
                painter.setBrush(c)
                painter.drawRoundedRect(rect, 12, 12)
            else:
                painter.setPen(Qt.NoPen)
                painter.setBrush(c)
                painter.drawEllipse(rect)
        painter.end()


class MediaPlayerView(QWidget):
    """
    Primary playback engine: QMediaPlayer + QVideoWidget + annotation overlay.

    It is the canonical clock. While playing, a fixed-interval timer reports
    progress(played_seconds, loaded_seconds). Seeks take a fraction of the duration.
    """

    progress = pyqtSignal(float, float)
    played = pyqtSignal()
    paused = pyqtSignal()
    duration_changed = pyqtSignal(float)   # seconds
    metadata_loaded = pyqtSignal()         # intrinsic size is now known
    clicked = pyqtSignal()

    seeks_by_fraction = True

    def __init__(self, progress_interval_ms: int = 250, default_display: QSize = QSize(640, 360), parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self._default_display = default_display

        self.video = QVideoWidget(self)
        self.video.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.overlay = _OverlayLayer(self)

        stack = QStackedLayout(self)
        stack.setStackingMode(QStackedLayout.StackAll)
        stack.setContentsMargins(0, 0, 0, 0)
        stack.addWidget(self.overlay)
        stack.addWidget(self.video)
        self.overlay.raise_()

        self.player = QMediaPlayer(self, QMediaPlayer.VideoSurface)
        self.player.setVideoOutput(self.video)
        self.player.setMuted(True)
        self.player.stateChanged.connect(self._on_state_changed)
        self.player.durationChanged.connect(lambda ms: self.duration_changed.emit(max(0, int(ms)) / 1000.0))
        self.player.mediaStatusChanged.connect(self._on_media_status)
        self.player.metaDataAvailableChanged.connect(self._on_metadata)
        self.player.error.connect(self._on_player_error)

        self._progress_timer = QTimer(self)
        self._progress_timer.setInterval(max(1, int(progress_interval_ms)))
        self._progress_timer.timeout.connect(self._emit_progress)

        self._metadata_announced = False

    # ---------------- Engine API ----------------

    def load(self, source_url: Optional[str]) -> None:
        self._metadata_announced = False
        if not source_url:
            self.player.setMedia(QMediaContent())
            return
        url = QUrl(source_url)
        if url.isRelative() or not url.scheme() or len(url.scheme()) == 1:
            url = QUrl.fromLocalFile(source_url)
        self.player.setMedia(QMediaContent(url))
        # show the first frame without starting playback
        self.player.play()
        self.player.pause()

    def release(self) -> None:
        self._progress_timer.stop()
        self.player.stop()
        self.player.setMedia(QMediaContent())

    def seek_to(self, fraction: float) -> None:
        dur = int(self.player.duration() or 0)
        if dur <= 0:
            return
        pos = int(round(max(0.0, min(1.0, float(fraction))) * dur))
        self.player.setPosition(pos)

    def play(self) -> None:
        self.player.play()

    def pause(self) -> None:
        self.player.pause()

    def toggle_play(self) -> None:
        if self.is_playing():
            self.pause()
        else:
            self.play()

    def set_playback_rate(self, rate: float) -> None:
        self.player.setPlaybackRate(float(rate))

    def is_playing(self) -> bool:
        return self.player.state() == QMediaPlayer.PlayingState

    def duration(self) -> float:
        return max(0, int(self.player.duration() or 0)) / 1000.0

    def position_seconds(self) -> float:
        return max(0, int(self.player.position() or 0)) / 1000.0

    def intrinsic_size(self) -> Size:
        res = self.player.metaData("Resolution")
        if isinstance(res, QSize) and res.width() > 0 and res.height() > 0:
            return Size(float(res.width()), float(res.height()))
        hint = self.video.sizeHint()
        if hint.width() > 0 and hint.height() > 0 and self.player.isVideoAvailable():
            return Size(float(hint.width()), float(hint.height()))
        return Size(0.0, 0.0)

    def _area(self) -> Size:
        w, h = self.width(), self.height()
        if w <= 0 or h <= 0:
            w, h = self._default_display.width(), self._default_display.height()
        return Size(float(w), float(h))

    def displayed_size(self) -> Size:
        return fit_size(self.intrinsic_size(), self._area())

    def set_overlay_frame(self, frame: OverlayFrame) -> None:
        area = self._area()
        shown = self.displayed_size()
        self.overlay.set_frame(frame, (area.width - shown.width) / 2.0, (area.height - shown.height) / 2.0)

    # ---------------- Qt handlers ----------------

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton:
            self.clicked.emit()
        super().mousePressEvent(event)

    def _emit_progress(self) -> None:
        loaded = self.duration() * (int(self.player.bufferStatus() or 0) / 100.0)
        self.progress.emit(self.position_seconds(), loaded)

    def _on_state_changed(self, state) -> None:
        if state == QMediaPlayer.PlayingState:
            self._progress_timer.start()
            self.played.emit()
        else:
            self._progress_timer.stop()
            # one last tick so the logical clock lands where playback stopped
            self._emit_progress()
            self.paused.emit()

    def _announce_metadata(self) -> None:
        if self._metadata_announced or not self.intrinsic_size().is_valid():
            return
        self._metadata_announced = True
        logger.debug("Primary media size %s", self.intrinsic_size())
        self.metadata_loaded.emit()

    def _on_metadata(self, available: bool) -> None:
        if available:
            self._announce_metadata()

    def _on_media_status(self, status) -> None:
        if status in (QMediaPlayer.LoadedMedia, QMediaPlayer.BufferedMedia):
            self._announce_metadata()

    def _on_player_error(self, _err) -> None:
        logger.error("Primary engine error: %s", self.player.errorString())
