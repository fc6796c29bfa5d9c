# annote_review/widgets/waveform_view.py
from __future__ import annotations

import logging
import os
from typing import List, Optional

import numpy as np
from PyQt5.QtCore import QObject, QPoint, QRect, Qt, QUrl, pyqtSignal
from PyQt5.QtGui import QColor, QFontMetrics, QPainter, QPen
from PyQt5.QtMultimedia import QAudioDecoder, QAudioFormat, QMediaContent, QMediaPlayer
from PyQt5.QtWidgets import QWidget

from ..peaks import PeakAccumulator
from ..session import WaveformPoint, WaveformSegment
from ..timeutils import Block, stack_blocks_into_lanes

logger = logging.getLogger(__name__)

PEAK_BINS = 2000


class _WaveformCanvas(QWidget):
    """Waveform + segment lanes + point markers + playhead. Click to seek."""

    seek_requested = pyqtSignal(int)  # ms

    def __init__(self, point_color: str = "#006eb0", parent: Optional[QWidget] = None):
        super().__init__(parent)

        self._peaks: Optional[np.ndarray] = None
        self._segments: List[WaveformSegment] = []
        self._points: List[WaveformPoint] = []
        self._lanes: List[List[Block]] = []
        self._duration_ms: int = 0
        self._playhead_ms: int = 0
        self._generating = True
        self._point_color = QColor(point_color)

        # Styling/layout
        self._pad_x = 10
        self._pad_y = 6
        self._wave_h = 70
        self._lane_h = 16
        self._lane_gap = 4

        self.setMouseTracking(True)
        self._resize_to_content()

    # ---------------- Public API ----------------

    def set_markers(self, points: List[WaveformPoint], segments: List[WaveformSegment]) -> None:
        self._points = list(points or [])
        self._segments = list(segments or [])
        blocks = [
            Block(idx=i, start_ms=int(round(s.start_time * 1000.0)), end_ms=int(round(s.end_time * 1000.0)))
            for i, s in enumerate(self._segments)
        ]
        self._lanes = stack_blocks_into_lanes(blocks)
        self._resize_to_content()
        self.update()

    def set_peaks(self, peaks: Optional[np.ndarray], duration_ms: int) -> None:
        self._peaks = peaks
        self._duration_ms = max(0, int(duration_ms))
        self._generating = False
        self.update()

    def set_duration_ms(self, duration_ms: int) -> None:
        if duration_ms > 0:
            self._duration_ms = int(duration_ms)
            self.update()

    def set_playhead_ms(self, ms: int) -> None:
        self._playhead_ms = max(0, int(ms))
        self.update()

    # ---------------- Geometry helpers ----------------

    def _resize_to_content(self) -> None:
        lanes = max(1, len(self._lanes))
        self.setMinimumHeight(self._pad_y * 2 + self._wave_h + lanes * (self._lane_h + self._lane_gap))
        self.setMinimumWidth(400)

    def _ms_to_x(self, ms: int) -> int:
        if self._duration_ms <= 0:
            return self._pad_x
        w = max(1, self.width() - 2 * self._pad_x)
        ms = max(0, min(int(ms), self._duration_ms))
        return self._pad_x + int(round((ms / self._duration_ms) * w))

    def _x_to_ms(self, x: int) -> int:
        if self._duration_ms <= 0:
            return 0
        w = max(1, self.width() - 2 * self._pad_x)
        rel = (int(x) - self._pad_x) / float(w)
        return max(0, min(int(round(rel * self._duration_ms)), self._duration_ms))

    # ---------------- Painting ----------------

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        painter.fillRect(self.rect(), QColor("#141414"))

        mid = self._pad_y + self._wave_h // 2
        if self._generating:
            painter.setPen(QPen(QColor("#9a9a9a"), 1))
            painter.drawText(
                self.rect().adjusted(self._pad_x, self._pad_y, -self._pad_x, 0),
                Qt.AlignTop | Qt.AlignLeft,
                "Generating audio waveform. May take a long time depending on media length...",
            )
        elif self._peaks is not None and len(self._peaks):
            painter.setPen(QPen(QColor("#4f8fbf"), 1))
            w = max(1, self.width() - 2 * self._pad_x)
            n = len(self._peaks)
            half = self._wave_h / 2.0
            for px in range(w):
                lo, hi = self._peaks[min(n - 1, int(px * n / w))]
                x = self._pad_x + px
                painter.drawLine(x, int(mid - hi * half), x, int(mid - lo * half))

        # Segment lanes
        fm = QFontMetrics(self.font())
        lanes_top = self._pad_y + self._wave_h + self._lane_gap
        for lane_idx, lane in enumerate(self._lanes):
            y = lanes_top + lane_idx * (self._lane_h + self._lane_gap)
            for b in lane:
                seg = self._segments[b.idx]
                x1 = self._ms_to_x(b.start_ms)
                x2 = max(x1 + 1, self._ms_to_x(b.end_ms))
                rect = QRect(x1, y, x2 - x1, self._lane_h)
                c = QColor(seg.color.r, seg.color.g, seg.color.b)
                c.setAlpha(150)
                painter.fillRect(rect, c)
                painter.setPen(QPen(QColor("#000000"), 1))
                painter.drawRect(rect)
                if fm.horizontalAdvance(seg.label_text) + 6 < rect.width():
                    painter.setPen(QPen(QColor("#0b0b0b"), 1))
                    painter.drawText(rect.adjusted(3, 0, -3, 0), Qt.AlignVCenter | Qt.AlignLeft, seg.label_text)

        # Point markers
        painter.setPen(QPen(self._point_color, 1))
        for p in self._points:
            x = self._ms_to_x(int(round(p.time * 1000.0)))
            painter.drawLine(x, self._pad_y, x, self._pad_y + self._wave_h)

        # Playhead
        if self._duration_ms > 0:
            x = self._ms_to_x(self._playhead_ms)
            painter.setPen(QPen(QColor("#ff2d2d"), 2))
            painter.drawLine(x, self._pad_y, x, self.height() - self._pad_y)

        painter.end()

    # ---------------- Interaction ----------------

    def mousePressEvent(self, event):
        if event.button() != Qt.LeftButton or self._duration_ms <= 0:
            return super().mousePressEvent(event)
        ms = self._x_to_ms(event.pos().x())
        self._playhead_ms = ms
        self.update()
        self.seek_requested.emit(ms)
        event.accept()

    def point_at(self, pos: QPoint) -> Optional[WaveformPoint]:
        for p in self._points:
            if abs(self._ms_to_x(int(round(p.time * 1000.0))) - pos.x()) <= 3:
                return p
        return None

    def mouseMoveEvent(self, event):
        p = self.point_at(event.pos())
        self.setToolTip(p.label_text if p is not None else "")
        return super().mouseMoveEvent(event)


class WaveformEngine(QObject):
    """
    Secondary playback engine: audio player + waveform/region view.

    init() decodes the whole audio track to build the waveform; this can take a
    long time and cannot be cancelled. ready is emitted when decoding finishes,
    error(message) when decoding or playback fails. Clicks on the waveform emit
    user_seek(seconds); commands (seek/play/pause) never emit anything back.
    """

    ready = pyqtSignal()
    error = pyqtSignal(str)
    user_seek = pyqtSignal(float)

    def __init__(self, point_color: str = "#006eb0", parent: Optional[QObject] = None):
        super().__init__(parent)
        self._point_color = point_color
        self.canvas: Optional[_WaveformCanvas] = None
        self._player: Optional[QMediaPlayer] = None
        self._decoder: Optional[QAudioDecoder] = None
        self._acc = PeakAccumulator()
        self._failed = False

    # ---------------- Engine API ----------------

    def init(self, mount_point: QWidget, media_source: str, points: List[WaveformPoint], segments: List[WaveformSegment]) -> None:
        if self.canvas is not None:
            raise RuntimeError("WaveformEngine.init() called twice")

        self.canvas = _WaveformCanvas(self._point_color, mount_point)
        self.canvas.set_markers(points, segments)
        self.canvas.seek_requested.connect(self._on_canvas_seek)
        layout = mount_point.layout()
        if layout is not None:
            layout.addWidget(self.canvas)

        path = self._local_path(media_source)

        self._player = QMediaPlayer(self)
        self._player.positionChanged.connect(self.canvas.set_playhead_ms)
        self._player.durationChanged.connect(self.canvas.set_duration_ms)
        self._player.error.connect(lambda _e: self._fail(self._player.errorString()))
        self._player.setMedia(QMediaContent(QUrl.fromLocalFile(path) if path else QUrl(media_source)))

        if path is None:
            self._fail(f"waveform needs a local media file, got {media_source}")
            return

        fmt = QAudioFormat()
        fmt.setCodec("audio/pcm")
        fmt.setSampleType(QAudioFormat.SignedInt)
        fmt.setSampleSize(16)
        fmt.setByteOrder(QAudioFormat.LittleEndian)
        fmt.setChannelCount(1)
        fmt.setSampleRate(8000)

        self._decoder = QAudioDecoder(self)
        self._decoder.setAudioFormat(fmt)
        self._decoder.bufferReady.connect(self._on_buffer_ready)
        self._decoder.finished.connect(self._on_decode_finished)
        self._decoder.error.connect(lambda _e: self._fail(self._decoder.errorString()))
        self._decoder.setSourceFilename(path)
        logger.info("Generating waveform for %s", path)
        self._decoder.start()

    def seek(self, seconds: float) -> None:
        if self._player is not None:
            self._player.setPosition(int(round(max(0.0, float(seconds)) * 1000.0)))

    def play(self) -> None:
        if self._player is not None:
            self._player.play()

    def pause(self) -> None:
        if self._player is not None:
            self._player.pause()

    def position(self) -> float:
        if self._player is None:
            return 0.0
        return max(0, int(self._player.position() or 0)) / 1000.0

    def destroy(self) -> None:
        if self._decoder is not None:
            self._decoder.stop()
            self._decoder = None
        if self._player is not None:
            self._player.stop()
            self._player.setMedia(QMediaContent())
            self._player = None
        if self.canvas is not None:
            self.canvas.deleteLater()
            self.canvas = None
        self._acc.clear()

    # ---------------- Internals ----------------

    @staticmethod
    def _local_path(media_source: str) -> Optional[str]:
        url = QUrl(media_source)
        if url.isLocalFile():
            return url.toLocalFile()
        if os.path.exists(media_source):
            return media_source
        return None

    def _fail(self, message: str) -> None:
        if self._failed:
            return
        self._failed = True
        if self.canvas is not None:
            self.canvas.set_peaks(None, 0)
        self.error.emit(message or "unknown waveform error")

    def _on_buffer_ready(self) -> None:
        buf = self._decoder.read()
        if not buf.isValid():
            return
        fmt = buf.format()
        data = buf.constData().asstring(buf.byteCount())
        self._acc.add(data, fmt.channelCount(), fmt.sampleRate())

    def _on_decode_finished(self) -> None:
        if self._failed or self.canvas is None:
            return
        duration_ms = int(round(self._acc.duration_seconds() * 1000.0))
        self.canvas.set_peaks(self._acc.peaks(PEAK_BINS), duration_ms)
        self._acc.clear()
        logger.info("Waveform ready (%.1fs of audio)", duration_ms / 1000.0)
        self.ready.emit()

    def _on_canvas_seek(self, ms: int) -> None:
        self.seek(ms / 1000.0)
        self.user_seek.emit(ms / 1000.0)
