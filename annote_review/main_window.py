# annote_review/main_window.py
from __future__ import annotations

import logging
from typing import Optional

from PyQt5.QtCore import QSize, Qt, QTimer
from PyQt5.QtWidgets import (
    QComboBox,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QSlider,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from .errors import SecondaryEngineInitFailed
from .listing import build_rows
from .overlay import OverlayProjector
from .session import ReviewSession
from .sync import PlaybackSynchronizer
from .timeutils import ms_to_time_str
from .widgets.filter_panel import FilterPanel
from .widgets.media_player import MediaPlayerView
from .widgets.predictions_table import PredictionsTable
from .widgets.waveform_view import WaveformEngine

logger = logging.getLogger(__name__)

PLAYBACK_RATES = ["0.5", "1.0", "1.5", "2.0"]


class MainWindow(QMainWindow):
    def __init__(self, session: ReviewSession):
        super().__init__()
        self.session = session
        self.cfg = session.config
        self.projector = OverlayProjector()
        self.waveform: Optional[WaveformEngine] = None

        title = session.media.title or "Untitled"
        self.setWindowTitle(f"Annote-Review - {title}")
        self.resize(1600, 950)

        self._user_scrubbing = False

        self._build_ui()

        self.sync = PlaybackSynchronizer(self.player, max_drift_ms=self.cfg.max_drift_ms, parent=self)
        self.session.attach_synchronizer(self.sync)
        self.sync.time_changed.connect(self._on_time_changed)
        self.sync.second_changed.connect(self._on_second_changed)
        self.sync.state_changed.connect(self._on_sync_state_changed)
        self.sync.error_raised.connect(self._on_secondary_error)

        self.filters.set_state(self.session.filter_state)
        self.table.set_show_model_column(self.session.annotation_set.has_model_metadata())
        self._refresh_rows(full=True)

        self.player.load(self.session.media.source_url)
        # Bind the waveform once the window (the mount point) exists on screen.
        QTimer.singleShot(0, self._bind_secondary)

    # ---------------- UI ----------------

    def _build_ui(self):
        central = QWidget()
        self.setCentralWidget(central)

        main_layout = QVBoxLayout(central)
        main_layout.setContentsMargins(6, 6, 6, 6)
        main_layout.setSpacing(6)

        header = QLabel(f"<h1>{self.session.media.title}</h1>")
        header.setTextInteractionFlags(Qt.TextSelectableByMouse)
        main_layout.addWidget(header)

        split = QSplitter(Qt.Horizontal)
        main_layout.addWidget(split, stretch=1)

        # Left: player, waveform, transport
        left = QWidget()
        left_lay = QVBoxLayout(left)
        left_lay.setContentsMargins(0, 0, 0, 0)
        left_lay.setSpacing(6)

        self.player = MediaPlayerView(
            progress_interval_ms=self.cfg.progress_interval_ms,
            default_display=QSize(self.cfg.default_display_width, self.cfg.default_display_height),
        )
        self.player.clicked.connect(self._toggle_play)
        self.player.metadata_loaded.connect(self._refresh_overlay)
        self.player.duration_changed.connect(self._on_duration_changed)
        self.player.played.connect(self._update_play_button)
        self.player.paused.connect(self._update_play_button)
        left_lay.addWidget(self.player, stretch=8)

        if not self.session.media.source_url:
            missing = QLabel(f"No media url found for '{self.session.media.title}'. Only the listing is available.")
            missing.setWordWrap(True)
            left_lay.addWidget(missing)

        play_bar = QHBoxLayout()
        play_bar.setSpacing(8)
        self.btn_play = QPushButton("Play")
        self.btn_play.setCursor(Qt.PointingHandCursor)
        self.btn_play.clicked.connect(self._toggle_play)
        self.combo_rate = QComboBox()
        self.combo_rate.addItems(PLAYBACK_RATES)
        self.combo_rate.setCurrentText("1.0")
        self.combo_rate.currentTextChanged.connect(lambda t: self.player.set_playback_rate(float(t)))
        self.timeline_label = QLabel("00:00 / 00:00")
        play_bar.addWidget(self.btn_play)
        play_bar.addWidget(QLabel("Rate:"))
        play_bar.addWidget(self.combo_rate)
        play_bar.addSpacing(12)
        play_bar.addWidget(self.timeline_label)
        play_bar.addStretch()
        left_lay.addLayout(play_bar)

        self.slider = QSlider(Qt.Horizontal)
        self.slider.setRange(0, 0)
        self.slider.sliderPressed.connect(self._on_slider_pressed)
        self.slider.sliderReleased.connect(self._on_slider_released)
        left_lay.addWidget(self.slider)

        wave_box = QGroupBox("Waveform")
        self.waveform_mount = QWidget()
        mount_lay = QVBoxLayout(self.waveform_mount)
        mount_lay.setContentsMargins(0, 0, 0, 0)
        wave_lay = QVBoxLayout(wave_box)
        wave_lay.setContentsMargins(6, 6, 6, 6)
        wave_lay.addWidget(self.waveform_mount)
        self.waveform_error = QLabel("")
        self.waveform_error.setStyleSheet("color: #d33; font-family: monospace;")
        self.waveform_error.setVisible(False)
        wave_lay.addWidget(self.waveform_error)
        left_lay.addWidget(wave_box, stretch=3)

        # Right: filters + listing
        right = QWidget()
        right_lay = QVBoxLayout(right)
        right_lay.setContentsMargins(0, 0, 0, 0)
        right_lay.setSpacing(6)

        self.filters = FilterPanel()
        self.filters.classifier_toggled.connect(self._on_classifier_toggled)
        self.filters.model_toggled.connect(self._on_model_toggled)
        right_lay.addWidget(self.filters, stretch=1)

        self.table = PredictionsTable()
        self.table.seek_requested.connect(self._seek)
        right_lay.addWidget(self.table, stretch=3)

        split.addWidget(left)
        split.addWidget(right)
        split.setStretchFactor(0, 3)
        split.setStretchFactor(1, 2)

    # ---------------- Secondary engine ----------------

    def _bind_secondary(self) -> None:
        if not self.cfg.enable_waveform:
            logger.info("Waveform disabled by config")
            return
        self.waveform = WaveformEngine(point_color=self.cfg.point_marker_color, parent=self)
        self.sync.bind(
            self.waveform,
            self.waveform_mount,
            self.session.media.source_url,
            self.session.secondary_points(),
            self.session.secondary_segments(),
        )

    def _on_sync_state_changed(self, state: str) -> None:
        self.statusBar().showMessage(f"Waveform: {state}")

    def _on_secondary_error(self, err: SecondaryEngineInitFailed) -> None:
        self.waveform_error.setText(f"ERROR: {err}")
        self.waveform_error.setVisible(True)

    # ---------------- Playback ----------------

    def _toggle_play(self) -> None:
        if not self.session.media.source_url:
            return
        self.player.toggle_play()

    def _update_play_button(self) -> None:
        self.btn_play.setText("Pause" if self.player.is_playing() else "Play")

    def _seek(self, seconds: float) -> None:
        self.sync.seek_to(seconds)

    def _on_duration_changed(self, seconds: float) -> None:
        self.slider.setRange(0, int(round(seconds * 1000.0)))
        self._update_timeline_label(self.sync.current_time)

    def _on_time_changed(self, seconds: float) -> None:
        if not self._user_scrubbing:
            self.slider.setValue(int(round(seconds * 1000.0)))
        self._update_timeline_label(seconds)

    def _on_second_changed(self, _second: int) -> None:
        self._refresh_overlay()
        self._refresh_rows(full=False)

    def _on_slider_pressed(self) -> None:
        self._user_scrubbing = True

    def _on_slider_released(self) -> None:
        self._user_scrubbing = False
        self._seek(self.slider.value() / 1000.0)

    def _update_timeline_label(self, seconds: float) -> None:
        pos = int(round(seconds * 1000.0))
        self.timeline_label.setText(f"{ms_to_time_str(pos)} / {ms_to_time_str(self.slider.maximum())}")

    # ---------------- Filters ----------------

    def _on_classifier_toggled(self, classifier: str, enabled: bool) -> None:
        self.session.filter_state.set_classifier(classifier, enabled)
        self._refresh_overlay()
        self._refresh_rows(full=True)

    def _on_model_toggled(self, model: str, enabled: bool) -> None:
        self.session.filter_state.set_model(model, enabled)
        self._refresh_overlay()
        self._refresh_rows(full=True)

    # ---------------- Refresh ----------------

    def _refresh_overlay(self) -> None:
        frame = self.projector.project(
            self.session.current_active(),
            self.player.intrinsic_size(),
            self.player.displayed_size(),
        )
        self.player.set_overlay_frame(frame)

    def _refresh_rows(self, full: bool) -> None:
        rows = build_rows(self.session.active_annotations(), self.sync.current_time)
        if full:
            self.table.set_rows(rows)
        else:
            self.table.update_playing(rows)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        if hasattr(self, "sync"):
            self._refresh_overlay()

    def closeEvent(self, event):
        self.session.close()
        self.player.release()
        super().closeEvent(event)
