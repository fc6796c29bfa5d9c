# annote_review/__init__.py
'''
annote_review/
    __init__.py
    __main__.py

    app.py                 # argparse + logging + QApplication boot
    main_window.py         # QMainWindow layout + wiring

    domain.py              # dataclasses: Annotation variants, AnnotationSet, MediaDocument, ReviewConfig
    errors.py              # AnnotationReviewError hierarchy
    loader.py              # predictions + labels -> AnnotationSet
    time_index.py          # second -> annotations lookup
    filters.py             # classifier/model toggles + active test
    colors.py              # deterministic string -> RGBA
    overlay.py             # OverlayProjector: active annotations -> shapes in native coords
    sync.py                # PlaybackSynchronizer: primary clock + secondary mirroring
    session.py             # ReviewSession: everything built for one media
    listing.py             # table rows
    peaks.py               # PCM -> waveform min/max peaks (numpy)
    persistence.py         # config.json + media JSON
    timeutils.py           # ms<->seconds buckets, time strings, lane stacking

    widgets/
      media_player.py      # primary engine: QMediaPlayer + video + overlay layer
      waveform_view.py     # secondary engine: audio + waveform/regions view
      predictions_table.py # listing table with Seek buttons + playing highlight
      filter_panel.py      # classifier/model checklists
'''

from __future__ import annotations

__all__ = ["__version__", "run_app"]

__version__ = "0.1.0"


def run_app(argv=None) -> int:
    # Qt widget and multimedia modules load only when the GUI actually starts.
    from .app import run_app as _run_app
    return _run_app(argv)
