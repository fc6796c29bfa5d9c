# annote_review/app.py
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from PyQt5.QtWidgets import QApplication, QFileDialog, QMessageBox

from .domain import ReviewConfig
from .errors import ConfigError
from .main_window import MainWindow
from .persistence import load_config, load_media
from .session import ReviewSession

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-5s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="annote-review",
        description="Review model predictions and ground-truth labels on top of a playing video.",
    )
    p.add_argument("media", nargs="?", help="media JSON document (title, sourceUrl, predictions, labels)")
    p.add_argument("--config", default=None, help="path to config.json (default: $ANNOTE_REVIEW_CONFIG or ~/.annote_review/config.json)")
    p.add_argument("--log-level", default=None, help="override the configured log level (DEBUG, INFO, ...)")
    return p


def choose_media_file(parent=None) -> Optional[str]:
    path, _ = QFileDialog.getOpenFileName(parent, "Select Media Document", "", "Media JSON (*.json);;All files (*)")
    return path or None


def _load_config_or_default(path: Optional[str]) -> ReviewConfig:
    try:
        return load_config(path)
    except ConfigError as e:
        logger.error("Invalid config, using defaults: %s", e)
        return ReviewConfig()


def run_app(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(sys.argv[1:] if argv is None else argv)

    cfg = _load_config_or_default(args.config)
    level = (args.log_level or cfg.log_level).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO), stream=sys.stdout, format=LOG_FORMAT)

    app = QApplication(sys.argv[:1])

    media_path = args.media or choose_media_file()
    if not media_path:
        logger.info("No media document selected, exiting")
        return 0

    try:
        media = load_media(media_path)
        session = ReviewSession.from_media(media, cfg)
    except (OSError, ValueError) as e:
        # MalformedAnnotation is a ValueError
        logger.error("Cannot open %s: %s", media_path, e)
        QMessageBox.critical(None, "Cannot open media", f"{media_path}\n\n{e}")
        return 1

    win = MainWindow(session)
    win.show()
    return app.exec_()
