# annote_review/persistence.py
from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Dict, Optional

from .domain import MediaDocument, ReviewConfig
from .errors import ConfigError

logger = logging.getLogger(__name__)


CONFIG_FILENAME = "config.json"
CONFIG_ENV_VAR = "ANNOTE_REVIEW_CONFIG"


# -----------------------------
# Atomic file helpers
# -----------------------------

def _atomic_write_text(path: str, text: str, encoding: str = "utf-8") -> None:
    d = os.path.dirname(path) or "."
    os.makedirs(d, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=".tmp_", dir=d)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


def _atomic_write_json(path: str, payload: Dict) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    _atomic_write_text(path, text + "\n")


def _read_json(path: str):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


# -----------------------------
# Config (config.json)
# -----------------------------

def default_config_path() -> str:
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return env
    return os.path.join(os.path.expanduser("~"), ".annote_review", CONFIG_FILENAME)


def load_config(path: Optional[str] = None) -> ReviewConfig:
    """
    Loads config.json. Missing file -> defaults. Unreadable or invalid -> ConfigError.
    """
    path = path or default_config_path()
    if not os.path.exists(path):
        logger.debug("No config at %s; using defaults", path)
        return ReviewConfig()
    try:
        data = _read_json(path)
        if not isinstance(data, dict):
            raise ValueError("config root must be a JSON object")
        cfg = ReviewConfig.from_dict(data)
        cfg.validate()
    except (OSError, ValueError, TypeError) as e:
        raise ConfigError(f"{path}: {e}") from e
    logger.info("Loaded config from %s", path)
    return cfg


def save_config(cfg: ReviewConfig, path: Optional[str] = None) -> str:
    """
    Saves config atomically. Returns the written path.
    """
    try:
        cfg.validate()
    except ValueError as e:
        raise ConfigError(str(e)) from e
    path = path or default_config_path()
    _atomic_write_json(path, cfg.to_dict())
    return path


# -----------------------------
# Media document (predictions/labels JSON)
# -----------------------------

def load_media(path: str) -> MediaDocument:
    """
    Reads a media JSON document:
      {"title": ..., "sourceUrl": ..., "predictions": [...], "labels": [...], "subtitles": {...}}

    A relative sourceUrl that names an existing local file is resolved against the document folder.
    """
    doc = MediaDocument.from_dict(_read_json(path))
    if not doc.title:
        doc.title = os.path.splitext(os.path.basename(path))[0]
    if doc.source_url and "://" not in doc.source_url and not os.path.isabs(doc.source_url):
        candidate = os.path.join(os.path.dirname(os.path.abspath(path)), doc.source_url)
        if os.path.exists(candidate):
            doc.source_url = candidate
    logger.info(
        "Loaded media '%s' (%d predictions, %d labels)",
        doc.title, len(doc.predictions), len(doc.labels),
    )
    return doc
