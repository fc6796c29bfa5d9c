# annote_review/domain.py
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import ClassVar, Dict, Iterator, List, Optional, Tuple


GROUND_TRUTH_MODEL = "Ground-Truth"


class AnnotationKind(str, Enum):
    """Variant tag, assigned once when an annotation is loaded."""
    POINT = "point"
    SEGMENT = "segment"


# -----------------------------
# Field coercion helpers
# -----------------------------

def _number(d: Dict, key: str) -> float:
    if key not in d or d[key] is None:
        raise ValueError(f"missing '{key}'")
    v = d[key]
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ValueError(f"'{key}' must be a number, got {v!r}")
    if math.isnan(v) or math.isinf(v):
        raise ValueError(f"'{key}' must be finite")
    return float(v)


def _optional_number(d: Dict, key: str, default: Optional[float]) -> Optional[float]:
    if d.get(key) is None:
        return default
    return _number(d, key)


def _classifier(d: Dict) -> str:
    c = d.get("classifier")
    if not isinstance(c, str) or not c:
        raise ValueError("'classifier' must be a non-empty string")
    return c


def _whole_ms(d: Dict, key: str) -> int:
    v = _number(d, key)
    if not v.is_integer():
        raise ValueError(f"'{key}' must be whole milliseconds, got {v:g}")
    return int(v)


def _time_ms(d: Dict) -> int:
    t = _whole_ms(d, "time")
    if t < 0:
        raise ValueError(f"'time' must be >= 0, got {t}")
    return t


def _model(d: Dict) -> Optional[str]:
    m = d.get("model")
    if m is None:
        return None
    if not isinstance(m, str):
        raise ValueError(f"'model' must be a string, got {m!r}")
    return m


# -----------------------------
# Core Dataclasses
# -----------------------------

@dataclass(frozen=True, eq=False)
class Annotation:
    """
    A classified event anchored on the media timeline.

    time is in milliseconds relative to 0:00:00.000 of the source.
    Instances compare by identity: one instance is shared by every TimeIndex bucket it occupies.
    """
    classifier: str
    time: int
    confidence: Optional[float] = None   # 0..1 or 0..100 depending on source; kept as-is
    model: Optional[str] = None
    ground_truth: bool = False

    kind: ClassVar[AnnotationKind]

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raises ValueError when a field is out of range."""
        if not isinstance(self.classifier, str) or not self.classifier:
            raise ValueError("'classifier' must be a non-empty string")
        if isinstance(self.time, bool) or not isinstance(self.time, int):
            raise ValueError(f"'time' must be whole milliseconds, got {self.time!r}")
        if self.time < 0:
            raise ValueError(f"'time' must be >= 0, got {self.time}")

    @property
    def time_seconds(self) -> float:
        return self.time / 1000.0

    @property
    def has_model(self) -> bool:
        return bool(self.model)

    def color_key(self) -> Tuple[str, str]:
        return (self.classifier, self.model or "")

    def as_ground_truth(self, model: str = GROUND_TRUTH_MODEL) -> "Annotation":
        return replace(self, model=model, confidence=1.0, ground_truth=True)

    def media_kind_label(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True, eq=False)
class PointAnnotation(Annotation):
    """Single instant, optionally with a box in native (intrinsic) video coordinates."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    kind: ClassVar[AnnotationKind] = AnnotationKind.POINT

    @property
    def has_box(self) -> bool:
        return self.width > 0 and self.height > 0

    def media_kind_label(self) -> str:
        return "Video" if self.has_box else "Video (No Box)"

    @staticmethod
    def from_dict(d: Dict) -> "PointAnnotation":
        width = _optional_number(d, "width", 0.0)
        height = _optional_number(d, "height", 0.0)
        if width < 0 or height < 0:
            raise ValueError("box 'width'/'height' must be >= 0")
        return PointAnnotation(
            classifier=_classifier(d),
            time=_time_ms(d),
            confidence=_optional_number(d, "confidence", None),
            model=_model(d),
            x=_optional_number(d, "x", 0.0),
            y=_optional_number(d, "y", 0.0),
            width=width,
            height=height,
        )


@dataclass(frozen=True, eq=False)
class SegmentAnnotation(Annotation):
    """Interval on the timeline (audio-style event)."""
    duration: int = 0  # ms, > 0

    kind: ClassVar[AnnotationKind] = AnnotationKind.SEGMENT

    def validate(self) -> None:
        super().validate()
        if isinstance(self.duration, bool) or not isinstance(self.duration, int):
            raise ValueError(f"'duration' must be whole milliseconds, got {self.duration!r}")
        if self.duration <= 0:
            raise ValueError(f"'duration' must be > 0, got {self.duration}")

    @property
    def end_time(self) -> int:
        return self.time + self.duration

    @property
    def end_seconds(self) -> float:
        return self.end_time / 1000.0

    def media_kind_label(self) -> str:
        return "Audio"

    @staticmethod
    def from_dict(d: Dict) -> "SegmentAnnotation":
        duration = _whole_ms(d, "duration")
        return SegmentAnnotation(
            classifier=_classifier(d),
            time=_time_ms(d),
            confidence=_optional_number(d, "confidence", None),
            model=_model(d),
            duration=duration,
        )


def annotation_from_dict(d: Dict) -> Annotation:
    """
    Build the right variant from a raw JSON entry.
    This is the only place the presence of a 'duration' key is looked at.
    """
    if not isinstance(d, dict):
        raise ValueError(f"expected an object, got {type(d).__name__}")
    if "duration" in d:
        return SegmentAnnotation.from_dict(d)
    return PointAnnotation.from_dict(d)


@dataclass(frozen=True)
class AnnotationSet:
    """
    Merged, ascending-time annotations for one media.
    classifiers/models are the distinct values in first-seen order.
    """
    annotations: Tuple[Annotation, ...] = ()
    classifiers: Tuple[str, ...] = ()
    models: Tuple[str, ...] = ()

    def __iter__(self) -> Iterator[Annotation]:
        return iter(self.annotations)

    def __len__(self) -> int:
        return len(self.annotations)

    def __getitem__(self, idx: int) -> Annotation:
        return self.annotations[idx]

    def has_model_metadata(self) -> bool:
        return len(self.models) > 0

    def points(self) -> List[PointAnnotation]:
        return [a for a in self.annotations if a.kind is AnnotationKind.POINT]

    def segments(self) -> List[SegmentAnnotation]:
        return [a for a in self.annotations if a.kind is AnnotationKind.SEGMENT]


# -----------------------------
# Media document
# -----------------------------

@dataclass
class MediaDocument:
    """
    One reviewable media: title, optional source, raw predictions/labels as loaded from JSON.
    subtitles maps language -> url; carried but not wired to the player.
    """
    title: str
    source_url: Optional[str] = None
    predictions: List[Dict] = field(default_factory=list)
    labels: List[Dict] = field(default_factory=list)
    subtitles: Dict[str, str] = field(default_factory=dict)

    @staticmethod
    def from_dict(d: Dict) -> "MediaDocument":
        if not isinstance(d, dict):
            raise ValueError("media document must be a JSON object")
        predictions = d.get("predictions") or []
        labels = d.get("labels") or []
        if not isinstance(predictions, list) or not isinstance(labels, list):
            raise ValueError("'predictions' and 'labels' must be lists")
        subtitles = d.get("subtitles") or {}
        return MediaDocument(
            title=str(d.get("title", "")),
            source_url=(str(d["sourceUrl"]) if d.get("sourceUrl") else None),
            predictions=list(predictions),
            labels=list(labels),
            subtitles={str(k): str(v) for k, v in dict(subtitles).items()},
        )


# -----------------------------
# Config payload
# -----------------------------

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _flag(d: Dict, key: str, default: bool) -> bool:
    v = d.get(key, default)
    if not isinstance(v, bool):
        raise ValueError(f"'{key}' must be true or false, got {v!r}")
    return v


@dataclass
class ReviewConfig:
    """
    Stored in config.json (see persistence.load_config / save_config).
    """
    progress_interval_ms: int = 250     # primary engine progress tick
    max_drift_ms: int = 200             # secondary is re-seeked past this drift while playing
    ground_truth_model: str = GROUND_TRUTH_MODEL
    point_marker_color: str = "#006eb0"
    default_display_width: int = 640
    default_display_height: int = 360
    enable_waveform: bool = True
    log_level: str = "INFO"

    def validate(self) -> None:
        if self.progress_interval_ms <= 0:
            raise ValueError("progress_interval_ms must be > 0")
        if self.max_drift_ms < 0:
            raise ValueError("max_drift_ms must be >= 0")
        if not self.ground_truth_model:
            raise ValueError("ground_truth_model cannot be empty")
        if self.default_display_width <= 0 or self.default_display_height <= 0:
            raise ValueError("default display size must be positive")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")

    def to_dict(self) -> Dict:
        return {
            "progress_interval_ms": int(self.progress_interval_ms),
            "max_drift_ms": int(self.max_drift_ms),
            "ground_truth_model": self.ground_truth_model,
            "point_marker_color": self.point_marker_color,
            "default_display_width": int(self.default_display_width),
            "default_display_height": int(self.default_display_height),
            "enable_waveform": bool(self.enable_waveform),
            "log_level": self.log_level,
            "config_version": 1,
        }

    @staticmethod
    def from_dict(d: Dict) -> "ReviewConfig":
        dflt = ReviewConfig()
        return ReviewConfig(
            progress_interval_ms=int(d.get("progress_interval_ms", dflt.progress_interval_ms)),
            max_drift_ms=int(d.get("max_drift_ms", dflt.max_drift_ms)),
            ground_truth_model=str(d.get("ground_truth_model", dflt.ground_truth_model)),
            point_marker_color=str(d.get("point_marker_color", dflt.point_marker_color)),
            default_display_width=int(d.get("default_display_width", dflt.default_display_width)),
            default_display_height=int(d.get("default_display_height", dflt.default_display_height)),
            enable_waveform=_flag(d, "enable_waveform", dflt.enable_waveform),
            log_level=str(d.get("log_level", dflt.log_level)).upper(),
        )
