# annote_review/listing.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .colors import RGBA, color
from .domain import Annotation, AnnotationKind
from .timeutils import ms_to_bucket, seconds_to_bucket, seconds_to_timecode


TABLE_COLUMNS = ["Time", "Classifier", "Model", "Confidence", "Video/Audio", ""]


@dataclass(frozen=True)
class ListingRow:
    annotation: Annotation
    time_code: str
    classifier: str
    model: str
    confidence: str
    media_kind: str
    color: RGBA
    is_playing: bool


def time_code(a: Annotation) -> str:
    if a.kind is AnnotationKind.SEGMENT:
        return f"{seconds_to_timecode(a.time_seconds)} - {seconds_to_timecode(a.end_seconds)}"
    return seconds_to_timecode(a.time_seconds)


def _confidence_text(a: Annotation) -> str:
    if a.confidence is None:
        return "1.00"
    return f"{a.confidence:g}"


def build_rows(annotations: List[Annotation], current_seconds: float) -> List[ListingRow]:
    """
    One row per annotation (already filtered, in time order).
    A row is "playing" when its start second equals the current second.
    """
    now = seconds_to_bucket(current_seconds)
    rows: List[ListingRow] = []
    for a in annotations:
        rows.append(ListingRow(
            annotation=a,
            time_code=time_code(a),
            classifier=a.classifier,
            model=a.model or "---",
            confidence=_confidence_text(a),
            media_kind=a.media_kind_label(),
            color=color(a.classifier, a.model),
            is_playing=(ms_to_bucket(a.time) == now),
        ))
    return rows


def first_playing_row(rows: List[ListingRow]) -> Optional[int]:
    for i, r in enumerate(rows):
        if r.is_playing:
            return i
    return None
