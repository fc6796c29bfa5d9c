# annote_review/session.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .colors import RGBA, color
from .domain import Annotation, AnnotationSet, MediaDocument, ReviewConfig
from .errors import IndexConstructionSkipped
from .filters import FilterState, filter_active
from .loader import load_annotation_set
from .sync import PlaybackSynchronizer
from .time_index import TimeIndex, build_time_index

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WaveformPoint:
    time: float  # seconds
    label_text: str
    color: RGBA


@dataclass(frozen=True)
class WaveformSegment:
    start_time: float  # seconds
    end_time: float
    label_text: str
    color: RGBA


class ReviewSession:
    """
    Everything built for one loaded media.

    - annotation_set and the TimeIndex are built once and never change
      (a later change of the input lists is not picked up; use reindex() explicitly)
    - filter_state is the only mutable piece, toggled by the UI
    - the synchronizer, when attached, has its own lifecycle and is torn down by close()
    """

    def __init__(self, media: MediaDocument, annotation_set: AnnotationSet, config: Optional[ReviewConfig] = None):
        self.media = media
        self.config = config or ReviewConfig()
        self.annotation_set = annotation_set
        self.filter_state = FilterState.from_annotation_set(annotation_set)
        self.synchronizer: Optional[PlaybackSynchronizer] = None
        self._index: Optional[TimeIndex] = None

    @classmethod
    def from_media(cls, media: MediaDocument, config: Optional[ReviewConfig] = None, build_index: bool = True) -> "ReviewSession":
        config = config or ReviewConfig()
        aset = load_annotation_set(media.predictions, media.labels, config.ground_truth_model)
        session = cls(media, aset, config)
        if build_index:
            session.build_index()
        return session

    # ---------------- Time index ----------------

    def build_index(self) -> TimeIndex:
        if self._index is None:
            self._index = build_time_index(self.annotation_set)
        return self._index

    def is_indexed(self) -> bool:
        return self._index is not None

    def _require_index(self) -> TimeIndex:
        if self._index is None:
            raise IndexConstructionSkipped("time index not built yet")
        return self._index

    def reindex(self, predictions: Iterable[Dict], labels: Optional[Iterable[Dict]] = None) -> None:
        """
        Explicit rebuild from new input lists. Filter flags carry over for values
        that still exist; new values start enabled.
        """
        aset = load_annotation_set(predictions, labels, self.config.ground_truth_model)
        old = self.filter_state
        state = FilterState.from_annotation_set(aset)
        for c in state.classifier_enabled:
            state.classifier_enabled[c] = old.classifier_enabled.get(c, True)
        for m in state.model_enabled:
            state.model_enabled[m] = old.model_enabled.get(m, True)

        self.annotation_set = aset
        self.filter_state = state
        self._index = build_time_index(aset)
        logger.info("Re-indexed session '%s'", self.media.title)

    # ---------------- Lookups ----------------

    def active_at(self, second: int) -> List[Annotation]:
        try:
            index = self._require_index()
        except IndexConstructionSkipped:
            logger.debug("Lookup at %ss before index was built", second)
            return []
        return filter_active(index.bucket(second), self.filter_state)

    def active_annotations(self) -> List[Annotation]:
        """Listing rows: every annotation passing the filters, in time order."""
        return filter_active(self.annotation_set, self.filter_state)

    def current_second(self) -> int:
        return self.synchronizer.current_second if self.synchronizer is not None else 0

    def current_active(self) -> List[Annotation]:
        return self.active_at(self.current_second())

    # ---------------- Secondary engine markers ----------------

    def secondary_points(self) -> List[WaveformPoint]:
        return [
            WaveformPoint(time=a.time_seconds, label_text=a.classifier, color=color(a.classifier, a.model))
            for a in self.annotation_set.points()
            if a.has_box
        ]

    def secondary_segments(self) -> List[WaveformSegment]:
        return [
            WaveformSegment(
                start_time=a.time_seconds,
                end_time=a.end_seconds,
                label_text=a.classifier,
                color=color(a.classifier, a.model),
            )
            for a in self.annotation_set.segments()
        ]

    # ---------------- Lifecycle ----------------

    def attach_synchronizer(self, synchronizer: PlaybackSynchronizer) -> None:
        if self.synchronizer is not None and self.synchronizer is not synchronizer:
            self.synchronizer.teardown()
        self.synchronizer = synchronizer

    def close(self) -> None:
        if self.synchronizer is not None:
            self.synchronizer.teardown()
        logger.info("Closed session '%s'", self.media.title)
