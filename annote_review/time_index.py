# annote_review/time_index.py
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Tuple

from .domain import Annotation, AnnotationKind, AnnotationSet
from .timeutils import ms_to_bucket, ms_to_span

logger = logging.getLogger(__name__)


def occupied_seconds(annotation: Annotation) -> range:
    """
    The integer seconds an annotation occupies:
      - start at round(time / 1000), halves up
      - points occupy 1 second, segments ceil(duration / 1000)
    """
    start = ms_to_bucket(annotation.time)
    span = 1
    if annotation.kind is AnnotationKind.SEGMENT:
        span = ms_to_span(annotation.duration)
    return range(start, start + span)


class TimeIndex:
    """
    Immutable second -> annotations map. Buckets hold references, in AnnotationSet order.
    """

    def __init__(self, buckets: Dict[int, Tuple[Annotation, ...]]):
        self._buckets: Mapping[int, Tuple[Annotation, ...]] = MappingProxyType(dict(buckets))

    def bucket(self, second: int) -> Tuple[Annotation, ...]:
        return self._buckets.get(int(second), ())

    def __contains__(self, second: int) -> bool:
        return int(second) in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)

    def occupied_seconds(self) -> List[int]:
        return sorted(self._buckets.keys())

    def memberships(self) -> Iterator[Tuple[int, Annotation]]:
        for second in self.occupied_seconds():
            for a in self._buckets[second]:
                yield second, a


def build_time_index(annotation_set: AnnotationSet) -> TimeIndex:
    buckets: Dict[int, List[Annotation]] = {}
    for a in annotation_set:
        for second in occupied_seconds(a):
            buckets.setdefault(second, []).append(a)

    index = TimeIndex({k: tuple(v) for k, v in buckets.items()})
    logger.debug("Built time index: %d buckets for %d annotations", len(index), len(annotation_set))
    return index
