# annote_review/loader.py
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Union

from .domain import GROUND_TRUTH_MODEL, Annotation, AnnotationSet, annotation_from_dict
from .errors import MalformedAnnotation

logger = logging.getLogger(__name__)

RawOrBuilt = Union[Dict, Annotation]


def _build(entries: Iterable[RawOrBuilt], source: str) -> List[Annotation]:
    out: List[Annotation] = []
    for i, entry in enumerate(entries or []):
        try:
            if isinstance(entry, Annotation):
                entry.validate()
                out.append(entry)
            else:
                out.append(annotation_from_dict(entry))
        except (ValueError, TypeError) as e:
            raise MalformedAnnotation(source, i, str(e)) from e
    return out


def _distinct(values: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for v in values:
        if v and v not in seen:
            seen.add(v)
            out.append(v)
    return out


def load_annotation_set(
    predictions: Iterable[RawOrBuilt],
    labels: Optional[Iterable[RawOrBuilt]] = None,
    ground_truth_model: str = GROUND_TRUTH_MODEL,
) -> AnnotationSet:
    """
    Merge predictions and (optional) ground-truth labels into one AnnotationSet.

    - Labels become predictions with model=ground_truth_model and confidence=1.0
    - The merged list is sorted by time; ties keep input order (predictions first)
    - models: distinct non-empty model values (entries without a model add nothing)
    - classifiers: distinct classifier values

    Raises MalformedAnnotation for the first invalid entry.
    """
    preds = _build(predictions, "predictions")
    gts = [a.as_ground_truth(ground_truth_model) for a in _build(labels or [], "labels")]

    merged = sorted(preds + gts, key=lambda a: a.time)

    result = AnnotationSet(
        annotations=tuple(merged),
        classifiers=tuple(_distinct(a.classifier for a in merged)),
        models=tuple(_distinct(a.model or "" for a in merged)),
    )
    logger.info(
        "Loaded %d annotations (%d predictions, %d labels), %d classifiers, %d models",
        len(result), len(preds), len(gts), len(result.classifiers), len(result.models),
    )
    return result
