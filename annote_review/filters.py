# annote_review/filters.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .domain import Annotation, AnnotationSet


@dataclass
class FilterState:
    """
    Per-session enable flags for classifiers and source models.

    The key sets are fixed when the state is created from an AnnotationSet;
    only the boolean values change afterwards, one entry per toggle.
    """
    classifier_enabled: Dict[str, bool] = field(default_factory=dict)
    model_enabled: Dict[str, bool] = field(default_factory=dict)

    @staticmethod
    def from_annotation_set(annotation_set: AnnotationSet) -> "FilterState":
        return FilterState(
            classifier_enabled={c: True for c in annotation_set.classifiers},
            model_enabled={m: True for m in annotation_set.models},
        )

    def set_classifier(self, classifier: str, enabled: bool) -> None:
        if classifier not in self.classifier_enabled:
            raise KeyError(f"unknown classifier: {classifier!r}")
        self.classifier_enabled[classifier] = bool(enabled)

    def set_model(self, model: str, enabled: bool) -> None:
        if model not in self.model_enabled:
            raise KeyError(f"unknown model: {model!r}")
        self.model_enabled[model] = bool(enabled)

    def toggle_classifier(self, classifier: str) -> bool:
        self.set_classifier(classifier, not self.classifier_enabled.get(classifier, False))
        return self.classifier_enabled[classifier]

    def toggle_model(self, model: str) -> bool:
        self.set_model(model, not self.model_enabled.get(model, False))
        return self.model_enabled[model]


def is_active(annotation: Annotation, state: FilterState) -> bool:
    """Classifier must be enabled; the model must be too, unless the annotation has none."""
    if not state.classifier_enabled.get(annotation.classifier, False):
        return False
    if annotation.has_model:
        return state.model_enabled.get(annotation.model, False)
    return True


def filter_active(annotations: Iterable[Annotation], state: FilterState) -> List[Annotation]:
    return [a for a in annotations if is_active(a, state)]
