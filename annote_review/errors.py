# annote_review/errors.py
from __future__ import annotations


class AnnotationReviewError(Exception):
    """Base class for every error raised by annote_review."""


class MalformedAnnotation(AnnotationReviewError, ValueError):
    """
    An input annotation is missing a required field or carries an invalid value.
    Raised at load time so nothing gets mis-bucketed later.
    """

    def __init__(self, source: str, position: int, reason: str):
        self.source = source
        self.position = int(position)
        self.reason = reason
        super().__init__(f"{source}[{self.position}]: {reason}")


class IndexConstructionSkipped(AnnotationReviewError):
    """A bucket lookup happened before the TimeIndex was built."""


class SecondaryEngineInitFailed(AnnotationReviewError):
    """The secondary (waveform) engine reported a fatal initialization error."""


class DimensionsUnavailable(AnnotationReviewError):
    """Native media dimensions are not known yet; overlay cannot be scaled."""


class ConfigError(AnnotationReviewError, ValueError):
    """Invalid value in config.json."""
