# annote_review/overlay.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from .colors import RGBA, color
from .domain import Annotation, AnnotationKind
from .errors import DimensionsUnavailable

logger = logging.getLogger(__name__)


class ShapeKind(str, Enum):
    BOX = "box"
    MARKER = "marker"              # point annotation indicator
    AUDIO_MARKER = "audio_marker"  # segment annotation indicator


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    def is_valid(self) -> bool:
        return self.width > 0 and self.height > 0


@dataclass(frozen=True)
class OverlayTransform:
    """Single scale applied to the whole drawing layer (native -> displayed)."""
    scale_x: float
    scale_y: float

    def map_rect(self, x: float, y: float, w: float, h: float) -> Tuple[float, float, float, float]:
        return (x * self.scale_x, y * self.scale_y, w * self.scale_x, h * self.scale_y)


@dataclass(frozen=True)
class OverlayShape:
    """A shape in native video coordinates."""
    kind: ShapeKind
    annotation: Annotation
    x: float
    y: float
    width: float
    height: float
    color: RGBA


@dataclass(frozen=True)
class OverlayFrame:
    ready: bool
    transform: Optional[OverlayTransform] = None
    shapes: Tuple[OverlayShape, ...] = ()


NOT_READY = OverlayFrame(ready=False)


class OverlayProjector:
    """
    Maps the active annotations of the current second onto the primary engine's picture.

    Markers are placed at a fixed spot (top-left), sized relative to the native height,
    as icons: one per point annotation, and one per segment annotation just below.
    """

    MARKER_MARGIN = 20.0

    def __init__(self, color_fn: Callable[[str, Optional[str]], RGBA] = color):
        self._color_fn = color_fn

    def transform(self, native: Size, displayed: Size) -> OverlayTransform:
        if not native.is_valid():
            raise DimensionsUnavailable(f"native size not known yet ({native.width}x{native.height})")
        if not displayed.is_valid():
            raise DimensionsUnavailable(f"displayed size not known yet ({displayed.width}x{displayed.height})")
        return OverlayTransform(
            scale_x=displayed.width / native.width,
            scale_y=displayed.height / native.height,
        )

    def project(self, active: Iterable[Annotation], native: Size, displayed: Size) -> OverlayFrame:
        try:
            tf = self.transform(native, displayed)
        except DimensionsUnavailable as e:
            logger.debug("Overlay suppressed: %s", e)
            return NOT_READY

        marker = native.height / 10.0
        m = self.MARKER_MARGIN
        boxes: List[OverlayShape] = []
        markers: List[OverlayShape] = []
        audio: List[OverlayShape] = []

        for a in active:
            c = self._color_fn(a.classifier, a.model)
            if a.kind is AnnotationKind.SEGMENT:
                audio.append(OverlayShape(ShapeKind.AUDIO_MARKER, a, m, 2 * m + marker, marker, marker, c))
                continue
            if a.has_box:
                boxes.append(OverlayShape(ShapeKind.BOX, a, a.x, a.y, a.width, a.height, c))
            markers.append(OverlayShape(ShapeKind.MARKER, a, m, m, marker, marker, c))

        return OverlayFrame(ready=True, transform=tf, shapes=tuple(boxes + markers + audio))


def fit_size(native: Size, area: Size) -> Size:
    """Largest size with native's aspect ratio that fits in area (letterboxed video)."""
    if not native.is_valid() or not area.is_valid():
        return Size(0.0, 0.0)
    k = min(area.width / native.width, area.height / native.height)
    return Size(native.width * k, native.height * k)
