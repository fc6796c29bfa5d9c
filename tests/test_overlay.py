"""Tests for projecting active annotations onto the video picture."""

import pytest

from annote_review.domain import PointAnnotation, SegmentAnnotation
from annote_review.errors import DimensionsUnavailable
from annote_review.overlay import NOT_READY, OverlayProjector, ShapeKind, Size, fit_size


@pytest.fixture()
def projector() -> OverlayProjector:
    return OverlayProjector()


BOXED = PointAnnotation("violence", 3000, model="modelA", x=100, y=50, width=200, height=80)
NO_BOX = PointAnnotation("nudity", 3000)
AUDIO = SegmentAnnotation("gunshot", 3000, duration=2000)


# ------------------------------------------------------------------
# Readiness
# ------------------------------------------------------------------


@pytest.mark.parametrize("native, displayed", [
    (Size(0, 0), Size(640, 360)),
    (Size(1280, 720), Size(0, 0)),
    (Size(1280, 0), Size(640, 360)),
])
def test_not_ready_without_dimensions(projector, native, displayed) -> None:
    assert projector.project([BOXED], native, displayed) is NOT_READY


def test_transform_raises(projector) -> None:
    with pytest.raises(DimensionsUnavailable):
        projector.transform(Size(0, 0), Size(640, 360))


def test_single_scale(projector) -> None:
    tf = projector.transform(Size(1280, 720), Size(640, 360))
    assert tf.scale_x == pytest.approx(0.5)
    assert tf.scale_y == pytest.approx(0.5)
    assert tf.map_rect(100, 50, 200, 80) == pytest.approx((50, 25, 100, 40))


# ------------------------------------------------------------------
# Shapes
# ------------------------------------------------------------------


def test_box_and_marker_for_boxed_point(projector) -> None:
    frame = projector.project([BOXED], Size(1280, 720), Size(640, 360))
    assert frame.ready
    kinds = [s.kind for s in frame.shapes]
    assert kinds == [ShapeKind.BOX, ShapeKind.MARKER]
    box = frame.shapes[0]
    assert (box.x, box.y, box.width, box.height) == (100, 50, 200, 80)
    assert box.annotation is BOXED


def test_marker_only_without_box(projector) -> None:
    frame = projector.project([NO_BOX], Size(1280, 720), Size(640, 360))
    assert [s.kind for s in frame.shapes] == [ShapeKind.MARKER]
    marker = frame.shapes[0]
    assert marker.width == pytest.approx(72.0)
    assert (marker.x, marker.y) == (20.0, 20.0)


def test_audio_marker_below_video_marker(projector) -> None:
    frame = projector.project([AUDIO, NO_BOX], Size(1280, 720), Size(640, 360))
    assert [s.kind for s in frame.shapes] == [ShapeKind.MARKER, ShapeKind.AUDIO_MARKER]
    audio = frame.shapes[1]
    assert audio.y == pytest.approx(2 * 20.0 + 72.0)


def test_shape_colors_follow_annotation(projector) -> None:
    frame = projector.project([BOXED], Size(1280, 720), Size(640, 360))
    assert frame.shapes[0].color == frame.shapes[1].color


def test_empty_active_set_is_ready(projector) -> None:
    frame = projector.project([], Size(1280, 720), Size(640, 360))
    assert frame.ready
    assert frame.shapes == ()


# ------------------------------------------------------------------
# Letterbox fitting
# ------------------------------------------------------------------


def test_fit_size_keeps_aspect() -> None:
    shown = fit_size(Size(1920, 1080), Size(800, 800))
    assert shown.width == pytest.approx(800)
    assert shown.height == pytest.approx(450)


def test_fit_size_invalid() -> None:
    assert not fit_size(Size(0, 0), Size(800, 600)).is_valid()
