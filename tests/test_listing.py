"""Tests for the annotation listing rows."""

from annote_review.colors import color
from annote_review.domain import PointAnnotation, SegmentAnnotation
from annote_review.listing import TABLE_COLUMNS, build_rows, first_playing_row, time_code


def test_columns() -> None:
    assert TABLE_COLUMNS[:5] == ["Time", "Classifier", "Model", "Confidence", "Video/Audio"]


def test_point_row() -> None:
    a = PointAnnotation("violence", 3000, confidence=0.9, model="modelA", x=1, y=1, width=5, height=5)
    row = build_rows([a], 0.0)[0]
    assert row.time_code == "00:00:03.000"
    assert row.classifier == "violence"
    assert row.model == "modelA"
    assert row.confidence == "0.9"
    assert row.media_kind == "Video"
    assert row.color == color("violence", "modelA")
    assert row.annotation is a


def test_segment_time_range() -> None:
    seg = SegmentAnnotation("gunshot", 61500, duration=2250)
    assert time_code(seg) == "00:01:01.500 - 00:01:03.750"
    assert build_rows([seg], 0.0)[0].media_kind == "Audio"


def test_placeholders() -> None:
    row = build_rows([PointAnnotation("nudity", 0)], 0.0)[0]
    assert row.model == "---"
    assert row.confidence == "1.00"
    assert row.media_kind == "Video (No Box)"


def test_playing_rows() -> None:
    rows = build_rows(
        [PointAnnotation("a", 1000), PointAnnotation("b", 2600), PointAnnotation("c", 3400)],
        current_seconds=2.7,
    )
    assert [r.is_playing for r in rows] == [False, True, True]
    assert first_playing_row(rows) == 1


def test_no_playing_row() -> None:
    rows = build_rows([PointAnnotation("a", 1000)], current_seconds=9.0)
    assert first_playing_row(rows) is None
