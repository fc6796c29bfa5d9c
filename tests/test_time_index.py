"""Tests for the second -> annotations lookup."""

from collections import Counter

import pytest

from annote_review.domain import PointAnnotation, SegmentAnnotation
from annote_review.errors import MalformedAnnotation
from annote_review.loader import load_annotation_set
from annote_review.time_index import build_time_index, occupied_seconds


# ------------------------------------------------------------------
# Placement
# ------------------------------------------------------------------


@pytest.mark.parametrize("ms, second", [
    (0, 0),
    (499, 0),
    (500, 1),
    (1499, 1),
    (1500, 2),
    (2500, 3),
    (3000, 3),
])
def test_point_bucket_rounds_half_up(ms, second) -> None:
    assert list(occupied_seconds(PointAnnotation("x", ms))) == [second]


def test_segment_span() -> None:
    seg = SegmentAnnotation("gunshot", 7000, duration=3000)
    assert list(occupied_seconds(seg)) == [7, 8, 9]


def test_short_segment_occupies_one_second() -> None:
    seg = SegmentAnnotation("click", 4000, duration=200)
    assert list(occupied_seconds(seg)) == [4]


def test_partial_second_rounds_span_up() -> None:
    seg = SegmentAnnotation("gunshot", 7000, duration=2001)
    assert list(occupied_seconds(seg)) == [7, 8, 9]


# ------------------------------------------------------------------
# Index
# ------------------------------------------------------------------


def test_scenario_buckets(scenario_predictions) -> None:
    aset = load_annotation_set(scenario_predictions)
    index = build_time_index(aset)

    assert [a.classifier for a in index.bucket(3)] == ["violence"]
    assert [a.classifier for a in index.bucket(10)] == ["nudity"]
    assert index.occupied_seconds() == [3, 10]
    for second in range(0, 20):
        if second not in (3, 10):
            assert index.bucket(second) == ()


def test_lossless(mixed_predictions, sample_labels) -> None:
    aset = load_annotation_set(mixed_predictions, sample_labels)
    index = build_time_index(aset)
    members = list(index.memberships())

    for a in aset:
        expected = set(occupied_seconds(a))
        found = {s for s, m in members if m is a}
        assert found == expected


def test_buckets_share_instances() -> None:
    seg = SegmentAnnotation("gunshot", 7000, duration=3000)
    aset = load_annotation_set([seg])
    index = build_time_index(aset)
    assert index.bucket(7)[0] is index.bucket(9)[0] is seg


def test_bucket_keeps_set_order(mixed_predictions, sample_labels) -> None:
    aset = load_annotation_set(mixed_predictions, sample_labels)
    index = build_time_index(aset)
    assert [a.model for a in index.bucket(3)] == ["modelA", "modelB", "Ground-Truth"]


def test_index_is_read_only() -> None:
    index = build_time_index(load_annotation_set([{"classifier": "x", "time": 0}]))
    with pytest.raises(TypeError):
        index._buckets[5] = ()
    assert 0 in index
    assert len(index) == 1


def test_fractional_time_never_reaches_a_bucket() -> None:
    with pytest.raises(MalformedAnnotation):
        build_time_index(load_annotation_set([{"classifier": "x", "time": 1499.5}]))
    index = build_time_index(load_annotation_set([{"classifier": "x", "time": 1499.0}]))
    assert index.occupied_seconds() == [1]


def test_no_duplicate_memberships(mixed_predictions, sample_labels) -> None:
    aset = load_annotation_set(mixed_predictions, sample_labels)
    index = build_time_index(aset)

    found = Counter((s, id(a)) for s, a in index.memberships())
    expected = Counter((s, id(a)) for a in aset for s in occupied_seconds(a))
    assert found == expected
    assert max(found.values()) == 1
