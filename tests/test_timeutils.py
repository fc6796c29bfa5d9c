"""Tests for bucket rounding, time strings and lane stacking."""

import pytest

from annote_review.timeutils import (
    Block,
    ms_to_bucket,
    ms_to_span,
    ms_to_time_str,
    seconds_to_bucket,
    seconds_to_timecode,
    stack_blocks_into_lanes,
)


# ------------------------------------------------------------------
# Rounding
# ------------------------------------------------------------------


@pytest.mark.parametrize("ms, sec", [(1500, 1.5), (2500, 2.5), (2499, 2.499), (0, 0.0)])
def test_ms_and_seconds_agree(ms, sec) -> None:
    assert ms_to_bucket(ms) == seconds_to_bucket(sec)


def test_half_rounds_up() -> None:
    assert ms_to_bucket(1500) == 2
    assert ms_to_bucket(2500) == 3


def test_seconds_bucket_nan() -> None:
    assert seconds_to_bucket(float("nan")) == 0


@pytest.mark.parametrize("duration, span", [(1, 1), (1000, 1), (1001, 2), (3000, 3)])
def test_span(duration, span) -> None:
    assert ms_to_span(duration) == span


# ------------------------------------------------------------------
# Formatting
# ------------------------------------------------------------------


def test_time_str() -> None:
    assert ms_to_time_str(0) == "00:00"
    assert ms_to_time_str(125_400) == "02:05"
    assert ms_to_time_str(None) == "00:00"


def test_timecode() -> None:
    assert seconds_to_timecode(3.0) == "00:00:03.000"
    assert seconds_to_timecode(3725.042) == "01:02:05.042"


# ------------------------------------------------------------------
# Lanes
# ------------------------------------------------------------------


def test_overlaps_go_to_new_lanes() -> None:
    lanes = stack_blocks_into_lanes([
        Block(0, 0, 3000),
        Block(1, 1000, 2000),
        Block(2, 3000, 4000),
    ])
    assert [[b.idx for b in lane] for lane in lanes] == [[0, 2], [1]]


def test_no_blocks() -> None:
    assert stack_blocks_into_lanes([]) == []
