"""Tests for ReviewSession: lookups, re-indexing and secondary markers."""

import pytest

from annote_review.colors import color
from annote_review.domain import MediaDocument, ReviewConfig
from annote_review.session import ReviewSession
from annote_review.sync import PlaybackSynchronizer, SyncState
from conftest import FakePrimary, FakeSecondary


@pytest.fixture()
def session(media_doc: MediaDocument) -> ReviewSession:
    return ReviewSession.from_media(media_doc)


# ------------------------------------------------------------------
# Index lifecycle
# ------------------------------------------------------------------


def test_lookup_before_index_is_empty(media_doc) -> None:
    s = ReviewSession.from_media(media_doc, build_index=False)
    assert not s.is_indexed()
    assert s.active_at(3) == []

    s.build_index()
    assert s.is_indexed()
    assert len(s.active_at(3)) == 3


def test_build_index_is_idempotent(session) -> None:
    assert session.build_index() is session.build_index()


def test_active_at_applies_filters(session) -> None:
    session.filter_state.set_model("Ground-Truth", False)
    assert [a.model for a in session.active_at(3)] == ["modelA", "modelB"]
    assert [a.classifier for a in session.active_at(8)] == ["gunshot"]
    assert session.active_at(11) == []


def test_active_annotations_in_time_order(session) -> None:
    session.filter_state.set_classifier("nudity", False)
    times = [a.time for a in session.active_annotations()]
    assert times == [3000, 3000, 7000]


def test_reindex_keeps_filter_flags(session) -> None:
    session.filter_state.set_classifier("violence", False)
    session.reindex([
        {"classifier": "violence", "time": 1000},
        {"classifier": "explosion", "time": 2000},
    ])
    assert session.filter_state.classifier_enabled == {"violence": False, "explosion": True}
    assert [a.classifier for a in session.active_at(2)] == ["explosion"]
    assert session.active_at(1) == []


def test_ground_truth_model_from_config(media_doc) -> None:
    s = ReviewSession.from_media(media_doc, ReviewConfig(ground_truth_model="Reviewer"))
    assert "Reviewer" in s.annotation_set.models


# ------------------------------------------------------------------
# Secondary engine markers
# ------------------------------------------------------------------


def test_secondary_points_only_boxed(session) -> None:
    points = session.secondary_points()
    assert [(p.time, p.label_text) for p in points] == [(3.0, "violence"), (3.0, "violence")]
    assert points[0].color == color("violence", "modelA")


def test_secondary_segments_use_exact_seconds(session) -> None:
    segs = session.secondary_segments()
    assert len(segs) == 1
    assert segs[0].start_time == 7.0
    assert segs[0].end_time == 10.0
    assert segs[0].label_text == "gunshot"


# ------------------------------------------------------------------
# Synchronizer lifecycle
# ------------------------------------------------------------------


def test_current_active_follows_synchronizer(session) -> None:
    primary = FakePrimary()
    sync = PlaybackSynchronizer(primary)
    session.attach_synchronizer(sync)
    assert session.current_active() == []

    primary.progress.emit(2.6, 0.0)
    assert len(session.current_active()) == 3
    session.close()


def test_close_tears_down(session) -> None:
    sync = PlaybackSynchronizer(FakePrimary())
    secondary = FakeSecondary()
    session.attach_synchronizer(sync)
    sync.bind(secondary, object(), "/media/clip-01.mp4", [], [])

    session.close()
    assert sync.state is SyncState.CLOSED
    assert secondary.destroyed_count == 1


def test_attach_replaces_previous(session) -> None:
    first = PlaybackSynchronizer(FakePrimary())
    second = PlaybackSynchronizer(FakePrimary())
    session.attach_synchronizer(first)
    session.attach_synchronizer(second)
    assert first.state is SyncState.CLOSED
    assert session.synchronizer is second
    session.close()
