"""Tests for waveform peak reduction."""

import numpy as np
import pytest

from annote_review.peaks import PeakAccumulator, compute_peaks, pcm16_to_mono


def _pcm(values) -> bytes:
    return np.asarray(values, dtype="<i2").tobytes()


def test_pcm16_scaling() -> None:
    out = pcm16_to_mono(_pcm([0, 16384, -32768]), 1)
    assert out.dtype == np.float32
    assert out.tolist() == pytest.approx([0.0, 0.5, -1.0])


def test_stereo_downmix() -> None:
    out = pcm16_to_mono(_pcm([16384, 0, -16384, -16384]), 2)
    assert out.tolist() == pytest.approx([0.25, -0.5])


def test_peaks_min_max_per_bin() -> None:
    samples = np.array([0.1, -0.2, 0.3, 0.9, -0.8, 0.0], dtype=np.float32)
    peaks = compute_peaks(samples, 2)
    assert peaks.shape == (2, 2)
    assert peaks[0].tolist() == pytest.approx([-0.2, 0.3])
    assert peaks[1].tolist() == pytest.approx([-0.8, 0.9])


def test_empty_input_gives_zeros() -> None:
    peaks = compute_peaks(np.zeros(0), 4)
    assert peaks.shape == (4, 2)
    assert not peaks.any()


def test_bins_must_be_positive() -> None:
    with pytest.raises(ValueError):
        compute_peaks(np.zeros(10), 0)


def test_accumulator_duration_and_clear() -> None:
    acc = PeakAccumulator()
    acc.add(_pcm([0] * 8000), 1, 8000)
    acc.add(_pcm([0] * 4000), 1, 8000)
    assert acc.duration_seconds() == pytest.approx(1.5)
    assert acc.peaks(10).shape == (10, 2)

    acc.clear()
    assert acc.duration_seconds() == 0.0
