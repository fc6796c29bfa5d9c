# annote_review/peaks.py
from __future__ import annotations

import numpy as np


def pcm16_to_mono(data: bytes, channels: int) -> np.ndarray:
    """Interleaved signed 16-bit PCM -> float32 mono in [-1, 1]."""
    samples = np.frombuffer(data, dtype="<i2").astype(np.float32) / 32768.0
    channels = max(1, int(channels))
    if channels > 1:
        usable = (samples.size // channels) * channels
        samples = samples[:usable].reshape(-1, channels).mean(axis=1)
    return samples


def compute_peaks(samples: np.ndarray, bins: int) -> np.ndarray:
    """
    Reduce samples to `bins` (min, max) pairs, clipped to [-1, 1].
    Returns an array of shape (bins, 2); empty input gives zeros.
    """
    bins = int(bins)
    if bins <= 0:
        raise ValueError("bins must be > 0")
    out = np.zeros((bins, 2), dtype=np.float32)
    samples = np.asarray(samples, dtype=np.float32).ravel()
    if samples.size == 0:
        return out

    edges = np.linspace(0, samples.size, bins + 1).astype(np.int64)
    for i in range(bins):
        chunk = samples[edges[i]:edges[i + 1]]
        if chunk.size:
            out[i, 0] = chunk.min()
            out[i, 1] = chunk.max()
    return np.clip(out, -1.0, 1.0)


class PeakAccumulator:
    """Collects decoded PCM buffers while the waveform is being generated."""

    def __init__(self):
        self._chunks = []
        self.sample_rate = 0

    def add(self, data: bytes, channels: int, sample_rate: int) -> None:
        self.sample_rate = int(sample_rate)
        self._chunks.append(pcm16_to_mono(data, channels))

    def duration_seconds(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return sum(c.size for c in self._chunks) / float(self.sample_rate)

    def peaks(self, bins: int) -> np.ndarray:
        if not self._chunks:
            return compute_peaks(np.zeros(0, dtype=np.float32), bins)
        return compute_peaks(np.concatenate(self._chunks), bins)

    def clear(self) -> None:
        self._chunks = []
