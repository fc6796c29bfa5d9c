# annote_review/timeutils.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List


# -----------------------------
# Second buckets
# -----------------------------

def ms_to_bucket(ms: int) -> int:
    """round(ms / 1000) with halves rounded up (1500 -> 2, 2500 -> 3)."""
    return (int(ms) + 500) // 1000


def seconds_to_bucket(sec: float) -> int:
    """Same rounding as ms_to_bucket, for a float playback position."""
    if sec is None or math.isnan(sec):
        return 0
    return int(math.floor(float(sec) + 0.5))


def ms_to_span(duration_ms: int) -> int:
    """Number of one-second buckets a segment of duration_ms occupies."""
    return max(1, -(-int(duration_ms) // 1000))


# -----------------------------
# Time formatting
# -----------------------------

def ms_to_time_str(ms: int) -> str:
    if ms is None:
        ms = 0
    ms = max(0, int(ms))
    s = ms // 1000
    m = s // 60
    s = s % 60
    return f"{m:02d}:{s:02d}"


def seconds_to_timecode(sec: float) -> str:
    """HH:MM:SS.mmm"""
    if sec is None:
        sec = 0.0
    total_ms = max(0, int(round(float(sec) * 1000.0)))
    ms = total_ms % 1000
    s = total_ms // 1000
    h = s // 3600
    m = (s // 60) % 60
    s = s % 60
    return f"{h:02d}:{m:02d}:{s:02d}.{ms:03d}"


# -----------------------------
# Lane stacking for overlap rendering
# -----------------------------

@dataclass(frozen=True)
class Block:
    """A simplified block representation for waveform lane rendering (ms)."""
    idx: int
    start_ms: int
    end_ms: int


def stack_blocks_into_lanes(blocks: List[Block]) -> List[List[Block]]:
    """
    Greedy lane assignment:
      - Sort by start time then duration
      - Place each block into first lane that doesn't overlap
      - If none fits, create new lane

    Touching edges are allowed (end == next start is not an overlap).
    """
    norm = sorted(
        (Block(b.idx, min(b.start_ms, b.end_ms), max(b.start_ms, b.end_ms)) for b in blocks),
        key=lambda x: (x.start_ms, x.end_ms - x.start_ms),
    )
    lanes: List[List[Block]] = []
    for b in norm:
        for lane in lanes:
            if lane[-1].end_ms <= b.start_ms:
                lane.append(b)
                break
        else:
            lanes.append([b])
    return lanes
