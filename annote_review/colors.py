# annote_review/colors.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class RGBA:
    r: int
    g: int
    b: int
    a: float = 1.0

    def hex(self) -> str:
        return _rgb_to_hex((self.r, self.g, self.b))

    def css(self) -> str:
        return f"rgba({self.r}, {self.g}, {self.b}, {self.a:g})"

    def to_tuple(self) -> Tuple[int, int, int, float]:
        return (self.r, self.g, self.b, self.a)


def _rgb_to_hex(rgb: Tuple[int, int, int]) -> str:
    r, g, b = rgb
    r = max(0, min(int(r), 255))
    g = max(0, min(int(g), 255))
    b = max(0, min(int(b), 255))
    return f"#{r:02X}{g:02X}{b:02X}"


def _string_hash(s: str) -> int:
    """
    32-bit string hash: (h << 5) - h + code point, then a murmur3 finalizer
    so that keys differing in one trailing character still land far apart.
    Independent of PYTHONHASHSEED.
    """
    h = 0
    for ch in s:
        h = (ord(ch) + ((h << 5) - h)) & 0xFFFFFFFF
    h ^= h >> 16
    h = (h * 0x85EBCA6B) & 0xFFFFFFFF
    h ^= h >> 13
    h = (h * 0xC2B2AE35) & 0xFFFFFFFF
    h ^= h >> 16
    return h


def string_to_rgba(s: str, alpha: float = 1.0) -> RGBA:
    h = _string_hash(s or "")
    return RGBA(
        r=(h >> 0) & 0xFF,
        g=(h >> 8) & 0xFF,
        b=(h >> 16) & 0xFF,
        a=float(alpha),
    )


def color(classifier: str, model: Optional[str] = None) -> RGBA:
    """Color shared by the overlay, the waveform markers and the table for a classifier/model pair."""
    return string_to_rgba((classifier or "") + (model or ""), alpha=1.0)
