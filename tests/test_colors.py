"""Tests for deterministic classifier/model colors."""

import re

from annote_review.colors import color, string_to_rgba


def test_same_input_same_color() -> None:
    assert color("violence", "modelA") == color("violence", "modelA")


def test_models_get_different_colors() -> None:
    assert color("violence", "modelA") != color("violence", "modelB")


def test_missing_model_matches_classifier_only() -> None:
    assert color("violence") == color("violence", None) == string_to_rgba("violence")


def test_channels_in_range() -> None:
    for key in ("violence", "nudity", "gunshot", "", "Ground-Truth"):
        c = string_to_rgba(key)
        assert 0 <= c.r <= 255 and 0 <= c.g <= 255 and 0 <= c.b <= 255
        assert c.a == 1.0


def test_formats() -> None:
    c = color("violence", "modelA")
    assert re.fullmatch(r"#[0-9A-F]{6}", c.hex())
    assert c.css() == f"rgba({c.r}, {c.g}, {c.b}, 1)"
    assert c.to_tuple() == (c.r, c.g, c.b, 1.0)
