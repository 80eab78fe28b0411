"""Tests for cuesight.detection.classifier: colour rules and stripe refiner."""

import math

import cv2
import numpy as np
import pytest

from cuesight.detection.classifier import (
    FALLBACK_CONFIDENCE,
    FALLBACK_NAME,
    STRIPE_CONFIDENCE_FACTOR,
    classify_ball_color,
    classify_with_pattern,
    color_confidence,
    count_value_transitions,
    has_striped_pattern,
    is_striped,
    match_color,
    sample_ring_values,
)
from cuesight.detection.colors import HSVColor, RGBColor, rgb_to_hsv
from cuesight.detection.ranges import (
    BALL_COLORS,
    POOL_COLOR_RANGES,
    SNOOKER_COLOR_RANGES,
    ColorRange,
    GameMode,
)

YELLOW = (230, 230, 34)
DARK_RED = (100, 0, 0)


def _make_frame(width=100, height=100, rgb=(20, 150, 160)):
    """Solid RGBA frame (default: pool-table cyan)."""
    frame = np.zeros((height, width, 4), dtype=np.uint8)
    frame[..., :3] = rgb
    frame[..., 3] = 255
    return frame


def _draw_ball(frame, center=(50, 50), radius=30, rgb=YELLOW):
    cv2.circle(frame, center, radius, (*rgb, 255), -1)
    return frame


def _draw_striped_ball(frame, center=(50, 50), radius=30, light=YELLOW, dark=DARK_RED):
    """Ball whose 16 angular sectors alternate between two brightnesses."""
    h, w = frame.shape[:2]
    yy, xx = np.mgrid[0:h, 0:w]
    dx, dy = xx - center[0], yy - center[1]
    inside = dx * dx + dy * dy <= radius * radius
    sector = np.floor((np.arctan2(dy, dx) + math.pi / 16) / (math.pi / 8)).astype(int) % 2
    frame[inside & (sector == 0), :3] = light
    frame[inside & (sector == 1), :3] = dark
    return frame


def _rule(name, lo, hi, confidence=1.0):
    return ColorRange(name, name, HSVColor(*lo), HSVColor(*hi), confidence)


class TestColorConfidence:
    def test_center_scores_prior(self):
        rng = _rule("x", (40, 40, 40), (80, 80, 80), confidence=0.8)
        assert color_confidence(HSVColor(60, 60, 60), rng) == pytest.approx(0.8)

    def test_corner_scores_lower(self):
        rng = _rule("x", (40, 40, 40), (80, 80, 80))
        center = color_confidence(HSVColor(60, 60, 60), rng)
        corner = color_confidence(HSVColor(80, 80, 80), rng)
        assert 0 <= corner < center

    def test_zero_width_span_does_not_divide_by_zero(self):
        rng = _rule("x", (50, 50, 50), (50, 50, 50))
        assert color_confidence(HSVColor(50, 50, 50), rng) == pytest.approx(1.0)

    def test_wrapping_hue_centre(self):
        """A 340 -> 20 range is centred on 0."""
        rng = _rule("x", (340, 0, 0), (20, 100, 100))
        at_zero = color_confidence(HSVColor(0, 50, 50), rng)
        at_edge = color_confidence(HSVColor(339, 50, 50), rng)
        assert at_zero == pytest.approx(1.0)
        assert at_edge < at_zero

    def test_full_circle_hue_ignored(self):
        rng = POOL_COLOR_RANGES[0]  # cue: hue 0-360
        a = color_confidence(HSVColor(0, 5, 95), rng)
        b = color_confidence(HSVColor(200, 5, 95), rng)
        assert a == pytest.approx(b)


class TestMatchColor:
    def test_overlap_keeps_best_rule(self):
        """Yellow sits in both Ball 1 and the stripe catch-all; Ball 1 wins."""
        c = match_color(rgb_to_hsv(RGBColor(*YELLOW)), POOL_COLOR_RANGES)
        assert c.color_name == "Ball 1 (Yellow)"
        assert c.ball_type == "solids"
        assert c.confidence == pytest.approx(0.58, abs=0.02)

    def test_snooker_yellow(self):
        c = match_color(rgb_to_hsv(RGBColor(*YELLOW)), SNOOKER_COLOR_RANGES)
        assert c.ball_type == "yellow"
        assert c.hex_color == BALL_COLORS["yellow"]
        assert c.confidence > 0.8

    def test_no_rule_falls_back_to_cue(self):
        """Saturated purple matches nothing in the snooker table."""
        c = match_color(rgb_to_hsv(RGBColor(128, 0, 128)), SNOOKER_COLOR_RANGES)
        assert c.ball_type == "cue"
        assert c.confidence == FALLBACK_CONFIDENCE
        assert c.color_name == FALLBACK_NAME

    def test_weak_match_falls_back(self):
        rng = _rule("weak", (0, 0, 0), (360, 100, 100), confidence=0.2)
        c = match_color(HSVColor(10, 50, 50), [rng])
        assert c.ball_type == "cue"
        assert c.confidence == FALLBACK_CONFIDENCE


class TestClassifyBallColor:
    @pytest.mark.parametrize("mode", [GameMode.POOL, GameMode.SNOOKER])
    def test_off_white_is_cue(self, mode):
        frame = _make_frame(rgb=(250, 250, 248))
        c = classify_ball_color(frame, 50, 50, 20, mode)
        assert c.ball_type == "cue"
        assert c.confidence >= 0.5

    def test_black_pool_ball_is_eight(self):
        frame = _draw_ball(_make_frame(), rgb=(20, 20, 20))
        c = classify_ball_color(frame, 50, 50, 30, "pool")
        assert c.ball_type == "eight"

    def test_uses_inner_disk_only(self):
        """The felt ring around a small ball does not pollute its colour."""
        frame = _draw_ball(_make_frame(), radius=30, rgb=YELLOW)
        c = classify_ball_color(frame, 50, 50, 40, "snooker")
        assert c.ball_type == "yellow"

    def test_unknown_mode_raises(self):
        with pytest.raises(ValueError):
            classify_ball_color(_make_frame(), 50, 50, 10, "carom")


class TestStripeHelpers:
    def test_alternating_values_are_striped(self):
        values = [90.0, 20.0] * 8
        assert count_value_transitions(values) == 15
        assert is_striped(values)

    def test_constant_values_are_solid(self):
        values = [80.0] * 16
        assert count_value_transitions(values) == 0
        assert not is_striped(values)

    def test_transitions_do_not_wrap(self):
        """Last-to-first is not counted."""
        values = [90.0] + [20.0] * 15
        assert count_value_transitions(values) == 1

    def test_small_jumps_ignored(self):
        assert count_value_transitions([50.0, 70.0, 50.0, 70.0]) == 0

    def test_ring_skips_out_of_frame_points(self):
        frame = _make_frame(width=40, height=40)
        values = sample_ring_values(frame, 0, 20, 20)
        assert 0 < len(values) < 16

    def test_mostly_out_of_frame_is_not_striped(self):
        frame = _draw_striped_ball(_make_frame(), center=(50, 50))
        assert not has_striped_pattern(frame, -12, 50, 30)


class TestClassifyWithPattern:
    def test_uniform_colour_becomes_solids(self):
        frame = _draw_ball(_make_frame(), rgb=YELLOW)
        c = classify_with_pattern(frame, 50, 50, 30, GameMode.POOL)
        assert c.ball_type == "solids"
        assert c.hex_color == BALL_COLORS["solids"]
        assert c.color_name == "Ball 1 (Yellow)"

    def test_sector_pattern_becomes_stripes(self):
        frame = _draw_striped_ball(_make_frame())
        assert has_striped_pattern(frame, 50, 50, 30)

        base = classify_ball_color(frame, 50, 50, 30, GameMode.POOL)
        c = classify_with_pattern(frame, 50, 50, 30, GameMode.POOL)
        assert c.ball_type == "stripes"
        assert c.hex_color == BALL_COLORS["stripes"]
        assert c.confidence == pytest.approx(base.confidence * STRIPE_CONFIDENCE_FACTOR)
        assert "Striped Striped" not in c.color_name

    def test_cue_is_never_refined(self):
        frame = _draw_ball(_make_frame(), rgb=(255, 255, 255))
        c = classify_with_pattern(frame, 50, 50, 30, GameMode.POOL)
        assert c.ball_type == "cue"

    def test_snooker_skips_pattern_check(self):
        frame = _draw_striped_ball(_make_frame())
        base = classify_ball_color(frame, 50, 50, 30, GameMode.SNOOKER)
        c = classify_with_pattern(frame, 50, 50, 30, GameMode.SNOOKER)
        assert c == base
        assert c.ball_type not in ("solids", "stripes")
