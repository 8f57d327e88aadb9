import random

import pytest

from models import TimeRange
from viewport import MIN_DURATION, WHEEL_ZOOM_FACTOR, Viewport

DAY_RANGE = TimeRange(0, 86400)


def assert_invariants(viewport):
    r = viewport.time_range
    assert min(MIN_DURATION, r.duration) - 1e-6 <= viewport.visible_duration <= r.duration + 1e-6
    assert r.start - 1e-6 <= viewport.visible_start
    assert viewport.visible_start <= r.end - viewport.visible_duration + 1e-6


def test_initial_state_shows_whole_range():
    viewport = Viewport(DAY_RANGE)
    assert viewport.state() == (0.0, 86400.0)
    assert viewport.visible_end == 86400


def test_zoom_in_keeps_pivot_time_fixed():
    viewport = Viewport(DAY_RANGE)
    viewport.zoom(0.5, 0.5)
    assert viewport.visible_duration == 43200
    assert viewport.visible_start == 21600
    assert viewport.time_at(0.5) == pytest.approx(43200)


def test_zoom_off_center_pivot():
    viewport = Viewport(DAY_RANGE)
    viewport.zoom(0.5, 0.5)
    before = viewport.time_at(0.25)
    viewport.zoom(0.25, 0.5)
    assert viewport.visible_duration == 21600
    assert viewport.time_at(0.25) == pytest.approx(before)


def test_zoom_in_clamps_to_one_minute():
    viewport = Viewport(DAY_RANGE)
    viewport.zoom(0.5, 0.00001)
    assert viewport.visible_duration == MIN_DURATION
    assert_invariants(viewport)


def test_zoom_out_clamps_to_range():
    viewport = Viewport(DAY_RANGE)
    viewport.zoom(0.5, 0.5)
    viewport.zoom(0.9, 10)
    assert viewport.state() == (0.0, 86400.0)


def test_zoom_ignores_non_positive_factor():
    viewport = Viewport(DAY_RANGE)
    viewport.zoom(0.5, 0)
    viewport.zoom(0.5, -2)
    assert viewport.state() == (0.0, 86400.0)


def test_zoom_near_edge_clamps_start():
    viewport = Viewport(DAY_RANGE)
    viewport.zoom(0.0, 0.1)
    assert viewport.visible_start == 0
    viewport.zoom(1.0, 5)
    assert_invariants(viewport)


def test_pan_clamps_both_ends():
    viewport = Viewport(DAY_RANGE)
    viewport.zoom(0.5, 0.5)
    viewport.pan(-1e9)
    assert viewport.visible_start == 0
    viewport.pan(1e9)
    assert viewport.visible_start == 86400 - 43200
    assert viewport.visible_duration == 43200


def test_pan_pixels_uses_current_density():
    viewport = Viewport(DAY_RANGE)
    viewport.zoom(0.5, 0.5)  # 43200s across 1000px
    viewport.pan_pixels(100, 1000)
    assert viewport.visible_start == pytest.approx(21600 + 4320)


def test_wheel_uses_fixed_factor():
    viewport = Viewport(DAY_RANGE)
    viewport.zoom(0.5, 0.5)
    viewport.wheel(500, 1000, zoom_out=True)
    assert viewport.visible_duration == pytest.approx(43200 * WHEEL_ZOOM_FACTOR)
    viewport.wheel(500, 1000, zoom_out=False)
    assert viewport.visible_duration == pytest.approx(43200)


def test_zoom_at_zero_width_is_ignored():
    viewport = Viewport(DAY_RANGE)
    viewport.zoom_at(10, 0, 0.5)
    viewport.pan_pixels(10, 0)
    assert viewport.state() == (0.0, 86400.0)


def test_reset_is_idempotent():
    viewport = Viewport(DAY_RANGE)
    viewport.zoom(0.3, 0.2)
    new_range = TimeRange(86400, 3 * 86400)
    viewport.reset(new_range)
    first = viewport.state()
    viewport.reset(new_range)
    assert viewport.state() == first == (86400.0, 172800.0)


def test_range_shorter_than_minimum():
    viewport = Viewport(TimeRange(0, 30))
    viewport.zoom(0.5, 0.5)
    assert viewport.state() == (0.0, 30.0)
    viewport.pan(10)
    assert viewport.visible_start == 0


def test_invariants_hold_under_random_operations():
    rng = random.Random(1234)
    viewport = Viewport(TimeRange(1_700_000_000, 1_700_000_000 + 7 * 86400))
    for _ in range(2000):
        op = rng.random()
        if op < 0.4:
            viewport.zoom(rng.random(), rng.uniform(0.01, 5))
        elif op < 0.8:
            viewport.pan(rng.uniform(-500000, 500000))
        elif op < 0.95:
            viewport.wheel(rng.uniform(0, 1200), 1200, zoom_out=rng.random() < 0.5)
        else:
            viewport.reset(viewport.time_range)
        assert_invariants(viewport)


def test_time_range_rejects_empty_range():
    with pytest.raises(ValueError):
        TimeRange(100, 100)
