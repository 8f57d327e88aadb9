from datetime import timezone

import pytest

import layout
from conftest import make_item
from models import TimeRange
from viewport import Viewport


@pytest.mark.parametrize('target, step', [
    (1, 60),
    (60, 60),
    (61, 300),
    (280, 300),
    (3000, 3600),
    (90000, 172800),
    (10 ** 7, 604800),
])
def test_choose_tick_step(target, step):
    assert layout.choose_tick_step(target) == step


def test_rect_position_and_width():
    viewport = Viewport(TimeRange(0, 1000))
    rects = layout.layout_spans([make_item(1, 'Code', 100, 300, title='main.py')], viewport, 1000)
    assert len(rects) == 1
    rect = rects[0]
    assert rect.left == 100
    assert rect.width == 200
    assert rect.label == 'Code - main.py'
    assert rect.show_label


def test_short_span_gets_one_pixel():
    viewport = Viewport(TimeRange(0, 86400))
    rects = layout.layout_spans([make_item(1, 'Code', 500, 501)], viewport, 1000)
    assert rects[0].width == layout.MIN_RECT_WIDTH


def test_label_threshold_is_exclusive():
    viewport = Viewport(TimeRange(0, 1000))
    rects = layout.layout_spans([
        make_item(1, 'A', 0, 40),
        make_item(2, 'B', 100, 141),
    ], viewport, 1000)
    assert [r.show_label for r in rects] == [False, True]


def test_spans_outside_viewport_are_dropped():
    viewport = Viewport(TimeRange(0, 1000))
    viewport.zoom(0.5, 0.2)  # 400..600
    items = [
        make_item(1, 'before', 100, 400),   # ends exactly at the left edge
        make_item(2, 'inside', 450, 500),
        make_item(3, 'after', 600, 700),    # starts exactly at the right edge
        make_item(4, 'across', 300, 900),
    ]
    rects = layout.layout_spans(items, viewport, 1000)
    assert [r.item.span.app_name for r in rects] == ['inside', 'across']


def test_degenerate_spans_are_skipped():
    viewport = Viewport(TimeRange(0, 1000))
    rects = layout.layout_spans([make_item(1, 'A', 500, 500), make_item(2, 'B', 600, 550)], viewport, 1000)
    assert rects == []


def test_layout_uses_color_callback():
    viewport = Viewport(TimeRange(0, 1000))
    rects = layout.layout_spans([make_item(1, 'A', 0, 100)], viewport, 1000,
                                color_for=lambda item: '#123456')
    assert rects[0].color == '#123456'


def test_zero_width_container_yields_nothing():
    viewport = Viewport(TimeRange(0, 1000))
    assert layout.layout_spans([make_item(1, 'A', 0, 100)], viewport, 0) == []
    assert layout.generate_ticks(viewport, 0) == []


def test_ticks_for_a_day():
    viewport = Viewport(TimeRange(0, 86400))
    ticks = layout.generate_ticks(viewport, 1500, timezone.utc)
    # 150px target at 1500px per day -> 8640s -> 4h rung
    assert [t.timestamp for t in ticks] == [0, 14400, 28800, 43200, 57600, 72000]
    assert ticks[0].primary_label == '00:00'
    assert ticks[0].secondary_label == 'Jan 01'
    assert ticks[0].is_major
    assert ticks[1].primary_label == '04:00'
    assert ticks[1].secondary_label == ''
    assert not ticks[1].is_major
    assert ticks[1].pixel_offset == pytest.approx(250)


def test_ticks_start_on_step_boundary():
    viewport = Viewport(TimeRange(1000, 5000))
    ticks = layout.generate_ticks(viewport, 4000, timezone.utc)
    # 1px per second -> 150s target -> 5m rung
    assert ticks[0].timestamp == 1200
    assert all(t.timestamp % 300 == 0 for t in ticks)
    assert ticks[-1].timestamp < 5000


def test_day_step_ticks_use_date_labels():
    viewport = Viewport(TimeRange(0, 30 * 86400))
    ticks = layout.generate_ticks(viewport, 1000, timezone.utc)
    assert ticks[0].primary_label == 'Thu 01'
    assert ticks[0].secondary_label == 'Jan'
    assert not any(t.is_major for t in ticks)


def test_now_offset():
    viewport = Viewport(TimeRange(0, 1000))
    assert layout.now_offset(viewport, 2000, 250) == 500


def test_day_markers_strictly_inside_range():
    markers = layout.day_markers(TimeRange(0, 3 * 86400), timezone.utc)
    assert [m.timestamp for m in markers] == [86400, 172800]
    assert markers[0].label == 'Fri, Jan 02'
    assert markers[0].position == 24 * layout.ABSOLUTE_PIXELS_PER_HOUR


def test_day_markers_for_single_day_range():
    assert layout.day_markers(TimeRange(0, 86400), timezone.utc) == []


def test_day_markers_independent_of_zoom():
    time_range = TimeRange(3600, 2 * 86400 + 3600)
    markers = layout.day_markers(time_range, timezone.utc)
    assert [m.position for m in markers] == [
        (86400 - 3600) / 3600 * 200,
        (2 * 86400 - 3600) / 3600 * 200,
    ]
