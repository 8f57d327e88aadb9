"""
Layout and time-axis engine.

Pure functions turning spans plus the current viewport and container width
into pixel rectangles, axis ticks, the "now" marker and day markers.
"""

import math
from datetime import datetime, time, timedelta, tzinfo
from typing import Callable, Iterable, List, Optional, Tuple

from formatting import span_label
from models import DayMarker, SpanRect, Tick, TimeRange, TimelineSpan
from viewport import Viewport

LABEL_MIN_WIDTH = 40
MIN_RECT_WIDTH = 1
TARGET_TICK_SPACING = 150
ABSOLUTE_PIXELS_PER_HOUR = 200

# 1m, 5m, 15m, 30m, 1h, 2h, 4h, 6h, 12h, 1d, 2d, 1w
TICK_STEPS = [
    60, 300, 900, 1800, 3600,
    7200, 14400, 21600, 43200, 86400,
    172800, 604800,
]

DAY = 86400


def is_visible(item: TimelineSpan, viewport: Viewport) -> bool:
    """Half-open overlap test between a span and the visible window."""
    span = item.span
    return span.end_at > viewport.visible_start and span.start_at < viewport.visible_end


def place(start: float, end: float, viewport: Viewport, container_width: float) -> Tuple[float, float]:
    """Left offset and width (at least MIN_RECT_WIDTH) of an interval in the viewport."""
    pps = viewport.pixels_per_second(container_width)
    return (start - viewport.visible_start) * pps, max((end - start) * pps, MIN_RECT_WIDTH)


def layout_spans(items: Iterable[TimelineSpan], viewport: Viewport, container_width: float,
                 color: Optional[str] = None,
                 color_for: Optional[Callable[[TimelineSpan], str]] = None) -> List[SpanRect]:
    """
    Lay out the spans overlapping the viewport.

    Rectangles are at least one pixel wide so that very short spans remain
    visible and clickable. Degenerate spans (end <= start) are skipped.
    """
    if container_width <= 0:
        return []
    rects = []
    for item in items:
        span = item.span
        if not span.is_valid or not is_visible(item, viewport):
            continue
        left, width = place(span.start_at, span.end_at, viewport, container_width)
        rects.append(SpanRect(
            left=left,
            width=width,
            label=span_label(span),
            show_label=width > LABEL_MIN_WIDTH,
            item=item,
            color=color_for(item) if color_for else color,
        ))
    return rects


def choose_tick_step(target_step_seconds: float) -> int:
    """Smallest ladder rung covering the target step; one week if none does."""
    for step in TICK_STEPS:
        if step >= target_step_seconds:
            return step
    return TICK_STEPS[-1]


def generate_ticks(viewport: Viewport, container_width: float,
                   tz: Optional[tzinfo] = None) -> List[Tick]:
    """Axis ticks roughly every TARGET_TICK_SPACING pixels on human-friendly boundaries."""
    if container_width <= 0:
        return []
    pps = viewport.pixels_per_second(container_width)
    step = choose_tick_step(TARGET_TICK_SPACING / pps)

    first = math.ceil(viewport.visible_start / step) * step
    end = viewport.visible_end
    ticks = []

    t = first
    while t < end:
        moment = datetime.fromtimestamp(t, tz)
        at_midnight = moment.hour == 0 and moment.minute == 0

        if step >= DAY:
            label = moment.strftime('%a %d')
            sub_label = moment.strftime('%b')
        else:
            label = moment.strftime('%H:%M')
            sub_label = moment.strftime('%b %d') if (t == first or at_midnight) else ''

        ticks.append(Tick(
            pixel_offset=(t - viewport.visible_start) * pps,
            primary_label=label,
            secondary_label=sub_label,
            is_major=step < DAY and at_midnight,
            timestamp=t,
        ))
        t += step

    return ticks


def now_offset(viewport: Viewport, container_width: float, now: float) -> float:
    """Horizontal position of the current wall-clock time."""
    return (now - viewport.visible_start) * viewport.pixels_per_second(container_width)


def absolute_position(time_range: TimeRange, timestamp: float) -> float:
    """Position in the zoom-independent layout (ABSOLUTE_PIXELS_PER_HOUR)."""
    return (timestamp - time_range.start) / 3600 * ABSOLUTE_PIXELS_PER_HOUR


def day_markers(time_range: TimeRange, tz: Optional[tzinfo] = None) -> List[DayMarker]:
    """One marker per calendar-day boundary strictly inside the loaded range."""
    markers = []
    day = datetime.fromtimestamp(time_range.start, tz).date() + timedelta(days=1)

    while True:
        boundary = datetime.combine(day, time(0, 0), tzinfo=tz).timestamp()
        if boundary >= time_range.end:
            break
        if boundary > time_range.start:
            markers.append(DayMarker(
                timestamp=int(boundary),
                position=absolute_position(time_range, boundary),
                label=day.strftime('%a, %b %d'),
            ))
        day += timedelta(days=1)

    return markers
