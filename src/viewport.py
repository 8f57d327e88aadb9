"""
Viewport controller for the zoomable timeline.

The viewport is the visible sub-window of the loaded time range. Zoom and pan
requests never fail: anything that would leave the range is clamped.
"""

import logging

from models import TimeRange

logger = logging.getLogger(__name__)

MIN_DURATION = 60  # Min zoom 1 minute
WHEEL_ZOOM_FACTOR = 1.04


class Viewport:
    """
    Visible time window (visible_start, visible_duration) inside a TimeRange.

    Invariants after every operation:
      MIN_DURATION <= visible_duration <= range.duration (the range wins if shorter)
      range.start <= visible_start <= range.end - visible_duration
    """

    def __init__(self, time_range: TimeRange):
        self.time_range = time_range
        self.visible_start = float(time_range.start)
        self.visible_duration = float(time_range.duration)

    @property
    def visible_end(self) -> float:
        return self.visible_start + self.visible_duration

    @property
    def max_duration(self) -> float:
        return float(self.time_range.duration)

    def _clamp_duration(self, duration: float) -> float:
        duration = max(duration, MIN_DURATION)
        return min(duration, self.max_duration)

    def _clamp_start(self, start: float, duration: float) -> float:
        start = min(start, self.time_range.end - duration)
        return max(start, float(self.time_range.start))

    def reset(self, time_range: TimeRange):
        """Show the whole range. Called whenever new data replaces the range."""
        self.time_range = time_range
        self.visible_duration = float(time_range.duration)
        self.visible_start = float(time_range.start)
        logger.debug(f"Viewport reset to {time_range.start}-{time_range.end}")

    def time_at(self, ratio: float) -> float:
        """Absolute time at a horizontal ratio (0 = left edge, 1 = right edge)."""
        return self.visible_start + ratio * self.visible_duration

    def pixels_per_second(self, container_width: float) -> float:
        return container_width / self.visible_duration

    def zoom(self, pivot_ratio: float, factor: float):
        """
        Scale the visible duration by `factor` (> 1 zooms out, < 1 zooms in)
        keeping the time under `pivot_ratio` fixed.

        The duration is clamped first, then the start is solved for the pivot
        and clamped into the range.
        """
        if factor <= 0:
            return
        pivot_ratio = min(max(pivot_ratio, 0.0), 1.0)
        pivot_time = self.time_at(pivot_ratio)

        new_duration = self._clamp_duration(self.visible_duration * factor)
        new_start = pivot_time - new_duration * pivot_ratio

        self.visible_duration = new_duration
        self.visible_start = self._clamp_start(new_start, new_duration)

    def zoom_at(self, x_pos: float, container_width: float, factor: float):
        """Zoom around a pointer position in pixels."""
        if container_width <= 0:
            return
        self.zoom(x_pos / container_width, factor)

    def wheel(self, x_pos: float, container_width: float, zoom_out: bool):
        """Apply one mouse-wheel notch of zoom around the pointer."""
        factor = WHEEL_ZOOM_FACTOR if zoom_out else 1 / WHEEL_ZOOM_FACTOR
        self.zoom_at(x_pos, container_width, factor)

    def pan(self, delta_seconds: float):
        """Shift the window; the duration is unchanged."""
        self.visible_start = self._clamp_start(self.visible_start + delta_seconds, self.visible_duration)

    def pan_pixels(self, delta_pixels: float, container_width: float):
        """Shift the window by a pixel distance at the current density."""
        if container_width <= 0:
            return
        self.pan(delta_pixels / self.pixels_per_second(container_width))

    def state(self) -> tuple:
        return (self.visible_start, self.visible_duration)

    def __repr__(self) -> str:
        return (f"Viewport(start={self.visible_start:.0f}, duration={self.visible_duration:.0f}, "
                f"range={self.time_range.start}-{self.time_range.end})")
