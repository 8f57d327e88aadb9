"""
Timeline session: the state of one timeline page visit.

Wires span store -> search filter -> grouping -> layout with explicit
recompute triggers instead of implicit reactivity:

  store loaded/failed   -> filtered spans, groups (viewport reset if the range changed)
  search query changed  -> filtered spans, groups
  grouping mode changed -> groups
  zoom/pan/resize       -> layout only (computed on demand)
"""

import logging
import time
from dataclasses import dataclass
from datetime import tzinfo
from typing import Callable, List, Optional

import layout
from grouping import group_spans
from models import DayMarker, Group, GroupingMode, SpanRect, Tick, TimeRange, TimelineSpan
from search import filter_spans
from span_store import FAILED, LOADED, SpanStore
from viewport import Viewport

logger = logging.getLogger(__name__)


@dataclass
class GroupRow:
    """One timeline row: a group and its laid-out rectangles."""

    group: Group
    rects: List[SpanRect]


class TimelineSession:
    """
    Derived timeline state for one visit of the timeline window.

    `open()` subscribes to the store and `close()` unsubscribes; between the
    two, the session is the single owner of the viewport, search query and
    grouping mode.
    """

    def __init__(self, store: SpanStore, grouping_mode: GroupingMode = GroupingMode.APP,
                 tz: Optional[tzinfo] = None):
        self.store = store
        self.tz = tz
        self.viewport = Viewport(store.time_range)
        self.grouping_mode = grouping_mode
        self.search_query = ''
        self.container_width = 0.0

        self.filtered: List[TimelineSpan] = []
        self.groups: List[Group] = []

        self._loaded_range: Optional[TimeRange] = None
        self._listeners: List[Callable[[], None]] = []
        self._open = False

    # Lifecycle

    def open(self):
        if self._open:
            return
        self._open = True
        self.store.add_listener(self._on_store_event)
        if self.store.last_loaded_at is not None or self.store.error is not None:
            self._on_store_event(LOADED)

    def close(self):
        if not self._open:
            return
        self._open = False
        self.store.remove_listener(self._on_store_event)
        self._listeners.clear()

    @property
    def is_open(self) -> bool:
        return self._open

    def add_listener(self, callback: Callable[[], None]):
        if callback not in self._listeners:
            self._listeners.append(callback)

    def _notify(self):
        for callback in list(self._listeners):
            callback()

    # Recompute triggers

    def _on_store_event(self, event: str):
        if event not in (LOADED, FAILED):
            self._notify()
            return

        new_range = self.store.time_range
        if new_range != self._loaded_range:
            self.viewport.reset(new_range)
            self._loaded_range = new_range
        self._recompute_filtered()

    def _recompute_filtered(self):
        self.filtered = filter_spans(self.store.items, self.search_query)
        self._recompute_groups()

    def _recompute_groups(self):
        self.groups = group_spans(self.filtered, self.grouping_mode)
        self._notify()

    # Entry points

    def load(self, time_range: TimeRange) -> bool:
        """Request a new range (date navigation)."""
        return self.store.fetch(time_range)

    def set_search_query(self, query: str):
        if query == self.search_query:
            return
        self.search_query = query
        self._recompute_filtered()

    def set_grouping_mode(self, mode: GroupingMode):
        if mode == self.grouping_mode:
            return
        self.grouping_mode = mode
        self._recompute_groups()

    def set_container_width(self, width: float):
        self.container_width = float(width)

    def zoom(self, pivot_ratio: float, factor: float):
        self.viewport.zoom(pivot_ratio, factor)

    def zoom_at(self, x_pos: float, factor: float):
        self.viewport.zoom_at(x_pos, self.container_width, factor)

    def wheel(self, x_pos: float, zoom_out: bool):
        self.viewport.wheel(x_pos, self.container_width, zoom_out)

    def pan(self, delta_seconds: float):
        self.viewport.pan(delta_seconds)

    def pan_pixels(self, delta_pixels: float):
        self.viewport.pan_pixels(delta_pixels, self.container_width)

    def reset_zoom(self):
        self.viewport.reset(self.viewport.time_range)

    # Derived layout

    def rows(self, color_for_group: Optional[Callable[[Group], str]] = None) -> List[GroupRow]:
        result = []
        for group in self.groups:
            color = group.color
            if color is None and color_for_group is not None:
                color = color_for_group(group)
            rects = layout.layout_spans(group.spans, self.viewport, self.container_width, color=color)
            result.append(GroupRow(group=group, rects=rects))
        return result

    def ticks(self) -> List[Tick]:
        return layout.generate_ticks(self.viewport, self.container_width, self.tz)

    def now_offset(self, now: Optional[float] = None) -> Optional[float]:
        """
        Position of the now marker, or None if it is outside the visible window.

        Computed on demand; the marker only moves when the host redraws (on
        store updates, zoom, pan or resize), so it can lag the clock by up to
        one refresh interval.
        """
        if self.container_width <= 0:
            return None
        now = time.time() if now is None else now
        if not (self.viewport.visible_start <= now <= self.viewport.visible_end):
            return None
        return layout.now_offset(self.viewport, self.container_width, now)

    def day_markers(self) -> List[DayMarker]:
        return layout.day_markers(self.viewport.time_range, self.tz)
