"""
Overview store, summary and detail timeline state for the overview window.
"""

import logging
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Callable, List, Optional

import layout
from api_client import ApiError
from formatting import format_duration, span_label
from models import Overview, SpanRect, Tick, TimeRange
from span_store import run_inline
from viewport import Viewport

logger = logging.getLogger(__name__)

APP_COLOR = '#3b82f6'
DEFAULT_COLOR = '#737373'


@dataclass
class SummaryEntry:
    kind: str  # 'App', 'Project' or 'Category'
    name: str
    seconds: int
    percent: float
    color: Optional[str] = None
    spans: list = field(default_factory=list)

    @property
    def time(self) -> str:
        return format_duration(self.seconds)


@dataclass
class OverviewSummary:
    total_seconds: int
    top_app: str
    top_project: str
    apps: List[SummaryEntry]
    projects: List[SummaryEntry]
    distribution: List[SummaryEntry]

    @property
    def total_time(self) -> str:
        return format_duration(self.total_seconds)


def _percent(seconds: int, total: int) -> float:
    return (seconds / total) * 100 if total > 0 else 0.0


def summarize_overview(overview: Overview, top_n: int = 5) -> Optional[OverviewSummary]:
    """
    Top apps and projects with their share of the total, and the full
    category distribution (rounded percentages). None when nothing was tracked.
    """
    total = overview.total_seconds
    if not total:
        return None

    apps = sorted(overview.apps, key=lambda a: -a.total_seconds)[:top_n]
    projects = sorted(overview.projects, key=lambda p: -p.total_seconds)[:top_n]
    categories = sorted(overview.categories, key=lambda c: -c.total_seconds)

    app_entries = [
        SummaryEntry('App', a.name, a.total_seconds, _percent(a.total_seconds, total), APP_COLOR, a.spans)
        for a in apps
    ]
    project_entries = [
        SummaryEntry('Project', p.project.name, p.total_seconds, _percent(p.total_seconds, total),
                     p.project.color or None, p.spans)
        for p in projects
    ]
    distribution = [
        SummaryEntry('Category', c.category.name, c.total_seconds, round(_percent(c.total_seconds, total)),
                     c.category.color or None, c.spans)
        for c in categories
    ]

    return OverviewSummary(
        total_seconds=total,
        top_app=app_entries[0].name if app_entries else '-',
        top_project=project_entries[0].name if project_entries else '-',
        apps=app_entries,
        projects=project_entries,
        distribution=distribution,
    )


@dataclass(frozen=True)
class DetailSpan:
    """Span prepared for the detail timeline of a selected summary entry."""

    start: int
    end: int
    color: str
    label: str


def detail_spans(entry: Optional[SummaryEntry]) -> List[DetailSpan]:
    if entry is None:
        return []
    if entry.kind == 'App':
        color = APP_COLOR
    else:
        color = entry.color or DEFAULT_COLOR
    return [DetailSpan(s.start_at, s.end_at, color, span_label(s)) for s in entry.spans if s.is_valid]


class OverviewStore:
    """Server-side aggregation for a range, with loading and error state."""

    def __init__(self, client, runner=run_inline):
        self.client = client
        self.runner = runner
        self.overview = Overview()
        self.time_range: Optional[TimeRange] = None
        self.error: Optional[str] = None
        self.is_loading = False
        self._generation = 0
        self._listeners: List[Callable[[], None]] = []

    def add_listener(self, callback: Callable[[], None]):
        if callback not in self._listeners:
            self._listeners.append(callback)

    def _notify(self):
        for callback in list(self._listeners):
            try:
                callback()
            except Exception as e:
                logger.error(f"Overview listener failed: {e}", exc_info=True)

    def fetch(self, time_range: TimeRange):
        """Load the overview; a newer fetch supersedes any response still on its way."""
        self._generation += 1
        generation = self._generation
        self.is_loading = True
        self.error = None
        self.runner(
            lambda: self.client.fetch_overview(time_range.start, time_range.end),
            lambda result, error: self._complete(generation, time_range, result, error),
        )

    def _complete(self, generation, time_range, result, error):
        if generation != self._generation:
            logger.debug(f"Ignoring stale overview for {time_range}")
            return
        self.is_loading = False
        self.time_range = time_range
        if error is not None:
            if isinstance(error, ApiError):
                logger.error(f"Error loading overview: {error}")
            else:
                logger.error(f"Unexpected error loading overview: {error}", exc_info=error)
            self.error = str(error)
            self.overview = Overview()
        else:
            self.overview = result or Overview()
        self._notify()

    def summary(self, top_n: int = 5) -> Optional[OverviewSummary]:
        return summarize_overview(self.overview, top_n)


class DetailTimeline:
    """
    Zoomable timeline of the selected summary entry's spans.

    Uses the same viewport and layout rules as the main timeline. The
    viewport is reset whenever the overview range changes; selecting the
    already selected entry clears the selection.
    """

    def __init__(self):
        self.entry: Optional[SummaryEntry] = None
        self.viewport: Optional[Viewport] = None
        self.container_width = 0.0

    def sync(self, time_range: Optional[TimeRange]):
        """Follow the store's range; a different range resets zoom and selection."""
        if time_range is None:
            self.viewport = None
            self.entry = None
            return
        if self.viewport is None or self.viewport.time_range != time_range:
            self.viewport = Viewport(time_range)
            self.entry = None

    def select(self, entry: Optional[SummaryEntry]) -> Optional[SummaryEntry]:
        if entry is not None and self.is_selected(entry):
            self.entry = None
        else:
            self.entry = entry
        return self.entry

    def rebind(self, entries: List[SummaryEntry]):
        """Point the selection at the matching entry of a fresh summary, if any."""
        if self.entry is None:
            return
        self.entry = next((e for e in entries if self.is_selected(e)), None)

    def is_selected(self, entry: SummaryEntry) -> bool:
        return (self.entry is not None and entry.kind == self.entry.kind
                and entry.name == self.entry.name)

    def set_container_width(self, width: float):
        self.container_width = float(width)

    def wheel(self, x_pos: float, zoom_out: bool):
        if self.viewport is not None:
            self.viewport.wheel(x_pos, self.container_width, zoom_out)

    def pan_pixels(self, delta_pixels: float):
        if self.viewport is not None:
            self.viewport.pan_pixels(delta_pixels, self.container_width)

    def reset_zoom(self):
        if self.viewport is not None:
            self.viewport.reset(self.viewport.time_range)

    def spans(self) -> List[DetailSpan]:
        return detail_spans(self.entry)

    def rects(self) -> List[SpanRect]:
        """Visible spans of the selected entry in pixel space."""
        if self.viewport is None or self.container_width <= 0:
            return []
        viewport = self.viewport
        rects = []
        for span in self.spans():
            if span.end <= viewport.visible_start or span.start >= viewport.visible_end:
                continue
            left, width = layout.place(span.start, span.end, viewport, self.container_width)
            rects.append(SpanRect(
                left=left,
                width=width,
                label=span.label,
                show_label=width > layout.LABEL_MIN_WIDTH,
                item=span,
                color=span.color,
            ))
        return rects

    def ticks(self, tz: Optional[tzinfo] = None) -> List[Tick]:
        if self.viewport is None:
            return []
        return layout.generate_ticks(self.viewport, self.container_width, tz)
