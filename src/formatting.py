"""
Formatting helpers shared by the timeline and summary windows.
"""

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import List, Optional

from models import Span, TimelineSpan


def format_duration(seconds: int) -> str:
    """Format seconds as human-readable duration."""
    seconds = int(seconds)
    if seconds < 60:
        return f"{seconds}s"

    hours = seconds // 3600
    minutes = (seconds % 3600) // 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_clock(timestamp: float, tz: Optional[tzinfo] = None) -> str:
    """Format a Unix timestamp as HH:MM in the given (default local) timezone."""
    return datetime.fromtimestamp(timestamp, tz).strftime('%H:%M')


def format_date(timestamp: float, tz: Optional[tzinfo] = None) -> str:
    return datetime.fromtimestamp(timestamp, tz).strftime('%b %d, %Y')


def span_label(span: Span) -> str:
    """Text shown inside a span's rectangle and in its tooltip."""
    if span.window_title:
        return f"{span.app_name} - {span.window_title}"
    return span.app_name


@dataclass(frozen=True)
class SpanDetails:
    app_name: str
    window_title: str
    time_range: str
    duration: str
    categories: List[str]
    projects: List[str]

    def as_text(self) -> str:
        lines = [
            self.app_name,
            self.window_title or 'Untitled',
            self.time_range,
            f"Duration: {self.duration}",
        ]
        if self.categories:
            lines.append(f"Categories: {', '.join(self.categories)}")
        if self.projects:
            lines.append(f"Projects: {', '.join(self.projects)}")
        return '\n'.join(lines)


def describe_span(item: TimelineSpan, tz: Optional[tzinfo] = None) -> SpanDetails:
    """Build the detail panel contents for a selected span."""
    span = item.span
    time_range = (
        f"{format_date(span.start_at, tz)} "
        f"{format_clock(span.start_at, tz)} - {format_clock(span.end_at, tz)}"
    )
    return SpanDetails(
        app_name=span.app_name,
        window_title=span.window_title,
        time_range=time_range,
        duration=format_duration(span.duration),
        categories=[c.name for c in item.categories],
        projects=[p.name for p in item.projects],
    )
