"""
Chronological activity list shown under the timeline.
"""

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Iterable, List, Optional, Tuple

from models import TimelineSpan


@dataclass
class ActivityRow:
    """Either a date header (item is None) or a span entry."""

    label: str
    item: Optional[TimelineSpan] = None
    is_new_project: bool = False
    projects: List[str] = field(default_factory=list)

    @property
    def is_header(self) -> bool:
        return self.item is None


def build_activity_rows(items: Iterable[TimelineSpan], with_date_headers: bool = True,
                        tz: Optional[tzinfo] = None) -> List[ActivityRow]:
    """
    Newest-first rows for the activity list.

    A date header is inserted whenever the calendar date changes (if enabled).
    Entries are flagged when their set of projects differs from the previous
    entry so the list can label the start of a project block.
    """
    ordered = sorted(items, key=lambda i: i.span.start_at, reverse=True)
    rows = []
    prev_signature = None
    last_date = None

    for item in ordered:
        moment = datetime.fromtimestamp(item.span.start_at, tz)
        if with_date_headers and moment.date() != last_date:
            rows.append(ActivityRow(label=moment.strftime('%A, %b %d')))
            last_date = moment.date()
            prev_signature = None

        signature = ','.join(str(p.id) for p in item.projects)
        rows.append(ActivityRow(
            label=item.span.app_name,
            item=item,
            is_new_project=signature != prev_signature,
            projects=[p.name for p in item.projects],
        ))
        prev_signature = signature

    return rows


def view_stats(items: Iterable[TimelineSpan]) -> Tuple[int, int]:
    """Number of spans and their summed duration in seconds."""
    count = 0
    total = 0
    for item in items:
        count += 1
        total += item.span.duration
    return count, total
