"""
Free-text search over timeline spans.
"""

from typing import Iterable, List

from models import TimelineSpan


def matches(item: TimelineSpan, query: str) -> bool:
    """Check a span against an already lower-cased query."""
    span = item.span
    if query in span.app_name.lower() or query in span.window_title.lower():
        return True
    if any(query in c.name.lower() for c in item.categories):
        return True
    return any(query in p.name.lower() for p in item.projects)


def filter_spans(items: Iterable[TimelineSpan], query: str) -> List[TimelineSpan]:
    """
    Narrow spans to those whose app name, window title, category names or
    project names contain the query (case-insensitive).

    An empty query matches everything.
    """
    query = (query or '').lower()
    if not query:
        return list(items)
    return [item for item in items if matches(item, query)]
