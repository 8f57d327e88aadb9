"""
Grouping and aggregation of timeline spans.

Spans are bucketed by application name, category or project. In category and
project mode a span joins every group it is annotated with, so a span tagged
with two categories counts its full duration towards both. Group totals answer
"how much time touched X" and do not add up to the overall tracked time.
"""

from typing import Dict, Iterable, List

from models import Group, GroupingMode, TimelineSpan

FALLBACK_COLOR = '#737373'

FALLBACK_NAMES = {
    GroupingMode.CATEGORY: 'Uncategorized',
    GroupingMode.PROJECT: 'No Project',
}


def _annotations(item: TimelineSpan, mode: GroupingMode):
    if mode == GroupingMode.CATEGORY:
        return item.categories
    return item.projects


def group_spans(items: Iterable[TimelineSpan], mode: GroupingMode) -> List[Group]:
    """
    Build the sorted group list for the given grouping mode.

    Groups are rebuilt from scratch on every call. Regular groups are ordered
    by total duration (descending, ties in encounter order); the synthetic
    fallback group always comes last.
    """
    groups: Dict[object, Group] = {}
    fallback = None

    for item in items:
        if mode == GroupingMode.APP:
            name = item.span.app_name
            if name not in groups:
                groups[name] = Group(key=name, name=name)
            groups[name].add(item)
            continue

        annotations = _annotations(item, mode)
        if not annotations:
            if fallback is None:
                fallback = Group(
                    key=None,
                    name=FALLBACK_NAMES[mode],
                    color=FALLBACK_COLOR,
                    is_fallback=True,
                )
            fallback.add(item)
            continue

        for annotation in annotations:
            group = groups.get(annotation.id)
            if group is None:
                group = Group(key=annotation.id, name=annotation.name, color=annotation.color or None)
                groups[annotation.id] = group
            group.add(item)

    ordered = sorted(groups.values(), key=lambda g: -g.total_seconds)
    if fallback is not None:
        ordered.append(fallback)
    return ordered


def total_seconds(items: Iterable[TimelineSpan]) -> int:
    """Tracked time of the spans themselves, without multi-membership."""
    return sum(item.span.duration for item in items)
