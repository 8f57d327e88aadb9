"""
Data models for the activity timeline.
Plain dataclasses parsed from the time-tracker API responses.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Span:
    """A single contiguous interval of application/window activity."""

    id: int
    app_name: str
    window_title: str
    start_at: int
    end_at: int

    @property
    def duration(self) -> int:
        return self.end_at - self.start_at

    @property
    def is_valid(self) -> bool:
        return self.end_at > self.start_at

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Span':
        return cls(
            id=int(data.get('id', 0)),
            app_name=data.get('app_name') or '',
            window_title=data.get('window_title') or '',
            start_at=int(data['start_at']),
            end_at=int(data['end_at']),
        )


@dataclass(frozen=True)
class Category:
    id: int
    name: str
    color: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Category':
        return cls(id=int(data['id']), name=data.get('name') or '', color=data.get('color') or '')

    def to_dict(self) -> dict:
        return {'id': self.id, 'name': self.name, 'color': self.color}


@dataclass(frozen=True)
class Project:
    id: int
    name: str
    color: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Project':
        return cls(id=int(data['id']), name=data.get('name') or '', color=data.get('color') or '')

    def to_dict(self) -> dict:
        return {'id': self.id, 'name': self.name, 'color': self.color}


@dataclass(frozen=True)
class TimelineSpan:
    """A span together with the categories and projects the server matched to it."""

    span: Span
    categories: tuple = ()
    projects: tuple = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TimelineSpan':
        return cls(
            span=Span.from_dict(data['span']),
            categories=tuple(Category.from_dict(c) for c in data.get('categories') or []),
            projects=tuple(Project.from_dict(p) for p in data.get('projects') or []),
        )


@dataclass(frozen=True)
class TimeRange:
    """Absolute bounds (Unix seconds) of a loaded dataset."""

    start: int
    end: int

    def __post_init__(self):
        if self.end <= self.start:
            raise ValueError(f"TimeRange end ({self.end}) must be after start ({self.start})")

    @property
    def duration(self) -> int:
        return self.end - self.start


class GroupingMode(Enum):
    APP = 'app'
    CATEGORY = 'category'
    PROJECT = 'project'

    @classmethod
    def parse(cls, value: str) -> 'GroupingMode':
        try:
            return cls(value.lower())
        except ValueError:
            return cls.APP


@dataclass
class Group:
    """A named bucket of spans sharing an app name, category or project."""

    key: Any
    name: str
    color: Optional[str] = None
    spans: List[TimelineSpan] = field(default_factory=list)
    total_seconds: int = 0
    is_fallback: bool = False

    def add(self, item: TimelineSpan):
        self.spans.append(item)
        self.total_seconds += item.span.duration


@dataclass(frozen=True)
class SpanRect:
    """Pixel-space rectangle of a visible span."""

    left: float
    width: float
    label: str
    show_label: bool
    item: Any
    color: Optional[str] = None


@dataclass(frozen=True)
class Tick:
    pixel_offset: float
    primary_label: str
    secondary_label: str = ''
    is_major: bool = False
    timestamp: int = 0


@dataclass(frozen=True)
class DayMarker:
    timestamp: int
    position: float
    label: str


# Overview records (server-side aggregation, /api/overview)

@dataclass
class AppOverview:
    name: str
    spans: List[Span] = field(default_factory=list)
    total_seconds: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppOverview':
        return cls(
            name=data.get('name') or '',
            spans=[Span.from_dict(s) for s in data.get('spans') or []],
            total_seconds=int(data.get('total_seconds') or 0),
        )


@dataclass
class ProjectOverview:
    project: Project
    spans: List[Span] = field(default_factory=list)
    total_seconds: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProjectOverview':
        return cls(
            project=Project.from_dict(data['project']),
            spans=[Span.from_dict(s) for s in data.get('spans') or []],
            total_seconds=int(data.get('total_seconds') or 0),
        )


@dataclass
class CategoryOverview:
    category: Category
    spans: List[Span] = field(default_factory=list)
    total_seconds: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CategoryOverview':
        return cls(
            category=Category.from_dict(data['category']),
            spans=[Span.from_dict(s) for s in data.get('spans') or []],
            total_seconds=int(data.get('total_seconds') or 0),
        )


@dataclass
class Overview:
    total_seconds: int = 0
    apps: List[AppOverview] = field(default_factory=list)
    projects: List[ProjectOverview] = field(default_factory=list)
    categories: List[CategoryOverview] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Overview':
        return cls(
            total_seconds=int(data.get('total_seconds') or 0),
            apps=[AppOverview.from_dict(a) for a in data.get('apps') or []],
            projects=[ProjectOverview.from_dict(p) for p in data.get('projects') or []],
            categories=[CategoryOverview.from_dict(c) for c in data.get('categories') or []],
        )
