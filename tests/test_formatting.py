from datetime import timezone

from conftest import make_item
from formatting import describe_span, format_clock, format_duration, span_label


def test_format_duration():
    assert format_duration(45) == '45s'
    assert format_duration(720) == '12m'
    assert format_duration(3 * 3600 + 5 * 60 + 59) == '3h 5m'


def test_format_clock():
    assert format_clock(3600 + 120, timezone.utc) == '01:02'


def test_span_label_without_title():
    assert span_label(make_item(1, 'Slack', 0, 1).span) == 'Slack'
    assert span_label(make_item(1, 'Code', 0, 1, title='x.py').span) == 'Code - x.py'


def test_describe_span():
    item = make_item(1, 'Code', 0, 5400, title='main.py',
                     categories=[(1, 'Work', '')], projects=[(2, 'Site', '')])
    details = describe_span(item, timezone.utc)
    assert details.time_range == 'Jan 01, 1970 00:00 - 01:30'
    assert details.duration == '1h 30m'
    assert details.as_text().splitlines() == [
        'Code',
        'main.py',
        'Jan 01, 1970 00:00 - 01:30',
        'Duration: 1h 30m',
        'Categories: Work',
        'Projects: Site',
    ]
