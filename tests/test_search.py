from conftest import make_item
from search import filter_spans

ITEMS = [
    make_item(1, 'Figma', 0, 10, title='Landing page'),
    make_item(2, 'Code', 10, 20, title='api_client.py', categories=[(1, 'Work', '')]),
    make_item(3, 'Firefox', 20, 30, title='News', projects=[(4, 'Side Project', '')]),
]


def ids(items):
    return [i.span.id for i in items]


def test_query_is_case_insensitive():
    assert ids(filter_spans(ITEMS, 'fig')) == [1]
    assert ids(filter_spans(ITEMS, 'FIG')) == [1]


def test_matches_window_title():
    assert ids(filter_spans(ITEMS, 'landing')) == [1]


def test_matches_category_and_project_names():
    assert ids(filter_spans(ITEMS, 'work')) == [2]
    assert ids(filter_spans(ITEMS, 'side proj')) == [3]


def test_empty_query_returns_everything():
    result = filter_spans(ITEMS, '')
    assert result == ITEMS
    assert filter_spans(ITEMS, None) == ITEMS


def test_no_match():
    assert filter_spans(ITEMS, 'zzz') == []


def test_whitespace_is_part_of_the_query():
    assert ids(filter_spans(ITEMS, ' ')) == [1, 3]
