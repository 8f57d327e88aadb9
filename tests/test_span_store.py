from unittest.mock import MagicMock

import pytest

from api_client import ApiError
from conftest import make_item
from models import TimeRange
from span_store import FAILED, LOADED, LOADING, SpanStore, validate_spans

DAY_ONE = TimeRange(0, 86400)
DAY_TWO = TimeRange(86400, 2 * 86400)
DAY_THREE = TimeRange(2 * 86400, 3 * 86400)


@pytest.fixture
def client():
    client = MagicMock()
    client.fetch_spans.side_effect = lambda start, end: [make_item(start, 'App', start, start + 60)]
    return client


def test_inline_fetch_loads_spans(client):
    store = SpanStore(client, DAY_ONE)
    events = []
    store.add_listener(events.append)

    assert store.fetch()
    assert events == [LOADING, LOADED]
    assert not store.is_loading
    assert store.error is None
    assert [i.span.id for i in store.items] == [0]
    assert store.last_loaded_at is not None
    client.fetch_spans.assert_called_once_with(0, 86400)


def test_only_one_request_in_flight(client, manual_runner):
    store = SpanStore(client, DAY_ONE, runner=manual_runner)
    assert store.fetch()
    assert not store.fetch()
    assert not store.fetch()
    assert len(manual_runner.pending) == 1
    assert store.fetch_count == 1

    manual_runner.complete()
    assert store.has_data
    assert store.fetch()
    assert store.fetch_count == 2


def test_new_range_supersedes_in_flight_response(client, manual_runner):
    store = SpanStore(client, DAY_ONE, runner=manual_runner)
    events = []
    store.add_listener(events.append)

    store.fetch()
    assert not store.fetch(DAY_TWO)
    assert not store.fetch(DAY_THREE)

    manual_runner.complete()
    # Day one's response is dropped and the latest range is requested instead
    assert store.time_range == DAY_ONE
    assert not store.has_data
    assert len(manual_runner.pending) == 1
    assert LOADED not in events

    manual_runner.complete()
    assert store.time_range == DAY_THREE
    assert [i.span.id for i in store.items] == [2 * 86400]
    assert events.count(LOADED) == 1
    assert client.fetch_spans.call_count == 2


def test_returning_to_in_flight_range_clears_pending(client, manual_runner):
    store = SpanStore(client, DAY_ONE, runner=manual_runner)
    store.fetch()
    store.fetch(DAY_TWO)
    store.fetch(DAY_ONE)
    manual_runner.complete()
    assert manual_runner.pending == []
    assert store.time_range == DAY_ONE
    assert store.has_data


def test_poll_during_navigation_keeps_new_range(client, manual_runner):
    store = SpanStore(client, DAY_ONE, runner=manual_runner)
    store.fetch()
    store.fetch(DAY_TWO)
    store.fetch()  # refresh tick without an explicit range
    manual_runner.complete()
    manual_runner.complete()
    assert store.time_range == DAY_TWO


def test_failure_empties_data_and_sets_error(client):
    store = SpanStore(client, DAY_ONE)
    store.fetch()
    assert store.has_data

    client.fetch_spans.side_effect = ApiError('/api/timeline', 'connection failed')
    events = []
    store.add_listener(events.append)
    store.fetch()

    assert events == [LOADING, FAILED]
    assert store.items == []
    assert 'connection failed' in store.error
    assert not store.is_loading


def test_error_clears_after_successful_fetch(client):
    store = SpanStore(client, DAY_ONE)
    client.fetch_spans.side_effect = ApiError('/api/timeline', 'HTTP 500')
    store.fetch()
    assert store.error

    client.fetch_spans.side_effect = lambda start, end: [make_item(1, 'App', start, start + 5)]
    store.fetch()
    assert store.error is None
    assert store.has_data


def test_unexpected_exception_is_reported_as_failure(client):
    client.fetch_spans.side_effect = RuntimeError('boom')
    store = SpanStore(client, DAY_ONE)
    store.fetch()
    assert store.error == 'boom'
    assert store.items == []


def test_degenerate_spans_are_skipped():
    items = [make_item(1, 'A', 0, 10), make_item(2, 'B', 10, 10), make_item(3, 'C', 30, 20)]
    assert [i.span.id for i in validate_spans(items)] == [1]


def test_remove_listener(client):
    store = SpanStore(client, DAY_ONE)
    events = []
    store.add_listener(events.append)
    store.remove_listener(events.append)
    store.fetch()
    assert events == []


def test_listener_error_does_not_block_fetching(client, manual_runner):
    store = SpanStore(client, DAY_ONE, runner=manual_runner)
    events = []

    def broken(event):
        if event == LOADING:
            raise ValueError('redraw failed')

    store.add_listener(broken)
    store.add_listener(events.append)

    assert store.fetch()
    assert len(manual_runner.pending) == 1
    assert events == [LOADING]

    manual_runner.complete()
    assert not store.in_flight
    assert store.has_data
    assert events == [LOADING, LOADED]

    store.remove_listener(broken)
    assert store.fetch()
    manual_runner.complete()
    assert client.fetch_spans.call_count == 2
