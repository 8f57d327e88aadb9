from unittest.mock import MagicMock

import pytest
import requests

from api_client import ApiError, TimelineApiClient
from models import Category, Project


def response(payload=None, status=200, text=''):
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    resp.json.return_value = payload
    if status >= 400:
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError(response=resp)
    return resp


@pytest.fixture
def http():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(http):
    return TimelineApiClient(base_url='http://tracker:8080/', timeout=5, session=http)


SPAN_RECORD = {
    'span': {'id': 7, 'app_name': 'Code', 'window_title': 'main.py', 'start_at': 100, 'end_at': 400},
    'categories': [{'id': 1, 'name': 'Work', 'color': '#22c55e'}],
    'projects': None,
}


def test_fetch_spans_posts_range_and_parses(client, http):
    http.request.return_value = response({'spans': [SPAN_RECORD]})

    items = client.fetch_spans(0, 86400)

    http.request.assert_called_once_with(
        'POST', 'http://tracker:8080/api/timeline',
        json={'from': 0, 'to': 86400},
        headers={'Content-Type': 'application/json'},
        timeout=5,
    )
    assert len(items) == 1
    assert items[0].span.app_name == 'Code'
    assert items[0].span.duration == 300
    assert items[0].categories[0].name == 'Work'
    assert items[0].projects == ()


def test_fetch_spans_with_empty_body(client, http):
    http.request.return_value = response({'spans': None})
    assert client.fetch_spans(0, 10) == []


def test_malformed_record_raises(client, http):
    http.request.return_value = response({'spans': [{'span': {'id': 1}}]})
    with pytest.raises(ApiError, match='malformed'):
        client.fetch_spans(0, 10)


def test_non_object_body_raises(client, http):
    http.request.return_value = response([1, 2])
    with pytest.raises(ApiError, match='malformed span record'):
        client.fetch_spans(0, 10)


def test_http_error_is_wrapped(client, http):
    http.request.return_value = response(status=500, text='database locked')
    with pytest.raises(ApiError) as excinfo:
        client.fetch_spans(0, 10)
    assert excinfo.value.status_code == 500
    assert excinfo.value.endpoint == '/api/timeline'
    assert 'database locked' in str(excinfo.value)


def test_connection_error_is_wrapped(client, http):
    http.request.side_effect = requests.exceptions.ConnectionError('refused')
    with pytest.raises(ApiError, match='connection failed'):
        client.fetch_overview(0, 10)


def test_timeout_is_wrapped(client, http):
    http.request.side_effect = requests.exceptions.Timeout()
    with pytest.raises(ApiError, match='timed out'):
        client.fetch_spans(0, 10)


def test_invalid_json_is_wrapped(client, http):
    resp = response()
    resp.json.side_effect = ValueError('no json')
    http.request.return_value = resp
    with pytest.raises(ApiError, match='invalid JSON'):
        client.fetch_spans(0, 10)


def test_fetch_overview(client, http):
    http.request.return_value = response({
        'total_seconds': 300,
        'apps': [{'name': 'Code', 'total_seconds': 300, 'spans': [SPAN_RECORD['span']]}],
        'projects': [],
        'categories': [{'category': {'id': 1, 'name': 'Work', 'color': ''}, 'total_seconds': 300}],
    })
    overview = client.fetch_overview(0, 86400)
    assert http.request.call_args.kwargs['json'] == {'start': 0, 'end': 86400}
    assert overview.total_seconds == 300
    assert overview.apps[0].spans[0].id == 7
    assert overview.categories[0].category.name == 'Work'


def test_fetch_categories(client, http):
    http.request.return_value = response({
        'categories': [{'id': 1, 'name': 'Work', 'color': '#fff'}],
        'category_rules': [{'id': 3, 'category_id': 1, 'pattern': 'code'}],
    })
    data = client.fetch_categories()
    assert http.request.call_args.args == ('GET', 'http://tracker:8080/api/categories')
    assert data['categories'] == [Category(1, 'Work', '#fff')]
    assert data['category_rules'][0]['pattern'] == 'code'


def test_save_and_delete_project(client, http):
    http.request.return_value = response({'id': 9, 'name': 'Site', 'color': '#000'})
    saved = client.save_project(Project(0, 'Site', '#000'))
    assert saved == Project(9, 'Site', '#000')
    assert http.request.call_args.args[1].endswith('/api/projects/save')

    http.request.return_value = response()
    client.delete_project(9)
    assert http.request.call_args.kwargs['json'] == {'id': 9}
    assert http.request.call_args.args[1].endswith('/api/projects/delete')


def test_rule_endpoints(client, http):
    http.request.return_value = response({'id': 4})
    client.save_category_rule({'category_id': 1, 'pattern': 'slack'})
    assert http.request.call_args.args[1].endswith('/api/categories/rules/save')
    client.delete_project_rule(4)
    assert http.request.call_args.args[1].endswith('/api/projects/rules/delete')


@pytest.mark.parametrize('call, payload', [
    (lambda c: c.fetch_categories(), {'categories': [{'name': 'No id'}]}),
    (lambda c: c.fetch_projects(), {'projects': [{'name': 'No id'}]}),
    (lambda c: c.save_category(Category(0, 'Work', '')), {'name': 'Work'}),
    (lambda c: c.save_project(Project(0, 'Site', '')), None),
])
def test_malformed_category_and_project_records_raise(client, http, call, payload):
    http.request.return_value = response(payload)
    with pytest.raises(ApiError, match='malformed'):
        call(client)
