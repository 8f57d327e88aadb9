"""
HTTP client for the time-tracker API.
Fetches timeline spans and overviews and wraps the category/project save and
delete endpoints.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from models import Category, Overview, Project, TimelineSpan

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080"


class ApiError(Exception):
    """Raised when a request to the time-tracker API fails."""

    def __init__(self, endpoint: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{endpoint}: {message}")
        self.endpoint = endpoint
        self.status_code = status_code


class TimelineApiClient:
    """Thin JSON client; every call either returns parsed data or raises ApiError."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._session = session or requests.Session()

    def _request(self, method: str, endpoint: str, payload: Optional[dict] = None,
                 expect_json: bool = True) -> Any:
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"{method} {url} {payload if payload is not None else ''}")
        try:
            response = self._session.request(
                method, url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            body = e.response.text.strip() if e.response is not None else ''
            raise ApiError(endpoint, f"HTTP {status} {body}".strip(), status) from e
        except requests.exceptions.Timeout as e:
            raise ApiError(endpoint, f"timed out after {self.timeout}s") from e
        except requests.exceptions.ConnectionError as e:
            raise ApiError(endpoint, f"connection failed ({url})") from e
        except requests.exceptions.RequestException as e:
            raise ApiError(endpoint, str(e)) from e

        if not expect_json:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(endpoint, "invalid JSON in response") from e

    @staticmethod
    def _parse(endpoint: str, what: str, parse, data):
        """Apply `parse` to a decoded body; malformed records become ApiError."""
        try:
            return parse(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ApiError(endpoint, f"malformed {what}: {e}") from e

    # Spans and overview

    def fetch_spans(self, start: int, end: int) -> List[TimelineSpan]:
        """Spans between start and end (Unix seconds) with their annotations."""
        data = self._request('POST', '/api/timeline', {'from': int(start), 'to': int(end)})
        return self._parse(
            '/api/timeline', 'span record',
            lambda d: [TimelineSpan.from_dict(r) for r in (d or {}).get('spans') or []],
            data,
        )

    def fetch_overview(self, start: int, end: int) -> Overview:
        data = self._request('POST', '/api/overview', {'start': int(start), 'end': int(end)})
        return self._parse('/api/overview', 'overview', lambda d: Overview.from_dict(d or {}), data)

    # Categories

    def fetch_categories(self) -> Dict[str, list]:
        data = self._request('GET', '/api/categories') or {}
        return self._parse('/api/categories', 'category list', lambda d: {
            'categories': [Category.from_dict(c) for c in d.get('categories') or []],
            'category_rules': d.get('category_rules') or [],
        }, data)

    def save_category(self, category: Category) -> Category:
        data = self._request('POST', '/api/categories/save', category.to_dict())
        return self._parse('/api/categories/save', 'category', Category.from_dict, data)

    def delete_category(self, category_id: int):
        self._request('POST', '/api/categories/delete', {'id': category_id}, expect_json=False)

    def save_category_rule(self, rule: Dict[str, Any]) -> Dict[str, Any]:
        return self._request('POST', '/api/categories/rules/save', rule)

    def delete_category_rule(self, rule_id: int):
        self._request('POST', '/api/categories/rules/delete', {'id': rule_id}, expect_json=False)

    # Projects

    def fetch_projects(self) -> Dict[str, list]:
        data = self._request('GET', '/api/projects') or {}
        return self._parse('/api/projects', 'project list', lambda d: {
            'projects': [Project.from_dict(p) for p in d.get('projects') or []],
            'project_rules': d.get('project_rules') or [],
        }, data)

    def save_project(self, project: Project) -> Project:
        data = self._request('POST', '/api/projects/save', project.to_dict())
        return self._parse('/api/projects/save', 'project', Project.from_dict, data)

    def delete_project(self, project_id: int):
        self._request('POST', '/api/projects/delete', {'id': project_id}, expect_json=False)

    def save_project_rule(self, rule: Dict[str, Any]) -> Dict[str, Any]:
        return self._request('POST', '/api/projects/rules/save', rule)

    def delete_project_rule(self, rule_id: int):
        self._request('POST', '/api/projects/rules/delete', {'id': rule_id}, expect_json=False)

    def close(self):
        self._session.close()
