"""
Span store for the timeline.

Holds the spans of the currently loaded time range and the loading/error
state. At most one request is in flight at a time; a range requested while a
request is running is remembered and fetched once the running one completes,
and the superseded response is dropped.
"""

import logging
import time
from typing import Callable, List, Optional

from api_client import ApiError
from models import TimeRange, TimelineSpan

logger = logging.getLogger(__name__)

# Store events passed to listeners
LOADING = 'loading'
LOADED = 'loaded'
FAILED = 'failed'

Runner = Callable[[Callable[[], object], Callable[[object, Optional[BaseException]], None]], None]


def run_inline(work, done):
    """Run a request synchronously and report the outcome to `done(result, error)`."""
    try:
        result = work()
    except Exception as e:
        done(None, e)
        return
    done(result, None)


def validate_spans(items: List[TimelineSpan]) -> List[TimelineSpan]:
    """Drop spans that do not end after they start."""
    valid = []
    for item in items:
        if item.span.is_valid:
            valid.append(item)
        else:
            logger.warning(
                f"Skipping degenerate span {item.span.id} ({item.span.app_name}): "
                f"start={item.span.start_at} end={item.span.end_at}"
            )
    return valid


class SpanStore:
    """
    Raw spans plus their category/project annotations for one time range.

    `fetch` starts a request through the configured runner; the runner calls
    back with the result, which is applied only if no newer range was
    requested in the meantime.
    """

    def __init__(self, client, time_range: TimeRange, runner: Runner = run_inline):
        self.client = client
        self.runner = runner
        self.time_range = time_range
        self.requested_range = time_range
        self.items: List[TimelineSpan] = []
        self.error: Optional[str] = None
        self.is_loading = False
        self.last_loaded_at: Optional[float] = None
        self.fetch_count = 0

        self._in_flight_range: Optional[TimeRange] = None
        self._pending_range: Optional[TimeRange] = None
        self._generation = 0
        self._listeners: List[Callable[[str], None]] = []

    @property
    def in_flight(self) -> bool:
        return self._in_flight_range is not None

    @property
    def has_data(self) -> bool:
        return bool(self.items)

    def add_listener(self, callback: Callable[[str], None]):
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[str], None]):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self, event: str):
        for callback in list(self._listeners):
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Store listener failed on {event}: {e}", exc_info=True)

    def fetch(self, time_range: Optional[TimeRange] = None) -> bool:
        """
        Request spans for `time_range` (default: the last requested range).

        Returns True if a request was started, False if one is already in
        flight. In the latter case a different range is queued and replaces
        the in-flight result when it arrives.
        """
        if time_range is not None:
            self.requested_range = time_range

        if self.in_flight:
            if self.requested_range != self._in_flight_range:
                self._pending_range = self.requested_range
                logger.debug(f"Queued fetch for {self.requested_range}")
            else:
                self._pending_range = None
            return False

        self._start(self.requested_range)
        return True

    def _start(self, target: TimeRange):
        self._generation += 1
        generation = self._generation
        self._in_flight_range = target
        self.is_loading = True
        self.fetch_count += 1
        self._notify(LOADING)

        logger.debug(f"Fetching spans {target.start}-{target.end}")
        self.runner(
            lambda: self.client.fetch_spans(target.start, target.end),
            lambda result, error: self._complete(generation, target, result, error),
        )

    def _complete(self, generation: int, target: TimeRange, result, error: Optional[BaseException]):
        if generation != self._generation:
            logger.debug(f"Ignoring stale response for {target}")
            return

        self._in_flight_range = None
        pending, self._pending_range = self._pending_range, None
        if pending is not None and pending != target:
            logger.info(f"Dropping superseded response for {target.start}-{target.end}")
            self._start(pending)
            return

        self.is_loading = False
        self.time_range = target

        if error is not None:
            if isinstance(error, ApiError):
                logger.error(f"Error loading timeline: {error}")
            else:
                logger.error(f"Unexpected error loading timeline: {error}", exc_info=error)
            self.error = str(error)
            self.items = []
            self._notify(FAILED)
            return

        self.error = None
        self.items = validate_spans(list(result or []))
        self.last_loaded_at = time.time()
        logger.info(f"Loaded {len(self.items)} spans for {target.start}-{target.end}")
        self._notify(LOADED)
