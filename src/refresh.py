"""
Live refresh for the timeline.

Re-fetches the span store on a fixed interval while the timeline window is
visible. Timers go through a tkinter-style scheduler (`after`/`after_cancel`),
so every tick runs on the UI thread.
"""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 30


class RefreshController:
    """
    Poll the store every `interval_seconds` while visible.

    - Hidden: the timer is cancelled immediately and nothing is fetched.
    - Shown again: one immediate fetch, then the interval restarts.
    - A tick while a fetch is still running starts nothing; the store keeps
      at most one request in flight.

    The controller never touches the viewport.
    """

    def __init__(self, store, scheduler, interval_seconds: float = DEFAULT_INTERVAL_SECONDS):
        self.store = store
        self.scheduler = scheduler
        self.interval_ms = int(interval_seconds * 1000)
        self._job: Optional[Any] = None
        self._running = False
        self._visible = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_visible(self) -> bool:
        return self._visible

    @property
    def is_scheduled(self) -> bool:
        return self._job is not None

    def start(self, visible: bool = True):
        """Begin the polling lifecycle; fetches right away when visible."""
        if self._running:
            return
        self._running = True
        self._visible = visible
        logger.info(f"Refresh started (every {self.interval_ms // 1000}s)")
        if visible:
            self.refresh_now()
            self._schedule()

    def stop(self):
        """End the polling lifecycle. Safe to call more than once."""
        if not self._running:
            return
        self._running = False
        self._cancel()
        logger.info("Refresh stopped")

    def set_visible(self, visible: bool):
        """Handle a visibility transition of the timeline window."""
        if visible == self._visible:
            return
        self._visible = visible
        if not self._running:
            return

        if visible:
            logger.debug("Timeline visible, refreshing")
            self.refresh_now()
            self._schedule()
        else:
            logger.debug("Timeline hidden, polling suspended")
            self._cancel()

    def refresh_now(self) -> bool:
        """Fetch immediately unless a fetch is already in flight."""
        started = self.store.fetch()
        if not started:
            logger.debug("Refresh skipped, fetch already in flight")
        return started

    def _schedule(self):
        self._cancel()
        self._job = self.scheduler.after(self.interval_ms, self._tick)

    def _cancel(self):
        if self._job is not None:
            self.scheduler.after_cancel(self._job)
            self._job = None

    def _tick(self):
        self._job = None
        if not self._running or not self._visible:
            return
        self.refresh_now()
        self._schedule()
