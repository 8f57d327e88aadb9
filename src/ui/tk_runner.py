"""
Runs API requests on a worker thread and delivers the result on the Tk thread.
"""

import logging
import threading

logger = logging.getLogger(__name__)


class TkRunner:
    """Store runner: `work()` on a daemon thread, `done(result, error)` via `after`."""

    def __init__(self, root):
        self.root = root

    def __call__(self, work, done):
        def worker():
            try:
                result, error = work(), None
            except Exception as e:
                result, error = None, e
            try:
                self.root.after(0, lambda: done(result, error))
            except RuntimeError as e:
                # Main loop already gone (application shutting down)
                logger.debug(f"Dropping request result: {e}")

        threading.Thread(target=worker, daemon=True).start()
