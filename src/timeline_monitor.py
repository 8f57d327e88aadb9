"""
Timeline Monitor - interactive timeline for a time-tracker activity log

Main entry point that coordinates all components:
- Time-tracker API client
- Timeline and overview windows
- System tray interface
"""

import sys
import logging
from typing import Optional

import tkinter as tk

from ttkbootstrap import Window as TtkWindow

from api_client import TimelineApiClient
from config import ConfigManager
from ui.summary_view import SummaryView
from ui.timeline_view import TimelineView
from ui.tk_runner import TkRunner
from ui.tray_app import STATUS_ERROR, STATUS_LOADING, STATUS_OK, TrayApp

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler('timeline_monitor.log', encoding='utf-8')
    ]
)
logger = logging.getLogger(__name__)


class TimelineMonitor:
    """
    Main application class that coordinates all components.
    """

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        logger.info("Initializing Timeline Monitor...")

        self.config_manager = config_manager or ConfigManager()
        self.config = self.config_manager.config

        self.client = TimelineApiClient(
            base_url=self.config.api_base_url,
            timeout=self.config.request_timeout_seconds
        )

        # UI components
        self._root: Optional[TtkWindow] = None
        self._runner: Optional[TkRunner] = None
        self.tray_app = TrayApp()
        self.timeline_view: Optional[TimelineView] = None
        self.summary_view: Optional[SummaryView] = None

        self._running = False
        self._last_error: Optional[str] = None

        self._setup_tray()

        logger.info(f"Timeline Monitor initialized (API: {self.config.api_base_url})")

    def _setup_tray(self):
        """Configure system tray callbacks."""
        self.tray_app.set_callbacks(
            on_show_timeline=self._show_timeline,
            on_show_overview=self._show_overview,
            on_refresh=self._refresh_now,
            on_exit=self._exit
        )

    def _get_root(self):
        """Get or create the hidden tkinter root window."""
        if self._root is None or not self._root.winfo_exists():
            self._root = TtkWindow(themename=self.config.theme)
            self._root.withdraw()  # Hide the main window
            self._runner = TkRunner(self._root)
        return self._root

    def _show_timeline(self):
        """Show the timeline view (called from tray thread)."""
        logger.info("Opening timeline view")
        self._schedule_ui_action(self._do_show_timeline)

    def _do_show_timeline(self):
        """Actually show timeline (runs on main thread)."""
        try:
            root = self._get_root()
            if self.timeline_view is None:
                self.timeline_view = TimelineView(
                    self.client, root,
                    config_manager=self.config_manager,
                    runner=self._runner
                )
            self.timeline_view.show()
        except tk.TclError as e:
            logger.error(f"Error showing timeline: {e}", exc_info=True)

    def _show_overview(self):
        """Show the overview (called from tray thread)."""
        logger.info("Opening overview")
        self._schedule_ui_action(self._do_show_overview)

    def _do_show_overview(self):
        """Actually show overview (runs on main thread)."""
        try:
            root = self._get_root()
            if self.summary_view is None:
                self.summary_view = SummaryView(
                    self.client, root,
                    config_manager=self.config_manager,
                    runner=self._runner
                )
            self.summary_view.show()
        except tk.TclError as e:
            logger.error(f"Error showing overview: {e}", exc_info=True)

    def _refresh_now(self):
        """Refresh the open timeline (called from tray thread)."""
        self._schedule_ui_action(self._do_refresh_now)

    def _do_refresh_now(self):
        if self.timeline_view is not None:
            self.timeline_view.refresh_now()
        if self.summary_view is not None and self.summary_view.window is not None:
            self.summary_view.show()

    def _schedule_ui_action(self, action):
        """Schedule a UI action to run on the main thread."""
        if self._root and self._running:
            try:
                self._root.after(10, action)
            except RuntimeError as e:
                logger.error(f"Error scheduling UI action: {e}")
        else:
            logger.warning(f"Cannot schedule {action.__name__}: UI not running")

    def _exit(self):
        """Exit the application."""
        logger.info("Exiting Timeline Monitor...")
        self._schedule_ui_action(self.stop)

    def start(self):
        """Start the timeline monitor."""
        if self._running:
            return

        logger.info("Starting Timeline Monitor...")
        self._running = True

        root = self._get_root()

        logger.info("Starting system tray...")
        self.tray_app.start(blocking=False)

        if not self.config.start_minimized:
            self._do_show_timeline()

        logger.info("Timeline Monitor started")

        # Run tkinter mainloop
        try:
            self._schedule_ui_updates(root)
            root.mainloop()
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")
        finally:
            self.stop()

    def _current_status(self):
        """Tray status from the timeline store: (status, detail)."""
        view = self.timeline_view
        store = view.store if view is not None else None
        if store is None:
            return STATUS_OK, ""
        if store.is_loading:
            return STATUS_LOADING, ""
        if store.error:
            return STATUS_ERROR, store.error
        return STATUS_OK, ""

    def _schedule_ui_updates(self, root: tk.Tk):
        """Schedule periodic tray updates."""
        def update():
            if self._running:
                status, detail = self._current_status()
                self.tray_app.update_status(status, detail)
                self._notify_error_change(detail if status == STATUS_ERROR else None)
                root.after(1000, update)

        root.after(1000, update)

    def _notify_error_change(self, error: Optional[str]):
        """Show a notification when the API goes offline or comes back."""
        if error == self._last_error:
            return
        was_offline = self._last_error is not None
        self._last_error = error
        if not self.config.show_notifications:
            return
        if error is not None and not was_offline:
            self.tray_app.show_notification("Timeline Monitor", f"Could not load activities: {error}")
        elif error is None and was_offline:
            self.tray_app.show_notification("Timeline Monitor", "Connection restored")

    def stop(self):
        """Stop the timeline monitor."""
        if not self._running:
            return

        logger.info("Stopping Timeline Monitor...")
        self._running = False

        self.tray_app.stop()

        # Close UI windows
        if self.timeline_view:
            self.timeline_view.close()
        if self.summary_view:
            self.summary_view.close()

        self.client.close()

        # Destroy root window
        if self._root:
            try:
                self._root.quit()
                self._root.destroy()
            except tk.TclError as e:
                logger.debug(f"Root window already gone: {e}")

        logger.info("Timeline Monitor stopped")


def main():
    """Main entry point."""
    print("Timeline Monitor")
    print("=" * 40)

    monitor = TimelineMonitor()

    try:
        monitor.start()
    except KeyboardInterrupt:
        print("\nInterrupted by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        print(f"\nFatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
