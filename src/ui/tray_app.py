"""
System tray application for the timeline monitor.
Provides a minimal, non-intrusive presence in the system tray.
"""

import threading
from typing import Optional, Callable
import logging

import pystray
from pystray import MenuItem as Item
from PIL import Image, ImageDraw

logger = logging.getLogger(__name__)

STATUS_OK = 'ok'
STATUS_LOADING = 'loading'
STATUS_ERROR = 'error'


class TrayApp:
    """
    System tray application.

    Shows the connection status of the time-tracker API and provides quick
    access to the timeline and overview windows.
    """

    ICON_SIZE = 64
    COLORS = {
        STATUS_OK: '#4CAF50',       # Green when the last refresh succeeded
        STATUS_LOADING: '#FFC107',  # Yellow while a request is in flight
        STATUS_ERROR: '#F44336',    # Red when the API could not be reached
    }
    STATUS_TEXT = {
        STATUS_OK: "Connected",
        STATUS_LOADING: "Loading...",
        STATUS_ERROR: "Offline",
    }

    def __init__(self):
        self._icon: Optional[pystray.Icon] = None
        self._running = False
        self._status = STATUS_OK
        self._detail = ""

        # Callbacks for menu actions
        self._on_show_timeline: Optional[Callable] = None
        self._on_show_overview: Optional[Callable] = None
        self._on_refresh: Optional[Callable] = None
        self._on_exit: Optional[Callable] = None

    @property
    def status(self) -> str:
        return self._status

    def set_callbacks(
        self,
        on_show_timeline: Optional[Callable] = None,
        on_show_overview: Optional[Callable] = None,
        on_refresh: Optional[Callable] = None,
        on_exit: Optional[Callable] = None
    ):
        """Set callback functions for menu actions."""
        self._on_show_timeline = on_show_timeline
        self._on_show_overview = on_show_overview
        self._on_refresh = on_refresh
        self._on_exit = on_exit

    def _create_icon_image(self, status: str = STATUS_OK) -> Image.Image:
        """Create the tray icon image: a clock on a status-colored disc."""
        image = Image.new('RGBA', (self.ICON_SIZE, self.ICON_SIZE), (0, 0, 0, 0))
        draw = ImageDraw.Draw(image)

        color = self.COLORS.get(status, self.COLORS[STATUS_OK])
        padding = 4
        draw.ellipse(
            [padding, padding, self.ICON_SIZE - padding, self.ICON_SIZE - padding],
            fill=color
        )

        center = self.ICON_SIZE // 2
        radius = (self.ICON_SIZE - padding * 2) // 2 - 8

        draw.ellipse(
            [center - radius, center - radius, center + radius, center + radius],
            outline='white',
            width=3
        )
        # Hour hand
        draw.line([center, center, center, center - radius + 8], fill='white', width=3)
        # Minute hand
        draw.line([center, center, center + radius - 8, center], fill='white', width=2)

        return image

    def _create_menu(self) -> pystray.Menu:
        """Create the tray context menu."""
        status = self.STATUS_TEXT.get(self._status, self._status)
        if self._detail:
            status = f"{status}: {self._detail}"

        return pystray.Menu(
            Item(f"Status: {status}", None, enabled=False),
            Item("─" * 20, None, enabled=False),
            Item("Timeline", self._handle_show_timeline, default=True),
            Item("Overview", self._handle_show_overview),
            Item("Refresh Now", self._handle_refresh),
            Item("─" * 20, None, enabled=False),
            Item("Exit", self._handle_exit)
        )

    def _handle_show_timeline(self, icon, item):
        if self._on_show_timeline:
            self._on_show_timeline()

    def _handle_show_overview(self, icon, item):
        if self._on_show_overview:
            self._on_show_overview()

    def _handle_refresh(self, icon, item):
        if self._on_refresh:
            self._on_refresh()

    def _handle_exit(self, icon, item):
        """Handle exit menu click."""
        self.stop()
        if self._on_exit:
            self._on_exit()

    def update_status(self, status: str, detail: str = ""):
        """Update the icon and status line (ok, loading or error)."""
        if status == self._status and detail == self._detail:
            return
        self._status = status
        self._detail = detail
        if self._icon is not None:
            self._icon.icon = self._create_icon_image(status)
            self._icon.menu = self._create_menu()

    def show_notification(self, title: str, message: str):
        """Show a notification balloon."""
        if self._icon:
            try:
                self._icon.notify(message, title)
            except Exception as e:
                logger.error(f"Failed to show notification: {e}")

    def start(self, blocking: bool = False):
        """
        Start the tray application.

        Args:
            blocking: If True, run in the current thread (blocks).
                      If False, run in a background thread.
        """
        if self._running:
            return

        self._icon = pystray.Icon(
            name="TimelineMonitor",
            icon=self._create_icon_image(self._status),
            title="Timeline Monitor",
            menu=self._create_menu()
        )

        self._running = True

        if blocking:
            self._icon.run()
        else:
            thread = threading.Thread(target=self._icon.run, daemon=True)
            thread.start()

    def stop(self):
        """Stop the tray application."""
        self._running = False
        if self._icon:
            self._icon.stop()
            self._icon = None
