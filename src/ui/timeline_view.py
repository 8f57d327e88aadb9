"""
Timeline view UI for the timeline monitor.
Shows tracked activity as zoomable rows grouped by app, category or project.
"""

from datetime import date
from typing import Dict, Optional
import logging
import time

import tkinter as tk

import ttkbootstrap as ttk
from ttkbootstrap import Toplevel

import layout
from activity_log import build_activity_rows, view_stats
from formatting import describe_span, format_clock, format_duration
from models import GroupingMode
from periods import Period, period_label, period_range, shift
from refresh import RefreshController
from session import TimelineSession
from span_store import SpanStore

logger = logging.getLogger(__name__)


# Color palette for groups without a color of their own
GROUP_COLORS = [
    '#4A90D9',  # Blue
    '#50C878',  # Emerald
    '#FF6B6B',  # Coral
    '#9B59B6',  # Purple
    '#F39C12',  # Orange
    '#1ABC9C',  # Teal
    '#E74C3C',  # Red
    '#3498DB',  # Light Blue
    '#2ECC71',  # Green
    '#E67E22',  # Dark Orange
]

AXIS_HEIGHT = 34
ROW_HEIGHT = 30
ROW_GAP = 4
CANVAS_HEIGHT = 280


class TimelineView:
    """
    Zoomable timeline of the selected day, week or month.

    Mouse wheel zooms around the pointer, Shift+wheel or dragging pans,
    double-click shows the full range again. Data refreshes every 30 seconds
    while the window is visible.
    """

    def __init__(self, client, parent: Optional[tk.Tk] = None, config_manager=None, runner=None):
        self.client = client
        self.parent = parent
        self.config_manager = config_manager
        self.runner = runner
        self.window: Optional[tk.Toplevel] = None
        self._color_map: Dict[str, str] = {}
        self._color_index = 0
        self._tooltip = None
        self._rect_data: Dict[int, object] = {}  # Maps canvas item id to TimelineSpan
        self._drag_x: Optional[int] = None
        self._drag_moved = False

        config = config_manager.config if config_manager else None
        self._period = Period.parse(config.default_period) if config else Period.DAY
        self._grouping = GroupingMode.parse(config.default_grouping) if config else GroupingMode.APP
        self._refresh_interval = config.refresh_interval_seconds if config else 30
        self._selected_date = date.today()

        self.store: Optional[SpanStore] = None
        self.session: Optional[TimelineSession] = None
        self.refresh: Optional[RefreshController] = None

    def _get_group_color(self, name: str) -> str:
        """Get a consistent color for a group name."""
        if name not in self._color_map:
            self._color_map[name] = GROUP_COLORS[self._color_index % len(GROUP_COLORS)]
            self._color_index += 1
        return self._color_map[name]

    @property
    def is_visible(self) -> bool:
        return self.window is not None and self.refresh is not None and self.refresh.is_visible

    def show(self):
        """Show the timeline window."""
        if self.window is not None:
            try:
                if self.window.winfo_exists():
                    self.window.deiconify()
                    self.window.lift()
                    self.window.focus_force()
                    return
            except tk.TclError:
                self.window = None

        self._create_window()
        self._open_session()

        self.window.deiconify()
        self.window.lift()
        self.window.focus_force()

    def refresh_now(self):
        if self.refresh is not None:
            self.refresh.refresh_now()

    def _open_session(self):
        """Create the per-visit store, session and refresh controller."""
        time_range = period_range(self._selected_date, self._period)
        if self.runner is not None:
            self.store = SpanStore(self.client, time_range, runner=self.runner)
        else:
            self.store = SpanStore(self.client, time_range)
        self.session = TimelineSession(self.store, self._grouping)
        self.session.add_listener(self._on_session_changed)
        self.session.open()

        self.refresh = RefreshController(self.store, self.window, self._refresh_interval)
        self.refresh.start(visible=True)

    def _create_window(self):
        """Create the timeline window."""
        if self.parent:
            self.window = Toplevel(self.parent)
        else:
            theme = self.config_manager.config.theme if self.config_manager else "darkly"
            self.window = ttk.Window(themename=theme)

        self.window.title("Timeline Monitor - Timeline")
        geometry = self.config_manager.config.window_geometry if self.config_manager else "1100x700"
        self.window.geometry(geometry)

        # Handle window close button (X)
        self.window.protocol("WM_DELETE_WINDOW", self.close)

        # Visibility drives live refresh
        self.window.bind('<Map>', self._on_map)
        self.window.bind('<Unmap>', self._on_unmap)

        main_frame = ttk.Frame(self.window)
        main_frame.pack(fill=tk.BOTH, expand=True, padx=10, pady=10)

        self._create_header(main_frame)
        self._create_timeline_canvas(main_frame)

        paned = tk.PanedWindow(main_frame, orient=tk.VERTICAL, sashrelief=tk.RAISED)
        paned.pack(fill=tk.BOTH, expand=True)

        activity_frame = ttk.Frame(paned)
        self._create_activity_list(activity_frame)
        paned.add(activity_frame, stretch="always", minsize=100)

        details_frame = ttk.Frame(paned)
        self._create_details_panel(details_frame)
        paned.add(details_frame, stretch="never", minsize=60)

    def _create_header(self, parent):
        """Create the header with date navigation, grouping and zoom controls."""
        header = ttk.Frame(parent)
        header.pack(fill=tk.X, pady=(0, 5))

        ttk.Button(header, text="◀ Previous", command=lambda: self._navigate(-1)).pack(side=tk.LEFT)

        self._date_label = ttk.Label(
            header,
            text=period_label(self._selected_date, self._period),
            font=('Segoe UI', 14, 'bold')
        )
        self._date_label.pack(side=tk.LEFT, expand=True)

        ttk.Button(header, text="Next ▶", command=lambda: self._navigate(1)).pack(side=tk.RIGHT)
        ttk.Button(header, text="📅 Today", command=self._go_today).pack(side=tk.RIGHT, padx=5)

        controls = ttk.Frame(parent)
        controls.pack(fill=tk.X, pady=(0, 10))

        # Period toggle
        for period in Period:
            ttk.Button(
                controls, text=period.value.title(), width=7,
                command=lambda p=period: self._set_period(p)
            ).pack(side=tk.LEFT, padx=(0, 3))

        ttk.Separator(controls, orient=tk.VERTICAL).pack(side=tk.LEFT, padx=10, fill=tk.Y)

        # Grouping toggle
        for mode, text in ((GroupingMode.APP, "By App"),
                           (GroupingMode.CATEGORY, "By Category"),
                           (GroupingMode.PROJECT, "By Project")):
            ttk.Button(
                controls, text=text,
                command=lambda m=mode: self._set_grouping(m)
            ).pack(side=tk.LEFT, padx=(0, 3))

        ttk.Separator(controls, orient=tk.VERTICAL).pack(side=tk.LEFT, padx=10, fill=tk.Y)

        ttk.Button(controls, text="🔍+", width=4, command=lambda: self._zoom_center(0.5)).pack(side=tk.LEFT, padx=2)
        ttk.Button(controls, text="🔍−", width=4, command=lambda: self._zoom_center(2.0)).pack(side=tk.LEFT, padx=2)
        ttk.Button(controls, text="Reset", width=6, command=self._zoom_reset).pack(side=tk.LEFT, padx=2)

        self._status_label = ttk.Label(controls, text="", font=('Segoe UI', 9), foreground='#888')
        self._status_label.pack(side=tk.RIGHT)

        self._zoom_label = ttk.Label(controls, text="", font=('Segoe UI', 9), foreground='#888')
        self._zoom_label.pack(side=tk.RIGHT, padx=10)

    def _create_timeline_canvas(self, parent):
        """Create the visual timeline canvas."""
        timeline_frame = ttk.LabelFrame(parent, text="Timeline")
        timeline_frame.pack(fill=tk.X, pady=(0, 10))

        canvas_frame = ttk.Frame(timeline_frame)
        canvas_frame.pack(fill=tk.X, padx=5, pady=5)

        self._timeline_canvas = tk.Canvas(
            canvas_frame,
            height=CANVAS_HEIGHT,
            bg='white',
            highlightthickness=1,
            highlightbackground='#ccc'
        )
        scrollbar = ttk.Scrollbar(canvas_frame, orient=tk.VERTICAL, command=self._timeline_canvas.yview)
        self._timeline_canvas.configure(yscrollcommand=scrollbar.set)
        self._timeline_canvas.pack(side=tk.LEFT, fill=tk.X, expand=True)
        scrollbar.pack(side=tk.RIGHT, fill=tk.Y)

        canvas = self._timeline_canvas
        canvas.bind('<Configure>', self._on_canvas_resize)

        # Tooltip and selection
        canvas.bind('<Motion>', self._on_canvas_motion)
        canvas.bind('<Leave>', self._hide_tooltip)
        canvas.bind('<ButtonRelease-1>', self._on_canvas_release)

        # Zoom and pan
        canvas.bind('<Double-Button-1>', lambda e: self._zoom_reset())
        canvas.bind('<MouseWheel>', self._on_canvas_mousewheel)
        canvas.bind('<Shift-MouseWheel>', self._on_canvas_shift_mousewheel)
        canvas.bind('<Button-4>', lambda e: self._on_canvas_mousewheel_linux(e, 1))  # Linux scroll up
        canvas.bind('<Button-5>', lambda e: self._on_canvas_mousewheel_linux(e, -1))  # Linux scroll down
        canvas.bind('<Shift-Button-4>', lambda e: self._pan_pixels(-40))
        canvas.bind('<Shift-Button-5>', lambda e: self._pan_pixels(40))
        canvas.bind('<ButtonPress-1>', self._on_drag_start)
        canvas.bind('<B1-Motion>', self._on_drag)

    def _create_activity_list(self, parent):
        """Create the scrollable activity list with search filter."""
        list_frame = ttk.LabelFrame(parent, text="Activities")
        list_frame.pack(fill=tk.BOTH, expand=True)

        search_frame = ttk.Frame(list_frame)
        search_frame.pack(fill=tk.X, padx=5, pady=(5, 0))

        ttk.Label(search_frame, text="Filter:").pack(side=tk.LEFT)
        self._filter_var = tk.StringVar()
        self._filter_var.trace_add('write', lambda *args: self._apply_filter())
        filter_entry = ttk.Entry(search_frame, textvariable=self._filter_var, width=30)
        filter_entry.pack(side=tk.LEFT, padx=(5, 10))

        ttk.Button(search_frame, text="✕ Clear", command=self._clear_filter, width=8).pack(side=tk.LEFT)

        self._filter_count_label = ttk.Label(search_frame, text="", foreground='#666')
        self._filter_count_label.pack(side=tk.RIGHT, padx=5)

        tree_frame = ttk.Frame(list_frame)
        tree_frame.pack(fill=tk.BOTH, expand=True)

        columns = ('time', 'duration', 'app', 'window', 'projects')
        self._activity_tree = ttk.Treeview(tree_frame, columns=columns, show='headings', height=10)

        self._activity_tree.heading('time', text='Time')
        self._activity_tree.heading('duration', text='Duration')
        self._activity_tree.heading('app', text='App')
        self._activity_tree.heading('window', text='Window Title')
        self._activity_tree.heading('projects', text='Projects')

        self._activity_tree.column('time', width=80, minwidth=80)
        self._activity_tree.column('duration', width=80, minwidth=60)
        self._activity_tree.column('app', width=150, minwidth=100)
        self._activity_tree.column('window', width=400, minwidth=200)
        self._activity_tree.column('projects', width=150, minwidth=80)

        scrollbar = ttk.Scrollbar(tree_frame, orient=tk.VERTICAL, command=self._activity_tree.yview)
        self._activity_tree.configure(yscrollcommand=scrollbar.set)

        self._activity_tree.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        scrollbar.pack(side=tk.RIGHT, fill=tk.Y)

        self._activity_tree.tag_configure('header', font=('Segoe UI', 9, 'bold'))

    def _create_details_panel(self, parent):
        details_frame = ttk.LabelFrame(parent, text="Details")
        details_frame.pack(fill=tk.BOTH, expand=True)

        self._details_label = ttk.Label(
            details_frame, text="Click a span to see its details.",
            justify=tk.LEFT, font=('Segoe UI', 9)
        )
        self._details_label.pack(fill=tk.BOTH, expand=True, padx=5, pady=5)

    # Visibility

    def _on_map(self, event):
        if event.widget is self.window and self.refresh is not None:
            self.refresh.set_visible(True)

    def _on_unmap(self, event):
        if event.widget is self.window and self.refresh is not None:
            self.refresh.set_visible(False)

    # Navigation

    def _load_selected_period(self):
        self._date_label.config(text=period_label(self._selected_date, self._period))
        if self.session is not None:
            self.session.load(period_range(self._selected_date, self._period))

    def _navigate(self, direction: int):
        self._selected_date = shift(self._selected_date, self._period, direction)
        self._load_selected_period()

    def _go_today(self):
        self._selected_date = date.today()
        self._load_selected_period()

    def _set_period(self, period: Period):
        self._period = period
        self._load_selected_period()

    def _set_grouping(self, mode: GroupingMode):
        self._grouping = mode
        if self.session is not None:
            self.session.set_grouping_mode(mode)

    # Search

    def _clear_filter(self):
        self._filter_var.set("")

    def _apply_filter(self):
        if self.session is not None:
            self.session.set_search_query(self._filter_var.get())

    # Zoom and pan

    def _zoom_center(self, factor: float):
        if self.session is None:
            return
        self.session.zoom(0.5, factor)
        self._draw_timeline()

    def _zoom_reset(self):
        if self.session is None:
            return
        self.session.reset_zoom()
        self._draw_timeline()

    def _on_canvas_mousewheel(self, event):
        """Handle mousewheel zoom on Windows/macOS (scrolling down zooms out)."""
        if self.session is None:
            return
        self.session.wheel(event.x, zoom_out=event.delta < 0)
        self._draw_timeline()

    def _on_canvas_mousewheel_linux(self, event, direction):
        """Handle mousewheel zoom on Linux."""
        if self.session is None:
            return
        self.session.wheel(event.x, zoom_out=direction < 0)
        self._draw_timeline()

    def _on_canvas_shift_mousewheel(self, event):
        self._pan_pixels(-event.delta / 3)

    def _pan_pixels(self, delta: float):
        if self.session is None:
            return
        self.session.pan_pixels(delta)
        self._draw_timeline()

    def _on_drag_start(self, event):
        self._drag_x = event.x
        self._drag_moved = False

    def _on_drag(self, event):
        if self._drag_x is None:
            return
        delta = self._drag_x - event.x
        if delta:
            self._drag_moved = True
            self._drag_x = event.x
            self._pan_pixels(delta)

    def _on_canvas_release(self, event):
        moved = self._drag_moved
        self._drag_x = None
        if moved:
            return
        item = self._span_under_cursor(event)
        if item is not None:
            self._details_label.config(text=describe_span(item).as_text())

    def _on_canvas_resize(self, event):
        if self.session is not None:
            self.session.set_container_width(event.width)
        self._draw_timeline()

    def _update_zoom_label(self):
        """Update zoom info label."""
        if self.session is None:
            return
        viewport = self.session.viewport
        if viewport.visible_duration >= viewport.max_duration:
            text = "Full range"
        elif viewport.visible_duration >= 3600:
            text = f"{viewport.visible_duration / 3600:.1f}h range"
        else:
            text = f"{int(viewport.visible_duration / 60)}m range"
        self._zoom_label.config(text=text)

    # Tooltip

    def _span_under_cursor(self, event):
        canvas = self._timeline_canvas
        x, y = canvas.canvasx(event.x), canvas.canvasy(event.y)
        for item_id in canvas.find_overlapping(x - 1, y - 1, x + 1, y + 1):
            if item_id in self._rect_data:
                return self._rect_data[item_id]
        return None

    def _on_canvas_motion(self, event):
        """Handle mouse motion over the timeline canvas."""
        item = self._span_under_cursor(event)
        if item is None:
            self._hide_tooltip()
        else:
            self._show_tooltip(event, item)

    def _show_tooltip(self, event, item):
        """Show tooltip with span information."""
        if self._tooltip is None:
            self._tooltip = tk.Toplevel(self.window)
            self._tooltip.wm_overrideredirect(True)
            self._tooltip.wm_attributes('-topmost', True)
            self._tooltip_label = tk.Label(
                self._tooltip,
                justify=tk.LEFT,
                background='#2b3e50',
                foreground='white',
                font=('Segoe UI', 9),
                padx=8,
                pady=4
            )
            self._tooltip_label.pack()

        span = item.span
        text = (f"{span.app_name}\n{span.window_title or 'Untitled'}\n"
                f"{format_clock(span.start_at)} - {format_clock(span.end_at)}\n"
                f"Duration: {format_duration(span.duration)}")
        self._tooltip_label.config(text=text)

        x = self._timeline_canvas.winfo_rootx() + event.x + 15
        y = self._timeline_canvas.winfo_rooty() + event.y + 15
        self._tooltip.wm_geometry(f"+{x}+{y}")
        self._tooltip.deiconify()

    def _hide_tooltip(self, event=None):
        """Hide the tooltip."""
        if self._tooltip:
            self._tooltip.withdraw()

    # Rendering

    def _on_session_changed(self):
        if self.window is None:
            return
        try:
            self._update_status()
            self._draw_timeline()
            self._update_activity_list()
        except tk.TclError as e:
            logger.error(f"Error refreshing timeline: {e}", exc_info=True)

    def _update_status(self):
        store = self.store
        if store.is_loading:
            text = "Loading..."
        elif store.error:
            text = f"⚠ {store.error}"
        elif store.last_loaded_at:
            text = f"Updated {time.strftime('%H:%M:%S', time.localtime(store.last_loaded_at))}"
        else:
            text = ""
        self._status_label.config(text=text)

    def _draw_timeline(self):
        """Draw the timeline rows for the current viewport."""
        if self.window is None or self.session is None:
            return

        canvas = self._timeline_canvas
        canvas.delete('all')
        self._rect_data.clear()

        width = canvas.winfo_width()
        self.session.set_container_width(width)
        if width < 10:
            return

        self._update_zoom_label()

        rows = self.session.rows(color_for_group=lambda g: self._get_group_color(g.name))
        content_height = max(AXIS_HEIGHT + len(rows) * (ROW_HEIGHT + ROW_GAP), CANVAS_HEIGHT)
        canvas.configure(scrollregion=(0, 0, width, content_height))

        # Grid lines and tick labels
        for tick in self.session.ticks():
            x = tick.pixel_offset
            canvas.create_line(
                x, AXIS_HEIGHT - 4, x, content_height,
                fill='#999' if tick.is_major else '#ddd',
                dash=() if tick.is_major else (2, 2)
            )
            label = f"{tick.primary_label} {tick.secondary_label}".strip()
            canvas.create_text(
                x + 3, 12, text=label, anchor='w',
                font=('Segoe UI', 8, 'bold' if tick.is_major else 'normal'), fill='#666'
            )

        # Day boundaries for multi-day periods
        viewport = self.session.viewport
        for marker in self.session.day_markers():
            if not (viewport.visible_start <= marker.timestamp <= viewport.visible_end):
                continue
            x, _ = layout.place(marker.timestamp, marker.timestamp, viewport, width)
            canvas.create_line(x, AXIS_HEIGHT - 4, x, content_height, fill='#4A90D9', width=1)
            canvas.create_text(x + 3, 24, text=marker.label, anchor='w',
                               font=('Segoe UI', 7), fill='#4A90D9')

        if not rows:
            store = self.store
            if store.is_loading and not store.has_data:
                message = "Loading activity data..."
            elif store.error:
                message = "Could not load activities"
            elif store.has_data:
                message = "No activities match the filter"
            else:
                message = "No activities recorded"
            canvas.create_text(
                width // 2, AXIS_HEIGHT + ROW_HEIGHT,
                text=message, font=('Segoe UI', 10), fill='#999'
            )
        else:
            self._draw_rows(rows)

        # Current time marker
        now_x = self.session.now_offset()
        if now_x is not None:
            canvas.create_line(now_x, AXIS_HEIGHT - 8, now_x, content_height, fill='#E74C3C', width=2)
            canvas.create_text(now_x + 3, AXIS_HEIGHT - 10, text="Now", anchor='w',
                               font=('Segoe UI', 8, 'bold'), fill='#E74C3C')

    def _draw_rows(self, rows):
        canvas = self._timeline_canvas
        for index, row in enumerate(rows):
            top = AXIS_HEIGHT + index * (ROW_HEIGHT + ROW_GAP)
            bottom = top + ROW_HEIGHT

            canvas.create_rectangle(0, top, canvas.winfo_width(), bottom, fill='#f4f4f4', outline='')

            for rect in row.rects:
                item_id = canvas.create_rectangle(
                    rect.left, top + 2,
                    rect.left + rect.width, bottom - 2,
                    fill=rect.color or '#4A90D9', outline='',
                    tags=('span',)
                )
                self._rect_data[item_id] = rect.item

                if rect.show_label:
                    # Truncate label to fit
                    max_chars = max(int(rect.width / 7), 3)
                    text = rect.label
                    if len(text) > max_chars:
                        text = text[:max_chars - 2] + ".."
                    canvas.create_text(
                        rect.left + 4, (top + bottom) / 2,
                        text=text, anchor='w',
                        font=('Segoe UI', 8), fill='white',
                        tags=('label',)
                    )

            group = row.group
            canvas.create_text(
                4, top + 2,
                text=f"{group.name} · {format_duration(group.total_seconds)}",
                anchor='nw', font=('Segoe UI', 7), fill='#333'
            )

    def _update_activity_list(self):
        """Update the activity list treeview from the filtered spans."""
        for item in self._activity_tree.get_children():
            self._activity_tree.delete(item)

        session = self.session
        rows = build_activity_rows(session.filtered, with_date_headers=self._period != Period.DAY)
        for row in rows:
            if row.is_header:
                self._activity_tree.insert('', tk.END, values=(row.label, '', '', '', ''), tags=('header',))
                continue
            span = row.item.span
            window = span.window_title or 'Untitled'
            window_display = window[:80] + '...' if len(window) > 80 else window
            projects = ', '.join(row.projects) if row.is_new_project else ''
            self._activity_tree.insert('', tk.END, values=(
                format_clock(span.start_at),
                format_duration(span.duration),
                span.app_name,
                window_display,
                projects,
            ))

        count, total = view_stats(session.filtered)
        all_count = len(self.store.items)
        if session.search_query:
            self._filter_count_label.config(
                text=f"Showing {count} of {all_count} · {format_duration(total)}"
            )
        else:
            self._filter_count_label.config(text=f"{count} activities · {format_duration(total)}")

    def close(self):
        """Close the timeline window and end the session."""
        if self.refresh is not None:
            self.refresh.stop()
            self.refresh = None
        if self.session is not None:
            self.session.close()
            self.session = None
        if self.window:
            try:
                self.window.destroy()
            except tk.TclError as e:
                logger.error(f"Error closing timeline: {e}")
            self.window = None
            self._tooltip = None
