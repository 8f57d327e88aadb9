"""
Overview window for the timeline monitor.
Shows totals, top apps and projects, and the category distribution for a period.
"""

from datetime import date
from typing import Dict, List, Optional
import logging

import tkinter as tk

import ttkbootstrap as ttk
from ttkbootstrap import Toplevel

import matplotlib
matplotlib.use('TkAgg')
from matplotlib.figure import Figure
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg

from formatting import format_duration
from overview import DetailTimeline, OverviewStore, SummaryEntry
from periods import Period, period_label, period_range, shift

logger = logging.getLogger(__name__)


# Used for entries without a color of their own
PROJECT_COLORS = [
    '#4A90D9', '#50C878', '#FF6B6B', '#9B59B6', '#F39C12',
    '#1ABC9C', '#E74C3C', '#3498DB', '#2ECC71', '#E67E22',
]

DETAIL_HEIGHT = 70
DETAIL_AXIS_HEIGHT = 16


class SummaryView:
    """
    Overview of a day, week or month.

    Features:
    - Total tracked time, top app and top project
    - Pie and bar charts for apps, projects or categories
    - Breakdown table; selecting a row shows its spans on a zoomable detail timeline
    """

    def __init__(self, client, parent: Optional[tk.Tk] = None, config_manager=None, runner=None):
        self.client = client
        self.parent = parent
        self.config_manager = config_manager
        self.window: Optional[tk.Toplevel] = None
        self._selected_date = date.today()
        self._period = Period.DAY
        self._group_by = 'App'  # 'App', 'Project' or 'Category'
        self._color_map: Dict[str, str] = {}
        self._color_index = 0
        self._entries: List[SummaryEntry] = []
        self._detail = DetailTimeline()
        self._detail_drag_x: Optional[int] = None

        if runner is not None:
            self.store = OverviewStore(client, runner=runner)
        else:
            self.store = OverviewStore(client)
        self.store.add_listener(self._refresh)

    def _top_n(self) -> int:
        if self.config_manager:
            return self.config_manager.config.overview_top_n
        return 5

    def _get_entry_color(self, entry: SummaryEntry) -> str:
        """Get the entry's own color, or a consistent palette color for its name."""
        if entry.color:
            return entry.color
        if entry.name not in self._color_map:
            self._color_map[entry.name] = PROJECT_COLORS[self._color_index % len(PROJECT_COLORS)]
            self._color_index += 1
        return self._color_map[entry.name]

    def show(self):
        """Show the overview window."""
        if self.window is not None:
            try:
                if self.window.winfo_exists():
                    self.window.deiconify()
                    self.window.lift()
                    self.window.focus_force()
                    self._load()
                    return
            except tk.TclError:
                self.window = None

        self._create_window()
        self._load()

        # Force window to be visible and on top
        self.window.deiconify()
        self.window.attributes('-topmost', True)
        self.window.lift()
        self.window.focus_force()
        self.window.update()
        self.window.attributes('-topmost', False)

    def _create_window(self):
        """Create the overview window."""
        if self.parent:
            self.window = Toplevel(self.parent)
        else:
            self.window = ttk.Window(themename="darkly")

        self.window.title("Timeline Monitor - Overview")
        self.window.geometry("760x720")

        # Handle window close button (X)
        self.window.protocol("WM_DELETE_WINDOW", self.close)

        main_frame = ttk.Frame(self.window)
        main_frame.pack(fill=tk.BOTH, expand=True, padx=10, pady=10)

        self._create_header(main_frame)
        self._create_detail_timeline(main_frame)
        self._create_summary_area(main_frame)

    def _create_header(self, parent):
        """Create the header with period, grouping and date navigation."""
        header = ttk.Frame(parent)
        header.pack(fill=tk.X, pady=(0, 10))

        mode_frame = ttk.Frame(header)
        mode_frame.pack(side=tk.LEFT)

        for period in Period:
            ttk.Button(
                mode_frame, text=period.value.title(),
                command=lambda p=period: self._set_period(p)
            ).pack(side=tk.LEFT, padx=(0, 5))

        ttk.Separator(mode_frame, orient=tk.VERTICAL).pack(side=tk.LEFT, padx=10, fill=tk.Y)

        for kind in ('App', 'Project', 'Category'):
            ttk.Button(
                mode_frame, text=f"By {kind}",
                command=lambda k=kind: self._set_group_by(k)
            ).pack(side=tk.LEFT, padx=(0, 5))

        nav_frame = ttk.Frame(header)
        nav_frame.pack(side=tk.RIGHT)

        ttk.Button(nav_frame, text="◀", command=lambda: self._navigate(-1), width=3).pack(side=tk.LEFT)

        self._date_label = ttk.Label(
            nav_frame,
            text="",
            font=('Segoe UI', 11, 'bold'),
            width=25,
            anchor='center'
        )
        self._date_label.pack(side=tk.LEFT, padx=10)

        ttk.Button(nav_frame, text="▶", command=lambda: self._navigate(1), width=3).pack(side=tk.LEFT)
        ttk.Button(nav_frame, text="📅 Today", command=self._go_today).pack(side=tk.LEFT, padx=(10, 0))

    def _create_summary_area(self, parent):
        """Create the stats line and the table/charts notebook."""
        stats_frame = ttk.Frame(parent)
        stats_frame.pack(fill=tk.X, pady=(0, 10))

        self._total_label = ttk.Label(
            stats_frame,
            text="Total: --",
            font=('Segoe UI', 12, 'bold'),
            foreground='#50C878'
        )
        self._total_label.pack(side=tk.LEFT)

        self._top_label = ttk.Label(
            stats_frame,
            text="",
            font=('Segoe UI', 10),
            foreground='#888'
        )
        self._top_label.pack(side=tk.LEFT, padx=(20, 0))

        self._status_label = ttk.Label(stats_frame, text="", font=('Segoe UI', 9), foreground='#888')
        self._status_label.pack(side=tk.RIGHT)

        self._notebook = ttk.Notebook(parent)
        self._notebook.pack(fill=tk.BOTH, expand=True)

        table_frame = ttk.Frame(self._notebook)
        self._notebook.add(table_frame, text="Table")
        self._create_table(table_frame)

        charts_frame = ttk.Frame(self._notebook)
        self._notebook.add(charts_frame, text="Charts")
        self._create_charts(charts_frame)

    def _create_table(self, parent):
        columns = ('name', 'time', 'percentage')
        self._summary_tree = ttk.Treeview(parent, columns=columns, show='headings', height=12)

        self._summary_tree.heading('name', text='App')
        self._summary_tree.heading('time', text='Time')
        self._summary_tree.heading('percentage', text='%')

        self._summary_tree.column('name', width=300, minwidth=150)
        self._summary_tree.column('time', width=120, minwidth=80, anchor='center')
        self._summary_tree.column('percentage', width=80, minwidth=60, anchor='center')

        scrollbar = ttk.Scrollbar(parent, orient=tk.VERTICAL, command=self._summary_tree.yview)
        self._summary_tree.configure(yscrollcommand=scrollbar.set)

        self._summary_tree.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        scrollbar.pack(side=tk.RIGHT, fill=tk.Y)

        self._summary_tree.bind('<<TreeviewSelect>>', self._on_entry_selected)
        self._summary_tree.bind('<Button-1>', self._on_tree_click)

    def _create_charts(self, parent):
        """Create the charts area with pie chart and bar chart stacked vertically."""
        self._fig = Figure(figsize=(8, 6), dpi=100)
        self._fig.patch.set_facecolor('#2b3e50')  # Match dark theme

        self._pie_ax = self._fig.add_subplot(211)
        self._pie_ax.set_facecolor('#2b3e50')

        self._bar_ax = self._fig.add_subplot(212)
        self._bar_ax.set_facecolor('#2b3e50')

        self._chart_canvas = FigureCanvasTkAgg(self._fig, parent)
        self._chart_canvas.get_tk_widget().pack(fill=tk.BOTH, expand=True)

    def _create_detail_timeline(self, parent):
        """Create the detail timeline for the selected entry."""
        frame = ttk.LabelFrame(parent, text="Detail")
        frame.pack(fill=tk.X, side=tk.BOTTOM, pady=(10, 0))

        self._detail_label = ttk.Label(frame, text="Select an entry to see its spans.", foreground='#888')
        self._detail_label.pack(fill=tk.X, padx=5, pady=(5, 0))

        self._detail_canvas = tk.Canvas(
            frame,
            height=DETAIL_HEIGHT,
            bg='white',
            highlightthickness=1,
            highlightbackground='#ccc'
        )
        self._detail_canvas.pack(fill=tk.X, padx=5, pady=5)

        canvas = self._detail_canvas
        canvas.bind('<Configure>', lambda e: self._draw_detail_timeline())
        canvas.bind('<Double-Button-1>', lambda e: self._on_detail_reset())
        canvas.bind('<MouseWheel>', self._on_detail_mousewheel)
        canvas.bind('<Shift-MouseWheel>', lambda e: self._detail_pan(-e.delta / 3))
        canvas.bind('<Button-4>', lambda e: self._on_detail_mousewheel_linux(e, 1))
        canvas.bind('<Button-5>', lambda e: self._on_detail_mousewheel_linux(e, -1))
        canvas.bind('<Shift-Button-4>', lambda e: self._detail_pan(-40))
        canvas.bind('<Shift-Button-5>', lambda e: self._detail_pan(40))
        canvas.bind('<ButtonPress-1>', self._on_detail_drag_start)
        canvas.bind('<B1-Motion>', self._on_detail_drag)

    # Navigation

    def _load(self):
        """Fetch the overview for the selected period."""
        self._date_label.config(text=period_label(self._selected_date, self._period))
        self._status_label.config(text="Loading...")
        self.store.fetch(period_range(self._selected_date, self._period))

    def _set_period(self, period: Period):
        self._period = period
        self._load()

    def _set_group_by(self, group_by: str):
        self._group_by = group_by
        self._refresh()

    def _navigate(self, direction: int):
        self._selected_date = shift(self._selected_date, self._period, direction)
        self._load()

    def _go_today(self):
        self._selected_date = date.today()
        self._load()

    # Rendering

    def _refresh(self):
        """Refresh the overview display from the store."""
        if self.window is None:
            return

        store = self.store
        self._status_label.config(text=f"⚠ {store.error}" if store.error else "")

        summary = store.summary(self._top_n())
        if summary is None:
            self._total_label.config(text="Total: 0s")
            self._top_label.config(text="No activities recorded")
            self._entries = []
        else:
            self._total_label.config(text=f"Total: {summary.total_time}")
            self._top_label.config(text=f"Top app: {summary.top_app} · Top project: {summary.top_project}")
            if self._group_by == 'Category':
                self._entries = summary.distribution
            elif self._group_by == 'Project':
                self._entries = summary.projects
            else:
                self._entries = summary.apps

        self._detail.sync(store.time_range)
        self._detail.rebind(self._entries)

        self._summary_tree.heading('name', text=self._group_by)
        for item in self._summary_tree.get_children():
            self._summary_tree.delete(item)
        for index, entry in enumerate(self._entries):
            pct = f"{entry.percent:.0f}%" if self._group_by == 'Category' else f"{entry.percent:.1f}%"
            self._summary_tree.insert('', tk.END, iid=str(index), values=(entry.name, entry.time, pct))
            if self._detail.entry is entry:
                self._summary_tree.selection_set(str(index))

        self._update_charts()
        self._draw_detail_timeline()

    def _update_charts(self):
        """Update the charts with the current entries."""
        self._pie_ax.clear()
        self._bar_ax.clear()
        self._pie_ax.set_facecolor('#2b3e50')
        self._bar_ax.set_facecolor('#2b3e50')

        entries = [e for e in self._entries if e.seconds > 0]
        if not entries:
            self._pie_ax.text(0.5, 0.5, 'No data', ha='center', va='center', color='white', fontsize=14)
            self._bar_ax.text(0.5, 0.5, 'No data', ha='center', va='center', color='white', fontsize=14)
            self._chart_canvas.draw()
            return

        names = [e.name for e in entries]
        seconds = [e.seconds for e in entries]
        colors = [self._get_entry_color(e) for e in entries]

        wedges, texts, autotexts = self._pie_ax.pie(
            seconds,
            colors=colors,
            autopct=lambda pct: f'{pct:.1f}%' if pct > 3 else '',
            startangle=90,
            textprops={'color': 'white', 'fontsize': 10},
            pctdistance=0.75
        )
        self._pie_ax.legend(
            wedges, names,
            loc='center left',
            bbox_to_anchor=(1, 0.5),
            fontsize=9,
            frameon=False,
            labelcolor='white'
        )
        self._pie_ax.set_title(f'Time by {self._group_by}', color='white', fontsize=12, fontweight='bold', pad=10)

        hours = [s / 3600 for s in seconds]
        y_pos = range(len(names))
        bars = self._bar_ax.barh(y_pos, hours, color=colors, height=0.6)
        self._bar_ax.set_yticks(y_pos)
        self._bar_ax.set_yticklabels(names, fontsize=10, color='white')
        self._bar_ax.set_xlabel('Hours', color='white', fontsize=11)
        self._bar_ax.set_title(f'Hours by {self._group_by}', color='white', fontsize=12, fontweight='bold', pad=10)
        self._bar_ax.tick_params(axis='x', colors='white', labelsize=10)
        self._bar_ax.tick_params(axis='y', colors='white')
        self._bar_ax.invert_yaxis()  # Largest at top

        for bar, entry in zip(bars, entries):
            self._bar_ax.text(bar.get_width() + 0.05, bar.get_y() + bar.get_height() / 2,
                              entry.time, va='center', color='white', fontsize=9)

        self._bar_ax.set_xlim(0, max(hours) * 1.2)

        self._fig.tight_layout(pad=2.0)
        self._chart_canvas.draw()

    def _on_entry_selected(self, event=None):
        selection = self._summary_tree.selection()
        if not selection:
            self._detail.select(None)
        else:
            entry = self._entries[int(selection[0])]
            if not self._detail.is_selected(entry):
                self._detail.select(entry)
        self._draw_detail_timeline()

    def _on_tree_click(self, event):
        """Clicking the selected row again clears the selection."""
        row = self._summary_tree.identify_row(event.y)
        if not row or row not in self._summary_tree.selection():
            return None
        if self._detail.select(self._entries[int(row)]) is None:
            self._summary_tree.selection_remove(row)
        self._draw_detail_timeline()
        return 'break'

    # Detail zoom and pan

    def _on_detail_mousewheel(self, event):
        self._detail.wheel(event.x, zoom_out=event.delta < 0)
        self._draw_detail_timeline()

    def _on_detail_mousewheel_linux(self, event, direction):
        self._detail.wheel(event.x, zoom_out=direction < 0)
        self._draw_detail_timeline()

    def _detail_pan(self, delta: float):
        self._detail.pan_pixels(delta)
        self._draw_detail_timeline()

    def _on_detail_drag_start(self, event):
        self._detail_drag_x = event.x

    def _on_detail_drag(self, event):
        if self._detail_drag_x is None:
            return
        delta = self._detail_drag_x - event.x
        if delta:
            self._detail_drag_x = event.x
            self._detail_pan(delta)

    def _on_detail_reset(self):
        self._detail.reset_zoom()
        self._draw_detail_timeline()

    def _draw_detail_timeline(self):
        """Draw the selected entry's spans in the detail viewport."""
        canvas = self._detail_canvas
        canvas.delete('all')

        width = canvas.winfo_width()
        self._detail.set_container_width(width)
        entry = self._detail.entry
        if entry is None or self._detail.viewport is None or width < 10:
            self._detail_label.config(text="Select an entry to see its spans.")
            return

        spans = self._detail.spans()
        total = format_duration(sum(s.end - s.start for s in spans))
        viewport = self._detail.viewport
        zoom = "" if viewport.visible_duration >= viewport.max_duration else \
            f" · {format_duration(viewport.visible_duration)} shown"
        self._detail_label.config(
            text=f"{entry.kind}: {entry.name} · {total} · {len(spans)} spans{zoom}"
        )

        for tick in self._detail.ticks():
            x = tick.pixel_offset
            canvas.create_line(x, DETAIL_AXIS_HEIGHT, x, DETAIL_HEIGHT, fill='#ddd', dash=(2, 2))
            canvas.create_text(x + 3, 8, text=tick.primary_label, anchor='w',
                               font=('Segoe UI', 8), fill='#666')

        top, bottom = DETAIL_AXIS_HEIGHT + 2, DETAIL_HEIGHT - 4
        for rect in self._detail.rects():
            canvas.create_rectangle(
                rect.left, top, rect.left + rect.width, bottom,
                fill=rect.color, outline=''
            )
            if rect.show_label:
                max_chars = max(int(rect.width / 7), 3)
                text = rect.label
                if len(text) > max_chars:
                    text = text[:max_chars - 2] + ".."
                canvas.create_text(rect.left + 4, (top + bottom) / 2, text=text, anchor='w',
                                   font=('Segoe UI', 8), fill='white')

    def close(self):
        """Close the overview window."""
        if self.window:
            self.window.destroy()
            self.window = None
