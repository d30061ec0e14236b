from rich.markup import escape
from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.screen import Screen
from textual.widgets import DataTable, Footer, Header, Static

from meetgrid.day_utils import day_label, generate_days, slot_hour
from meetgrid.models import User
from meetgrid.ranges import ranges_to_text
from meetgrid.selection import DragGesture

EMPTY_CELL = Text(" ·", style="dim")
DISABLED_CELL = Text("  ", style="on grey15")


def render_cell(users: list[User], eligible: bool) -> Text:
    """Two-character cell: one user fills, several users stripe top/bottom."""
    if not users:
        return (EMPTY_CELL if eligible else DISABLED_CELL).copy()
    colors = [u.color for u in users][:4]
    if len(colors) == 1:
        return Text("██", style=colors[0])
    upper = colors[0::2]
    lower = colors[1::2]
    text = Text()
    for i in range(2):
        fg = upper[i % len(upper)]
        bg = lower[i % len(lower)]
        text.append("▀", style=f"{fg} on {bg}")
    return text


class GridScreen(Screen):
    """Day-by-slot availability grid for the active user."""

    BINDINGS = [
        Binding("space", "toggle_slot", "Toggle", show=True),
        Binding("v", "drag", "Range select", show=True),
        Binding("escape", "end_drag", "End range", show=False),
        Binding("n", "next_user", "Next user", show=True),
        Binding("x", "clear_user", "Clear mine", show=True),
        Binding("s", "toggle_sidebar", "Sidebar", show=True),
    ]

    def __init__(self):
        super().__init__()
        self._days: list[str] = []
        self._slots: list[int] = []
        self._layout_key = None
        self.gesture: DragGesture | None = None

    @property
    def manager(self):
        return self.app.selection_manager

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="grid-content"):
            with VerticalScroll(id="sidebar"):
                yield Static("", id="legend")
                yield Static("", id="summary")
            yield DataTable(id="grid")
        yield Footer()

    def on_mount(self) -> None:
        self.gesture = DragGesture(self.manager)
        table = self.query_one("#grid", DataTable)
        table.cursor_type = "cell"
        table.fixed_columns = 1
        self._build_table()
        self._update_sidebar()
        table.focus()

    def on_screen_resume(self) -> None:
        if self.gesture is not None:
            self.gesture.end()
        if self._current_layout_key() != self._layout_key:
            self._build_table()
        else:
            for day in self._days:
                self._refresh_row(day)
        self._update_sidebar()

    def _current_layout_key(self):
        opts = self.manager.state.options
        return (self.manager.loads, opts.start_hour, opts.end_hour, opts.business_days)

    def _build_table(self):
        """Rebuild rows and columns for the horizon and visible hours."""
        config = self.manager.config
        opts = self.manager.state.options
        table = self.query_one("#grid", DataTable)
        table.clear(columns=True)

        self._days = generate_days(config.days_ahead, self.app.today)
        self._slots = [
            s for s in range(config.slots_per_day)
            if opts.hour_visible(slot_hour(s, config.slot_minutes))
        ]

        table.add_column("Day", key="day")
        for slot in self._slots:
            label = f"{slot_hour(slot, config.slot_minutes):02d}" if slot % config.slots_per_hour == 0 else ""
            table.add_column(label, key=f"slot-{slot}", width=2)

        for day in self._days:
            eligible_day = self.manager.is_eligible(day, self._slots[0])
            label = Text(day_label(day), style="" if eligible_day else "dim")
            table.add_row(label, *(self._cell(day, s) for s in self._slots), key=day)
        self._layout_key = self._current_layout_key()

    def _cell(self, day: str, slot: int) -> Text:
        return render_cell(self.manager.selected_by(day, slot), self.manager.is_eligible(day, slot))

    def _refresh_row(self, day: str):
        table = self.query_one("#grid", DataTable)
        for slot in self._slots:
            table.update_cell(day, f"slot-{slot}", self._cell(day, slot))

    def _update_sidebar(self):
        sel = self.manager
        lines = ["[bold]Users[/bold]"]
        for user in sel.users:
            marker = "▶" if user.id == sel.state.active_user_id else " "
            lines.append(f"{marker} [{user.color}]██[/] {escape(user.name)}")
        self.query_one("#legend", Static).update("\n".join(lines))

        mine = ranges_to_text(sel.active_ranges()) or "(none)"
        common = ranges_to_text(sel.common_ranges()) or "(none)"
        mode = f"\n[yellow]Range select: {self.gesture.mode}[/yellow]" if self.gesture and self.gesture.dragging else ""
        self.query_one("#summary", Static).update(
            f"\n[bold]My ranges[/bold]\n{mine}\n\n[bold]Common[/bold]\n{common}{mode}"
        )
        self.query_one("#sidebar").display = sel.state.options.sidebar_open

    def _cursor_cell(self) -> tuple[str, int] | None:
        table = self.query_one("#grid", DataTable)
        if table.row_count == 0:
            return None
        cell_key = table.coordinate_to_cell_key(table.cursor_coordinate)
        return self._decode_cell_key(cell_key)

    @staticmethod
    def _decode_cell_key(cell_key) -> tuple[str, int] | None:
        column = cell_key.column_key.value or ""
        if not column.startswith("slot-"):
            return None
        return cell_key.row_key.value, int(column[len("slot-"):])

    def _after_change(self, day: str):
        self._refresh_row(day)
        self._update_sidebar()

    def action_toggle_slot(self) -> None:
        cell = self._cursor_cell()
        if cell is None:
            return
        if self.manager.toggle_slot(*cell) is not None:
            self._after_change(cell[0])

    def on_data_table_cell_selected(self, event: DataTable.CellSelected) -> None:
        if self.gesture.dragging:
            self.action_end_drag()
            return
        cell = self._decode_cell_key(event.cell_key)
        if cell is not None and self.manager.toggle_slot(*cell) is not None:
            self._after_change(cell[0])

    def on_data_table_cell_highlighted(self, event: DataTable.CellHighlighted) -> None:
        if self.gesture is None or not self.gesture.dragging:
            return
        cell = self._decode_cell_key(event.cell_key)
        if cell is None or not self.manager.is_eligible(*cell):
            return
        self.gesture.move(*cell)
        self._after_change(self.gesture.anchor[0])

    def action_drag(self) -> None:
        if self.gesture.dragging:
            self.action_end_drag()
            return
        cell = self._cursor_cell()
        if cell is None:
            return
        if self.gesture.begin(*cell):
            self._after_change(cell[0])
        else:
            self.notify("Cannot start a range here", severity="warning")

    def action_end_drag(self) -> None:
        if self.gesture.dragging:
            self.gesture.end()
            self._update_sidebar()

    def action_next_user(self) -> None:
        self.gesture.end()
        user = self.manager.cycle_active()
        if user:
            self.notify(f"Now editing as {user.name}", severity="information")
        self._update_sidebar()

    def action_clear_user(self) -> None:
        user = self.manager.active_user
        if user is None:
            return
        days = user.selections.days()
        self.manager.clear_all(user)
        for day in days:
            if day in self._days:
                self._refresh_row(day)
        self._update_sidebar()
        self.notify(f"Cleared selections of {user.name}", severity="information")

    def action_toggle_sidebar(self) -> None:
        self.manager.toggle_sidebar()
        self._update_sidebar()
