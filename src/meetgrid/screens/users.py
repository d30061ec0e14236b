from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import DataTable, Footer, Header, Input, Static


class UsersScreen(Screen):
    """User legend: pick the active user or add a new one."""

    BINDINGS = [
        Binding("a", "focus_add", "Add user", show=True),
        Binding("enter", "activate", "Make active", show=True),
        Binding("escape", "go_back", "Back", show=True),
    ]

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="users-content"):
            yield Static("[bold]Users[/bold]", id="users-header")
            yield DataTable(id="users-table")
            yield Input(placeholder="Name for a new user, then Enter", id="new-user")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#users-table", DataTable)
        table.add_columns("", "Name", "Slots", "Active")
        table.cursor_type = "row"
        self._populate()
        table.focus()

    def _populate(self):
        sel = self.app.selection_manager
        table = self.query_one("#users-table", DataTable)
        table.clear()
        for user in sel.users:
            active = Text("▶", style="bold green") if user.id == sel.state.active_user_id else Text("")
            table.add_row(
                Text("██", style=user.color), user.name, str(len(user.selections)), active,
                key=str(user.id),
            )

    def _activate_row(self, row_key: str):
        sel = self.app.selection_manager
        sel.set_active(int(row_key))
        user = sel.active_user
        if user:
            self.notify(f"Now editing as {user.name}", severity="information")
        self._populate()

    def action_activate(self) -> None:
        table = self.query_one("#users-table", DataTable)
        if table.row_count == 0:
            return
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        self._activate_row(row_key.value)

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self._activate_row(event.row_key.value)

    def action_focus_add(self) -> None:
        self.query_one("#new-user", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "new-user":
            return
        user = self.app.selection_manager.add_user(event.value)
        event.input.value = ""
        self.notify(f"Added {user.name}", severity="information")
        self._populate()
        self.query_one("#users-table", DataTable).focus()

    def action_go_back(self) -> None:
        self.app.pop_screen()
