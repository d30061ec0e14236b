from rich.markup import escape
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.screen import Screen
from textual.widgets import Footer, Header, Label, Static

from meetgrid.ranges import ranges_to_text


class RangesScreen(Screen):
    """Active user's ranges and the ranges common to everyone."""

    BINDINGS = [
        Binding("c", "copy_mine", "Copy mine", show=True),
        Binding("y", "copy_common", "Copy common", show=True),
        Binding("escape", "go_back", "Back", show=True),
    ]

    def compose(self) -> ComposeResult:
        yield Header()
        with VerticalScroll(id="ranges-container"):
            yield Label("", id="mine-title")
            yield Static("", id="mine-text", classes="ranges-text")
            yield Label("[bold]Common to all users[/bold]")
            yield Static("", id="common-text", classes="ranges-text")
        yield Footer()

    def on_mount(self) -> None:
        self._populate()

    def _texts(self) -> tuple[str, str]:
        sel = self.app.selection_manager
        return ranges_to_text(sel.active_ranges()), ranges_to_text(sel.common_ranges())

    def _populate(self):
        user = self.app.selection_manager.active_user
        title = f"[bold]{escape(user.name)}[/bold]" if user else "[dim]No active user[/dim]"
        self.query_one("#mine-title", Label).update(title)
        mine, common = self._texts()
        self.query_one("#mine-text", Static).update(escape(mine) or "[dim](none)[/dim]")
        self.query_one("#common-text", Static).update(escape(common) or "[dim](none)[/dim]")

    def action_copy_mine(self) -> None:
        self.app.copy_text(self._texts()[0], "your ranges")

    def action_copy_common(self) -> None:
        self.app.copy_text(self._texts()[1], "common ranges")

    def action_go_back(self) -> None:
        self.app.pop_screen()
