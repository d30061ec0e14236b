from rich.markup import escape
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Footer, Header, Input, Label, Static

from meetgrid.codec import share_url


class ShareScreen(Screen):
    """Show the share link and load one from someone else."""

    BINDINGS = [
        Binding("c", "copy_link", "Copy link", show=True),
        Binding("l", "focus_load", "Load link", show=True),
        Binding("escape", "go_back", "Back", show=True),
    ]

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="share-content"):
            yield Label("[bold]Share link[/bold]")
            yield Static("", id="share-link")
            yield Label("[bold]Load a link[/bold]")
            yield Input(placeholder="Paste a link or fragment, then Enter", id="load-input")
        yield Footer()

    def on_mount(self) -> None:
        self._update_link()

    def _link(self) -> str:
        return share_url(self.app.selection_manager.fragment)

    def _update_link(self):
        self.query_one("#share-link", Static).update(escape(self._link()))

    def action_copy_link(self) -> None:
        self.app.copy_text(self._link(), "share link")

    def action_focus_load(self) -> None:
        self.query_one("#load-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "load-input" or not event.value.strip():
            return
        result = self.app.selection_manager.load_fragment(event.value)
        if not result.ok:
            self.notify("No shared state found in that link", severity="error")
            return
        event.input.value = ""
        count = len(result.state.users)
        self.notify(f"Loaded {count} user{'s' if count != 1 else ''}", severity="information")
        if result.skipped:
            self.notify(
                f"Ignored {len(result.skipped)} malformed part{'s' if len(result.skipped) != 1 else ''} of the link",
                severity="warning",
            )
        self._update_link()

    def action_go_back(self) -> None:
        self.app.pop_screen()
