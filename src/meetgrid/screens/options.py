from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Checkbox, Footer, Header, Label, Select, Switch

from meetgrid.day_utils import WEEKDAY_LABELS


class OptionsScreen(Screen):
    """Visible hours, selectable weekdays and sidebar visibility."""

    BINDINGS = [
        Binding("escape", "go_back", "Back", show=True),
    ]

    def compose(self) -> ComposeResult:
        opts = self.app.selection_manager.state.options
        hours = [(f"{h:02d}:00", h) for h in range(25)]
        yield Header()
        with Vertical(id="options-content"):
            yield Label("[bold]Visible hours[/bold]")
            with Horizontal(classes="option-row"):
                yield Select(hours[:24], value=opts.start_hour, allow_blank=False, id="start-hour")
                yield Label(" to ")
                yield Select(hours[1:], value=opts.end_hour, allow_blank=False, id="end-hour")
            yield Label("[bold]Selectable days[/bold]")
            with Horizontal(classes="option-row"):
                for num, name in enumerate(WEEKDAY_LABELS):
                    yield Checkbox(name, value=num in opts.business_days, id=f"bd-{num}")
            with Horizontal(classes="option-row"):
                yield Label("Show sidebar ")
                yield Switch(value=opts.sidebar_open, id="sidebar-switch")
        yield Footer()

    def on_select_changed(self, event: Select.Changed) -> None:
        if not isinstance(event.value, int):
            return
        sel = self.app.selection_manager
        if event.select.id == "start-hour":
            sel.set_hours(start=event.value)
        elif event.select.id == "end-hour":
            sel.set_hours(end=event.value)
        opts = sel.state.options
        self.query_one("#start-hour", Select).value = opts.start_hour
        self.query_one("#end-hour", Select).value = opts.end_hour

    def on_checkbox_changed(self, event: Checkbox.Changed) -> None:
        num = int(event.checkbox.id.removeprefix("bd-"))
        sel = self.app.selection_manager
        days = set(sel.state.options.business_days)
        if event.value:
            days.add(num)
        else:
            days.discard(num)
        if days == sel.state.options.business_days:
            return
        if not sel.set_business_days(days):
            event.checkbox.value = True
            self.app.notify("At least one day must stay selectable", severity="warning")

    def on_switch_changed(self, event: Switch.Changed) -> None:
        sel = self.app.selection_manager
        if event.value != sel.state.options.sidebar_open:
            sel.toggle_sidebar()

    def action_go_back(self) -> None:
        self.app.pop_screen()
