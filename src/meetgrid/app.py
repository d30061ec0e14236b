import logging
from datetime import date
from pathlib import Path

from textual.app import App
from textual.binding import Binding

from meetgrid.models import DEFAULT_CONFIG, GridConfig
from meetgrid.selection import SelectionManager
from meetgrid.store import FragmentStore

logger = logging.getLogger(__name__)

CSS_PATH = Path(__file__).parent / "styles" / "app.tcss"


class MeetGridApp(App):
    """Shared availability planner."""

    TITLE = "meetgrid"
    SUB_TITLE = "Shared Availability"
    CSS_PATH = CSS_PATH

    BINDINGS = [
        Binding("1", "show_grid", "Grid", show=True),
        Binding("2", "show_ranges", "Ranges", show=True),
        Binding("3", "show_users", "Users", show=True),
        Binding("4", "show_share", "Share", show=True),
        Binding("5", "show_options", "Options", show=True),
        Binding("q", "quit", "Quit", show=True),
    ]

    def __init__(
        self,
        fragment: str | None = None,
        store: FragmentStore | None = None,
        config: GridConfig | None = None,
        today: date | None = None,
    ):
        super().__init__()
        self.grid_config = config or DEFAULT_CONFIG
        self.today = today
        self.store = store or FragmentStore()
        self.selection_manager = SelectionManager(config=self.grid_config)
        self._restored_from = self._restore(fragment)
        self.selection_manager.subscribe(self._persist)

    def _restore(self, fragment: str | None) -> str | None:
        """Load the given fragment, else the stored one, else a single default user."""
        for source, text in (("link", fragment), ("saved state", self.store.load())):
            if not text:
                continue
            result = self.selection_manager.load_fragment(text)
            if result.ok:
                return source
            logger.warning("Could not restore state from %s", source)
        self.selection_manager.add_user()
        return None

    def _persist(self, fragment: str):
        try:
            self.store.save(fragment)
        except OSError as exc:
            logger.warning("Could not save state to %s: %s", self.store.path, exc)

    def on_mount(self) -> None:
        from meetgrid.screens.grid import GridScreen
        self.install_screen(GridScreen(), "grid")
        self._persist(self.selection_manager.fragment)

        if self._restored_from:
            count = len(self.selection_manager.users)
            self.notify(
                f"Restored {count} user{'s' if count != 1 else ''} from {self._restored_from}",
                severity="information",
            )
        self.push_screen("grid")

    def _open(self, screen) -> None:
        from meetgrid.screens.grid import GridScreen
        if not isinstance(self.screen, GridScreen):
            self.pop_screen()
        self.push_screen(screen)

    def action_show_grid(self) -> None:
        from meetgrid.screens.grid import GridScreen
        if not isinstance(self.screen, GridScreen):
            self.pop_screen()

    def action_show_ranges(self) -> None:
        from meetgrid.screens.ranges import RangesScreen
        self._open(RangesScreen())

    def action_show_users(self) -> None:
        from meetgrid.screens.users import UsersScreen
        self._open(UsersScreen())

    def action_show_share(self) -> None:
        from meetgrid.screens.share import ShareScreen
        self._open(ShareScreen())

    def action_show_options(self) -> None:
        from meetgrid.screens.options import OptionsScreen
        self._open(OptionsScreen())

    def copy_text(self, text: str, what: str) -> None:
        """Fire-and-forget clipboard copy."""
        try:
            self.copy_to_clipboard(text)
        except Exception as exc:
            logger.debug("Clipboard copy failed: %s", exc)
            return
        self.notify(f"Copied {what}", severity="information")
