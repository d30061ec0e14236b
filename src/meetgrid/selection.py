import logging
import random
import time
from typing import Callable, Literal

from meetgrid.codec import DecodeResult, decode_state, encode_state
from meetgrid.day_utils import parse_day_key, slot_hour, weekday_number
from meetgrid.models import DEFAULT_CONFIG, AppState, GridConfig, User
from meetgrid.ranges import common_ranges, selected_by, user_ranges

logger = logging.getLogger(__name__)

Mode = Literal["add", "remove"]


class SelectionError(ValueError):
    """A mutation was given a cell that cannot exist on the grid."""


class SlotIndexError(SelectionError):
    pass


class DayKeyError(SelectionError):
    pass


class SelectionManager:
    """Owns one AppState and every mutation applied to it.

    After each completed mutation the share fragment is re-encoded and passed
    to subscribers.
    """

    def __init__(self, state: AppState | None = None, config: GridConfig | None = None):
        self.config = config or DEFAULT_CONFIG
        self.state = state or AppState()
        self._listeners: list[Callable[[str], None]] = []
        self.loads = 0
        self._fragment = encode_state(self.state)

    # -- change tracking --

    def subscribe(self, callback: Callable[[str], None]):
        self._listeners.append(callback)

    @property
    def fragment(self) -> str:
        return self._fragment

    def _changed(self):
        self._fragment = encode_state(self.state)
        for callback in list(self._listeners):
            try:
                callback(self._fragment)
            except Exception:
                logger.exception("State listener %r failed", callback)

    # -- users --

    @property
    def users(self) -> list[User]:
        return self.state.users

    @property
    def active_user(self) -> User | None:
        return self.state.active_user

    def _new_user_id(self) -> int:
        taken = {u.id for u in self.state.users}
        while True:
            user_id = int(time.time() * 1000) + random.randrange(1000)
            if user_id not in taken:
                return user_id

    def add_user(self, name: str | None = None) -> User:
        """Create a user with the next palette color. The first user becomes active."""
        position = len(self.state.users)
        user = User(
            id=self._new_user_id(),
            name=(name or "").strip() or f"User {position + 1}",
            color=self.config.color_for(position),
        )
        self.state.users.append(user)
        if self.state.active_user_id is None:
            self.state.active_user_id = user.id
        logger.debug("Added user %s (%s)", user.name, user.id)
        self._changed()
        return user

    def set_active(self, user_id: int):
        if self.state.get_user(user_id) is None:
            logger.debug("Ignoring unknown active user %r", user_id)
            return
        self.state.active_user_id = user_id
        self._changed()

    def cycle_active(self) -> User | None:
        """Make the next user in list order active."""
        users = self.state.users
        if not users:
            return None
        ids = [u.id for u in users]
        if self.state.active_user_id in ids:
            nxt = users[(ids.index(self.state.active_user_id) + 1) % len(users)]
        else:
            nxt = users[0]
        self.set_active(nxt.id)
        return nxt

    # -- queries --

    def _check_cell(self, day: str, slot: int):
        if parse_day_key(day) is None:
            raise DayKeyError(f"invalid day key {day!r}, expected YYYY-MM-DD")
        if not 0 <= slot < self.config.slots_per_day:
            raise SlotIndexError(
                f"slot {slot} out of range [0, {self.config.slots_per_day})"
            )

    def has(self, user: User, day: str, slot: int) -> bool:
        return user.selections.has(day, slot)

    def is_eligible(self, day: str, slot: int) -> bool:
        """True when the cell's weekday and hour are inside the display options."""
        d = parse_day_key(day)
        if d is None:
            return False
        opts = self.state.options
        if weekday_number(d) not in opts.business_days:
            return False
        return opts.hour_visible(slot_hour(slot, self.config.slot_minutes))

    def selected_by(self, day: str, slot: int) -> list[User]:
        return selected_by(self.state.users, day, slot)

    def active_ranges(self):
        user = self.active_user
        if user is None:
            return []
        return user_ranges(user.selections, self.config)

    def common_ranges(self):
        return common_ranges(self.state.users, self.config)

    # -- mutations --

    def _target(self, day: str, slot: int) -> User | None:
        """Validate the cell and return the active user, or None for a no-op."""
        self._check_cell(day, slot)
        user = self.active_user
        if user is None:
            logger.debug("No active user; ignoring %s/%d", day, slot)
            return None
        if not self.is_eligible(day, slot):
            logger.debug("Cell %s/%d is not eligible", day, slot)
            return None
        return user

    def toggle_slot(self, day: str, slot: int) -> bool | None:
        """Flip one slot. Returns True if now selected, None if nothing happened."""
        user = self._target(day, slot)
        if user is None:
            return None
        if user.selections.has(day, slot):
            user.selections.discard(day, slot)
            selected = False
        else:
            user.selections.add(day, slot)
            selected = True
        self._changed()
        return selected

    def drag_mode(self, day: str, slot: int) -> Mode | None:
        """Mode a drag anchored at this cell would use."""
        user = self._target(day, slot)
        if user is None:
            return None
        return "remove" if user.selections.has(day, slot) else "add"

    def apply_range(self, day: str, start_slot: int, end_slot: int, mode: Mode):
        """Add or remove every slot between the two indices (inclusive) on one day."""
        if mode not in ("add", "remove"):
            raise ValueError(f"unknown mode {mode!r}")
        self._check_cell(day, end_slot)
        user = self._target(day, start_slot)
        if user is None or not self.is_eligible(day, end_slot):
            return
        lo, hi = min(start_slot, end_slot), max(start_slot, end_slot)
        for idx in range(lo, hi + 1):
            if mode == "add":
                user.selections.add(day, idx)
            else:
                user.selections.discard(day, idx)
        self._changed()

    def clear_all(self, user: User | None = None):
        """Remove every selection of ``user`` (the active user by default)."""
        user = user or self.active_user
        if user is None:
            return
        user.selections.clear()
        self._changed()

    # -- display options --

    def set_hours(self, start: int | None = None, end: int | None = None):
        """Change the visible hour range, keeping start < end."""
        opts = self.state.options
        if start is not None:
            opts.start_hour = max(0, min(start, 23))
            if opts.start_hour >= opts.end_hour:
                opts.end_hour = opts.start_hour + 1
        if end is not None:
            opts.end_hour = max(1, min(end, 24))
            if opts.start_hour >= opts.end_hour:
                opts.start_hour = opts.end_hour - 1
        self._changed()

    def set_business_days(self, days) -> bool:
        """Replace the selectable weekdays. An empty set is refused."""
        valid = frozenset(d for d in days if 0 <= d <= 6)
        if not valid:
            logger.debug("Ignoring empty business-day set")
            return False
        self.state.options.business_days = valid
        self._changed()
        return True

    def toggle_sidebar(self) -> bool:
        opts = self.state.options
        opts.sidebar_open = not opts.sidebar_open
        self._changed()
        return opts.sidebar_open

    # -- sharing --

    def load_fragment(self, text: str) -> DecodeResult:
        """Replace the whole state from a fragment. Leaves state alone on failure."""
        result = decode_state(text, self.config)
        if result.state is not None:
            self.state = result.state
            self.loads += 1
            self._changed()
        return result


class DragGesture:
    """Pointer-drag selection: idle -> dragging -> idle.

    The mode is fixed by the anchor cell when the gesture begins; each move
    re-applies the whole anchor-to-current range on the anchor's day.
    """

    def __init__(self, manager: SelectionManager):
        self.manager = manager
        self.anchor: tuple[str, int] | None = None
        self.mode: Mode | None = None

    @property
    def dragging(self) -> bool:
        return self.anchor is not None

    def begin(self, day: str, slot: int) -> bool:
        """Start a gesture on an eligible cell. Returns False if nothing started."""
        if self.dragging:
            return False
        mode = self.manager.drag_mode(day, slot)
        if mode is None:
            return False
        self.anchor = (day, slot)
        self.mode = mode
        self.manager.apply_range(day, slot, slot, mode)
        return True

    def move(self, day: str, slot: int):
        if not self.dragging:
            return
        anchor_day, anchor_slot = self.anchor
        if day != anchor_day:
            return
        self.manager.apply_range(anchor_day, anchor_slot, slot, self.mode)

    def end(self):
        self.anchor = None
        self.mode = None

    cancel = end
