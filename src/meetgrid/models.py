from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Iterator

DEFAULT_PALETTE = (
    "#2563eb",  # blue
    "#22c55e",  # green
    "#ef4444",  # red
    "#f59e0b",  # amber
    "#a855f7",  # purple
    "#06b6d4",  # cyan
    "#ec4899",  # pink
    "#84cc16",  # lime
)

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class GridConfig:
    """Slot granularity, day horizon and user palette."""

    slot_minutes: int = 15
    days_ahead: int = 365
    palette: tuple[str, ...] = DEFAULT_PALETTE

    def __post_init__(self):
        if self.slot_minutes <= 0 or 60 % self.slot_minutes:
            raise ValueError(f"slot_minutes must divide 60, got {self.slot_minutes}")
        if not self.palette:
            raise ValueError("palette must not be empty")

    @property
    def slots_per_hour(self) -> int:
        return 60 // self.slot_minutes

    @property
    def slots_per_day(self) -> int:
        return MINUTES_PER_DAY // self.slot_minutes

    def color_for(self, index: int) -> str:
        """Palette color for the user created at position ``index``."""
        return self.palette[index % len(self.palette)]


DEFAULT_CONFIG = GridConfig()


class SlotSet:
    """Day key -> set of selected slot indices.

    Days iterate in sorted order, slots in ascending order. A day holding an
    empty set is treated the same as a missing day.
    """

    def __init__(self, data: dict[str, Iterable[int]] | None = None):
        self._days: dict[str, set[int]] = {}
        for day, slots in (data or {}).items():
            self._days[day] = set(slots)

    def has(self, day: str, slot: int) -> bool:
        slots = self._days.get(day)
        return slots is not None and slot in slots

    def add(self, day: str, slot: int):
        self._days.setdefault(day, set()).add(slot)

    def discard(self, day: str, slot: int):
        slots = self._days.get(day)
        if slots is not None:
            slots.discard(slot)

    def slots(self, day: str) -> tuple[int, ...]:
        return tuple(sorted(self._days.get(day, ())))

    def slot_set(self, day: str) -> frozenset[int]:
        return frozenset(self._days.get(day, ()))

    def days(self) -> list[str]:
        """Day keys with at least one selected slot, sorted."""
        return sorted(day for day, slots in self._days.items() if slots)

    def items(self) -> Iterator[tuple[str, tuple[int, ...]]]:
        for day in self.days():
            yield day, self.slots(day)

    def clear(self):
        self._days.clear()

    def normalized(self) -> "SlotSet":
        return SlotSet(dict(self.items()))

    def copy(self) -> "SlotSet":
        return SlotSet(self._days)

    def __contains__(self, day: str) -> bool:
        return bool(self._days.get(day))

    def __len__(self) -> int:
        return sum(len(slots) for slots in self._days.values())

    def __bool__(self) -> bool:
        return any(self._days.values())

    def __eq__(self, other) -> bool:
        if not isinstance(other, SlotSet):
            return NotImplemented
        return dict(self.items()) == dict(other.items())

    def __repr__(self) -> str:
        return f"SlotSet({dict(self.items())!r})"


@dataclass
class User:
    """A participant marking availability."""

    id: int
    name: str
    color: str
    selections: SlotSet = field(default_factory=SlotSet)


@dataclass
class DisplayOptions:
    """Grid display settings shared through the fragment."""

    start_hour: int = 9
    end_hour: int = 18
    business_days: frozenset[int] = frozenset({1, 2, 3, 4, 5})  # 0 = Sunday
    sidebar_open: bool = True

    def __post_init__(self):
        self.business_days = frozenset(self.business_days)
        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise ValueError(
                f"invalid hour range {self.start_hour}-{self.end_hour}"
            )

    def hour_visible(self, hour: int) -> bool:
        return self.start_hour <= hour < self.end_hour


@dataclass
class AppState:
    """Everything the share fragment carries."""

    users: list[User] = field(default_factory=list)
    active_user_id: int | None = None
    options: DisplayOptions = field(default_factory=DisplayOptions)

    def get_user(self, user_id: int | None) -> User | None:
        for user in self.users:
            if user.id == user_id:
                return user
        return None

    @property
    def active_user(self) -> User | None:
        return self.get_user(self.active_user_id)


@dataclass(frozen=True)
class Range:
    """A maximal run of contiguous selected slots on one day."""

    day: str
    start_slot: int
    end_slot: int  # inclusive
    start: datetime
    end: datetime

    @property
    def slot_count(self) -> int:
        return self.end_slot - self.start_slot + 1
