"""Range compaction and multi-user intersection.

Selected slots are stored sparsely per day; everything shown to people is
derived here as maximal contiguous ranges with real start/end datetimes.
"""

from datetime import timedelta
from typing import Iterable, Iterator

from meetgrid.day_utils import day_start, format_datetime, format_time
from meetgrid.models import DEFAULT_CONFIG, GridConfig, Range, SlotSet, User


def compact_slots(day: str, slots: Iterable[int], config: GridConfig = DEFAULT_CONFIG) -> Iterator[Range]:
    """Yield one Range per maximal run of consecutive slot indices on ``day``."""
    ordered = sorted(set(slots))
    if not ordered:
        return
    midnight = day_start(day)
    step = config.slot_minutes

    def make(start: int, end: int) -> Range:
        return Range(
            day=day,
            start_slot=start,
            end_slot=end,
            start=midnight + timedelta(minutes=start * step),
            end=midnight + timedelta(minutes=(end + 1) * step),
        )

    run_start = prev = ordered[0]
    for idx in ordered[1:]:
        if idx != prev + 1:
            yield make(run_start, prev)
            run_start = idx
        prev = idx
    yield make(run_start, prev)


def iter_user_ranges(selections: SlotSet, config: GridConfig = DEFAULT_CONFIG) -> Iterator[Range]:
    """Ranges across all days in chronological order."""
    # days() is sorted and day keys order chronologically, so chaining the
    # per-day runs is already ordered by start instant.
    for day, slots in selections.items():
        yield from compact_slots(day, slots, config)


def user_ranges(selections: SlotSet, config: GridConfig = DEFAULT_CONFIG) -> list[Range]:
    return sorted(iter_user_ranges(selections, config), key=lambda r: r.start)


def common_slots(users: list[User]) -> SlotSet:
    """Slots selected by every user, per day.

    A user with nothing recorded for a day empties that day's intersection.
    """
    common = SlotSet()
    if not users:
        return common

    day_keys: set[str] = set()
    for user in users:
        day_keys.update(user.selections.days())

    for day in sorted(day_keys):
        running: set[int] | None = None
        for user in users:
            slots = user.selections.slot_set(day)
            running = set(slots) if running is None else running & slots
            if not running:
                break
        for idx in running or ():
            common.add(day, idx)
    return common


def common_ranges(users: list[User], config: GridConfig = DEFAULT_CONFIG) -> list[Range]:
    """Compacted ranges covered by every user."""
    return user_ranges(common_slots(users), config)


def selected_by(users: list[User], day: str, slot: int) -> list[User]:
    """Users that have ``(day, slot)`` selected, in user-list order."""
    return [u for u in users if u.selections.has(day, slot)]


def format_range(r: Range) -> str:
    """Display line like ``2024-01-10 00:15 - 00:45``."""
    return f"{format_datetime(r.start)} - {format_time(r.end)}"


def ranges_to_text(ranges: Iterable[Range]) -> str:
    return "\n".join(format_range(r) for r in ranges)
