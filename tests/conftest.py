import pytest

from meetgrid.models import AppState, DisplayOptions, SlotSet, User
from meetgrid.selection import SelectionManager

ALL_DAYS = frozenset(range(7))


def make_user(user_id: int, name: str = "", selections: dict | None = None, color: str = "#2563eb") -> User:
    return User(
        id=user_id,
        name=name or f"User {user_id}",
        color=color,
        selections=SlotSet(selections or {}),
    )


@pytest.fixture
def open_options():
    """Every weekday and hour selectable."""
    return DisplayOptions(start_hour=0, end_hour=24, business_days=ALL_DAYS)


@pytest.fixture
def manager(open_options):
    mgr = SelectionManager(AppState(options=open_options))
    mgr.add_user("Alice")
    return mgr
