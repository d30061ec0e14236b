from datetime import date, datetime

import pytest

from meetgrid.day_utils import (
    day_key,
    day_label,
    generate_days,
    parse_day_key,
    slot_label,
    slot_start,
    weekday_number,
)
from meetgrid.models import DisplayOptions, GridConfig, SlotSet


def test_grid_config_defaults():
    config = GridConfig()
    assert config.slots_per_day == 96
    assert config.slots_per_hour == 4
    assert config.color_for(8) == config.color_for(0)


@pytest.mark.parametrize("minutes", [0, 7, 45, -15])
def test_grid_config_rejects_uneven_slots(minutes):
    with pytest.raises(ValueError):
        GridConfig(slot_minutes=minutes)


def test_display_options_validate_hours():
    with pytest.raises(ValueError):
        DisplayOptions(start_hour=10, end_hour=10)
    with pytest.raises(ValueError):
        DisplayOptions(start_hour=0, end_hour=25)


def test_slot_set_orders_days_and_slots():
    slots = SlotSet()
    slots.add("2024-02-01", 9)
    slots.add("2024-01-31", 3)
    slots.add("2024-01-31", 1)
    assert slots.days() == ["2024-01-31", "2024-02-01"]
    assert list(slots.items()) == [("2024-01-31", (1, 3)), ("2024-02-01", (9,))]
    assert len(slots) == 3


def test_slot_set_empty_day_equals_absent():
    slots = SlotSet({"2024-01-10": {1}})
    slots.discard("2024-01-10", 1)
    assert slots == SlotSet()
    assert not slots
    assert "2024-01-10" not in slots
    assert slots.days() == []


def test_slot_set_copy_is_independent():
    original = SlotSet({"2024-01-10": {1}})
    clone = original.copy()
    clone.add("2024-01-10", 2)
    assert original.slots("2024-01-10") == (1,)


def test_day_keys():
    assert day_key(date(2024, 3, 5)) == "2024-03-05"
    assert parse_day_key("2024-03-05") == date(2024, 3, 5)
    assert parse_day_key("2024-3-5") is None
    assert parse_day_key("2024-02-30") is None
    assert parse_day_key("20240305") is None
    assert parse_day_key("9999-12-31") is None
    assert parse_day_key("9999-12-30") == date(9999, 12, 30)


def test_weekday_numbers_start_on_sunday():
    assert weekday_number(date(2024, 1, 7)) == 0  # Sunday
    assert weekday_number(date(2024, 1, 13)) == 6  # Saturday
    assert day_label("2024-01-10") == "2024-01-10 (Wed)"


def test_slot_times():
    assert slot_start("2024-01-10", 37, 15) == datetime(2024, 1, 10, 9, 15)
    assert slot_label(37, 15) == "09:15"


def test_generate_days_is_inclusive():
    days = generate_days(3, today=date(2024, 12, 30))
    assert days == ["2024-12-30", "2024-12-31", "2025-01-01", "2025-01-02"]
