from datetime import datetime

import pytest

from conftest import make_user
from meetgrid.models import GridConfig, SlotSet
from meetgrid.ranges import (
    common_ranges,
    common_slots,
    compact_slots,
    format_range,
    iter_user_ranges,
    ranges_to_text,
    selected_by,
    user_ranges,
)


def test_compact_splits_on_gaps():
    ranges = list(compact_slots("2024-01-10", {5, 0, 1, 2, 7, 6}))
    assert [(r.start_slot, r.end_slot) for r in ranges] == [(0, 2), (5, 7)]
    assert ranges[0].start == datetime(2024, 1, 10, 0, 0)
    assert ranges[0].end == datetime(2024, 1, 10, 0, 45)
    assert ranges[1].slot_count == 3


def test_compact_empty_yields_nothing():
    assert list(compact_slots("2024-01-10", [])) == []
    assert user_ranges(SlotSet()) == []


@pytest.mark.parametrize("slots", [
    {0},
    {95},
    {0, 95},
    {1, 2, 3, 10, 11, 40, 42, 44, 45},
    set(range(96)),
])
def test_compaction_covers_input_without_overlap(slots):
    ranges = list(compact_slots("2024-03-01", slots))
    covered = []
    for r in ranges:
        assert r.start_slot <= r.end_slot
        covered.extend(range(r.start_slot, r.end_slot + 1))
    assert sorted(covered) == sorted(slots)
    assert len(covered) == len(set(covered))
    for a, b in zip(ranges, ranges[1:]):
        assert a.end_slot + 1 < b.start_slot


def test_last_slot_ends_at_next_midnight():
    (r,) = compact_slots("2024-01-10", {95})
    assert r.end == datetime(2024, 1, 11, 0, 0)
    assert format_range(r) == "2024-01-10 23:45 - 00:00"


def test_user_ranges_are_chronological():
    sel = SlotSet({"2024-02-01": {40}, "2024-01-31": {10, 11}, "2023-12-31": {95}})
    ranges = user_ranges(sel)
    assert [r.day for r in ranges] == ["2023-12-31", "2024-01-31", "2024-02-01"]
    assert ranges == sorted(ranges, key=lambda r: r.start)


def test_iter_user_ranges_is_restartable():
    sel = SlotSet({"2024-01-10": {1, 2}})
    assert list(iter_user_ranges(sel)) == list(iter_user_ranges(sel))


def test_custom_slot_length():
    config = GridConfig(slot_minutes=30)
    (r,) = compact_slots("2024-01-10", {2, 3}, config)
    assert r.start == datetime(2024, 1, 10, 1, 0)
    assert r.end == datetime(2024, 1, 10, 2, 0)


def test_two_user_overlap_scenario():
    a = make_user(1, selections={"2024-01-10": {0, 1, 2}})
    b = make_user(2, selections={"2024-01-10": {1, 2, 3}})
    ranges = common_ranges([a, b])
    assert [(r.start_slot, r.end_slot) for r in ranges] == [(1, 2)]
    assert ranges_to_text(ranges) == "2024-01-10 00:15 - 00:45"


def test_common_ranges_zero_users():
    assert common_ranges([]) == []


def test_common_ranges_single_user_equals_own_ranges():
    a = make_user(1, selections={"2024-01-10": {0, 1, 5}, "2024-01-12": {30}})
    assert common_ranges([a]) == user_ranges(a.selections)


def test_day_missing_for_one_user_has_no_common_time():
    a = make_user(1, selections={"2024-01-10": {4, 5}, "2024-01-11": {4, 5}})
    b = make_user(2, selections={"2024-01-10": {5, 6}})
    common = common_slots([a, b])
    assert common.days() == ["2024-01-10"]
    assert common.slots("2024-01-10") == (5,)


def test_empty_day_entry_counts_as_absent():
    a = make_user(1, selections={"2024-01-10": {4}})
    b = make_user(2, selections={"2024-01-10": set()})
    assert common_ranges([a, b]) == []


def test_adding_a_user_never_grows_common_set():
    a = make_user(1, selections={"2024-01-10": {0, 1, 2, 3}, "2024-01-11": {8, 9}})
    b = make_user(2, selections={"2024-01-10": {1, 2, 3, 4}, "2024-01-11": {9}})
    c = make_user(3, selections={"2024-01-10": {2, 3, 50}})
    two = common_slots([a, b])
    three = common_slots([a, b, c])
    for day, slots in three.items():
        assert set(slots) <= set(two.slots(day))
    assert len(three) <= len(two)


def test_common_ranges_span_multiple_days_in_order():
    a = make_user(1, selections={"2024-01-11": {10, 11}, "2024-01-10": {3}})
    b = make_user(2, selections={"2024-01-11": {11, 12}, "2024-01-10": {3, 4}})
    assert ranges_to_text(common_ranges([a, b])) == (
        "2024-01-10 00:45 - 01:00\n"
        "2024-01-11 02:45 - 03:00"
    )


def test_selected_by_keeps_user_order():
    a = make_user(1, selections={"2024-01-10": {7}})
    b = make_user(2)
    c = make_user(3, selections={"2024-01-10": {7}})
    assert [u.id for u in selected_by([a, b, c], "2024-01-10", 7)] == [1, 3]
    assert selected_by([a, b, c], "2024-01-10", 8) == []
