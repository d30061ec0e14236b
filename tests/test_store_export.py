import json

from conftest import make_user
from meetgrid.codec import decode_state, encode_state
from meetgrid.export import export_ical, export_json_snapshot
from meetgrid.models import AppState
from meetgrid.ranges import common_ranges
from meetgrid.store import FragmentStore


def two_users():
    a = make_user(1, "Ann", {"2024-01-10": {0, 1, 2}})
    b = make_user(2, "Ben", {"2024-01-10": {1, 2, 3}})
    return AppState(users=[a, b], active_user_id=1)


def test_store_round_trip(tmp_path):
    store = FragmentStore(tmp_path / "nested" / "state.txt")
    assert store.load() is None
    fragment = encode_state(two_users())
    store.save(fragment)
    assert store.load() == fragment
    assert not (tmp_path / "nested" / "state.tmp").exists()


def test_store_ignores_unreadable_file(tmp_path):
    path = tmp_path / "state.txt"
    path.write_bytes(b"\xff\xfe\x00garbage")
    assert FragmentStore(path).load() is None


def test_store_empty_file_is_nothing(tmp_path):
    path = tmp_path / "state.txt"
    path.write_text("\n")
    assert FragmentStore(path).load() is None


def test_json_snapshot(tmp_path):
    state = two_users()
    out = tmp_path / "snapshot.json"
    export_json_snapshot(state, out)
    data = json.loads(out.read_text())
    assert [u["name"] for u in data["users"]] == ["Ann", "Ben"]
    assert data["users"][0]["active"] is True
    assert data["users"][0]["ranges"][0]["text"] == "2024-01-10 00:00 - 00:45"
    assert [r["text"] for r in data["common_ranges"]] == ["2024-01-10 00:15 - 00:45"]
    assert decode_state(data["fragment"]).state == state


def test_ical_export(tmp_path):
    from icalendar import Calendar

    out = tmp_path / "common.ics"
    export_ical(common_ranges(two_users().users), out)
    cal = Calendar.from_ical(out.read_bytes())
    events = list(cal.walk("VEVENT"))
    assert len(events) == 1
    assert events[0].decoded("dtstart").strftime("%Y-%m-%d %H:%M") == "2024-01-10 00:15"
    assert events[0].decoded("dtend").strftime("%H:%M") == "00:45"
