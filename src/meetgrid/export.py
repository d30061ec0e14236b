import json
from pathlib import Path
from datetime import datetime

from meetgrid.codec import encode_state
from meetgrid.models import DEFAULT_CONFIG, AppState, GridConfig, Range
from meetgrid.ranges import common_ranges, format_range, user_ranges


def _range_dict(r: Range) -> dict:
    return {
        "day": r.day,
        "start_slot": r.start_slot,
        "end_slot": r.end_slot,
        "start": r.start.isoformat(timespec="minutes"),
        "end": r.end.isoformat(timespec="minutes"),
        "text": format_range(r),
    }


def export_json_snapshot(state: AppState, output_path: Path, config: GridConfig = DEFAULT_CONFIG):
    """Export users, their ranges and the common ranges to a JSON file."""
    data = {
        "exported_at": datetime.now().isoformat(),
        "fragment": encode_state(state),
        "users": [
            {
                "id": u.id,
                "name": u.name,
                "color": u.color,
                "active": u.id == state.active_user_id,
                "ranges": [_range_dict(r) for r in user_ranges(u.selections, config)],
            }
            for u in state.users
        ],
        "common_ranges": [_range_dict(r) for r in common_ranges(state.users, config)],
    }

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def export_ical(ranges: list[Range], output_path: Path, summary: str = "Common availability"):
    """Export ranges to an iCal file, one event per range."""
    from icalendar import Calendar, Event

    cal = Calendar()
    cal.add("prodid", "-//meetgrid//Availability Planner//EN")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("x-wr-calname", summary)

    for r in ranges:
        event = Event()
        event.add("summary", summary)
        event.add("dtstart", r.start)
        event.add("dtend", r.end)
        event.add("uid", f"{r.day}-{r.start_slot}-{r.end_slot}@meetgrid")
        cal.add_component(event)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "wb") as f:
        f.write(cal.to_ical())
