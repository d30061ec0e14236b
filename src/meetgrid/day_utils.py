import re
from datetime import date, datetime, timedelta

DAY_KEY_RE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")

WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def day_key(d: date) -> str:
    """Format a date as a ``YYYY-MM-DD`` day key."""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_day_key(key: str) -> date | None:
    """Parse a day key into a date.

    Only the exact zero-padded ``YYYY-MM-DD`` form is accepted; anything else
    (including impossible dates like ``2024-02-30``) returns None. The last
    representable date is rejected too: its final slot ends past ``date.max``.
    """
    match = DAY_KEY_RE.fullmatch(key)
    if not match:
        return None
    try:
        d = date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None
    if d == date.max:
        return None
    return d


def is_day_key(key: str) -> bool:
    return parse_day_key(key) is not None


def weekday_number(d: date) -> int:
    """Weekday with Sunday as 0 and Saturday as 6."""
    return (d.weekday() + 1) % 7


def day_label(key: str) -> str:
    """Row label like ``2024-01-10 (Wed)``."""
    d = parse_day_key(key)
    if d is None:
        return key
    return f"{key} ({WEEKDAY_LABELS[weekday_number(d)]})"


def day_start(key: str) -> datetime:
    """Local midnight of a day key."""
    d = parse_day_key(key)
    if d is None:
        raise ValueError(f"not a day key: {key!r}")
    return datetime(d.year, d.month, d.day)


def slot_start(key: str, slot: int, slot_minutes: int) -> datetime:
    return day_start(key) + timedelta(minutes=slot * slot_minutes)


def slot_hour(slot: int, slot_minutes: int) -> int:
    return (slot * slot_minutes) // 60


def slot_label(slot: int, slot_minutes: int) -> str:
    minutes = slot * slot_minutes
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_datetime(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%d %H:%M")


def format_time(dt: datetime) -> str:
    return dt.strftime("%H:%M")


def generate_days(days_ahead: int, today: date | None = None) -> list[str]:
    """Day keys from today through ``days_ahead`` days later, inclusive."""
    today = today or date.today()
    return [day_key(today + timedelta(days=i)) for i in range(days_ahead + 1)]
