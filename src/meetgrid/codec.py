"""Share-fragment codec.

The whole application state is carried in one URL fragment::

    u=<id36>:<name>:<rrggbb>,...&sel=<id36>:<day>=<s>.<s>,...|...&a=<id36>&bh=9-18&bd=12345&up=1

Only the name field is percent-escaped, so the delimiters ``& = : , | . -``
never appear inside a field. Decoding is best effort: malformed tokens are
skipped and reported in :class:`DecodeResult` instead of raising.
"""

import logging
import re
from dataclasses import dataclass, field
from urllib.parse import quote, unquote

from meetgrid.day_utils import is_day_key
from meetgrid.models import DEFAULT_CONFIG, AppState, DisplayOptions, GridConfig, User

logger = logging.getLogger(__name__)

BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
BASE36_RE = re.compile(r"-?[0-9a-zA-Z]+")
HEX_COLOR_RE = re.compile(r"[0-9a-fA-F]{6}")
# Longer numeric tokens are never produced by encode_state.
MAX_NUMBER_LEN = 32
DEFAULT_NAME = "User"


@dataclass
class DecodeResult:
    """Recovered state plus the fragments that had to be dropped."""

    state: AppState | None
    skipped: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is not None


def to_base36(n: int) -> str:
    if n == 0:
        return "0"
    sign = "-" if n < 0 else ""
    n = abs(n)
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(BASE36_DIGITS[rem])
    return sign + "".join(reversed(digits))


def from_base36(text: str) -> int | None:
    if len(text) > MAX_NUMBER_LEN or not BASE36_RE.fullmatch(text):
        return None
    return int(text, 36)


def _parse_int(text: str) -> int | None:
    if len(text) > MAX_NUMBER_LEN or not (text.isascii() and text.isdigit()):
        return None
    return int(text)


def encode_state(state: AppState) -> str:
    """Serialize ``state`` to a fragment string (without the leading ``#``)."""
    users_enc = ",".join(
        f"{to_base36(u.id)}:{quote(u.name, safe='')}:{u.color.lstrip('#')}"
        for u in state.users
    )
    sel_parts = []
    for u in state.users:
        day_parts = [
            f"{day}={'.'.join(str(s) for s in slots)}"
            for day, slots in u.selections.items()
        ]
        sel_parts.append(f"{to_base36(u.id)}:{','.join(day_parts)}")
    active = to_base36(state.active_user_id) if state.active_user_id is not None else ""
    opts = state.options
    days = "".join(str(d) for d in sorted(opts.business_days))
    return (
        f"u={users_enc}&sel={'|'.join(sel_parts)}&a={active}"
        f"&bh={opts.start_hour}-{opts.end_hour}&bd={days}&up={1 if opts.sidebar_open else 0}"
    )


def share_url(fragment: str, base: str = "") -> str:
    return f"{base}#{fragment}"


def split_fragment(text: str) -> dict[str, str]:
    """Split ``k=v&k=v`` on the first ``=`` of each pair, without unescaping.

    A full URL is accepted; only the part after the first ``#`` is used.
    Later duplicates of a key are ignored.
    """
    text = text.strip()
    if "#" in text:
        text = text.split("#", 1)[1]
    params: dict[str, str] = {}
    for pair in text.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        params.setdefault(key, value)
    return params


def _decode_users(raw: str, config: GridConfig, skipped: list[str]) -> list[User]:
    users: list[User] = []
    seen: set[int] = set()
    for part in raw.split(","):
        if not part:
            continue
        id36, _, rest = part.partition(":")
        enc_name, _, color_hex = rest.partition(":")
        user_id = from_base36(id36)
        if user_id is None:
            skipped.append(f"user id {id36!r}")
            continue
        if user_id in seen:
            skipped.append(f"duplicate user id {id36!r}")
            continue
        seen.add(user_id)
        position = len(users)
        name = unquote(enc_name) if enc_name else f"{DEFAULT_NAME} {position + 1}"
        if HEX_COLOR_RE.fullmatch(color_hex):
            color = f"#{color_hex.lower()}"
        else:
            if color_hex:
                skipped.append(f"color {color_hex!r} of user {id36!r}")
            color = config.color_for(position)
        users.append(User(id=user_id, name=name, color=color))
    return users


def _decode_selections(raw: str, users: dict[int, User], config: GridConfig, skipped: list[str]):
    for user_part in raw.split("|"):
        if not user_part:
            continue
        id36, _, chunks = user_part.partition(":")
        user_id = from_base36(id36)
        user = users.get(user_id) if user_id is not None else None
        if user is None:
            skipped.append(f"selections of unknown user {id36!r}")
            continue
        for chunk in chunks.split(","):
            if not chunk:
                continue
            day, _, slots_raw = chunk.partition("=")
            if not is_day_key(day):
                skipped.append(f"day {day!r}")
                continue
            for token in slots_raw.split("."):
                idx = _parse_int(token)
                if idx is None or idx >= config.slots_per_day:
                    skipped.append(f"slot {token!r} on {day}")
                    continue
                user.selections.add(day, idx)


def _decode_options(params: dict[str, str], skipped: list[str]) -> DisplayOptions:
    options = DisplayOptions()

    bh = params.get("bh")
    if bh:
        start_raw, _, end_raw = bh.partition("-")
        start, end = _parse_int(start_raw), _parse_int(end_raw)
        if start is None or end is None:
            skipped.append(f"hour range {bh!r}")
        else:
            start, end = min(start, 23), max(1, min(end, 24))
            if start < end:
                options.start_hour, options.end_hour = start, end
            else:
                skipped.append(f"hour range {bh!r}")

    bd = params.get("bd")
    if bd:
        days = set()
        for ch in bd:
            if ch in "0123456":
                days.add(int(ch))
            else:
                skipped.append(f"business day {ch!r}")
        if days:
            options.business_days = frozenset(days)

    up = params.get("up")
    if up is not None:
        if up in ("0", "1"):
            options.sidebar_open = up == "1"
        else:
            skipped.append(f"sidebar flag {up!r}")

    return options


def decode_state(text: str, config: GridConfig = DEFAULT_CONFIG) -> DecodeResult:
    """Rebuild an AppState from a fragment. Never raises.

    Returns a result with ``state=None`` when no user could be restored.
    """
    skipped: list[str] = []
    params = split_fragment(text or "")

    raw_users = params.get("u")
    if not raw_users:
        return DecodeResult(None, skipped)
    users = _decode_users(raw_users, config, skipped)
    if not users:
        logger.warning("No restorable users in fragment; skipped %s", skipped)
        return DecodeResult(None, skipped)

    by_id = {u.id: u for u in users}
    if params.get("sel"):
        _decode_selections(params["sel"], by_id, config, skipped)

    active_id = users[0].id
    a = params.get("a")
    if a:
        parsed = from_base36(a)
        if parsed in by_id:
            active_id = parsed
        else:
            skipped.append(f"active user {a!r}")

    state = AppState(users=users, active_user_id=active_id, options=_decode_options(params, skipped))
    if skipped:
        logger.warning("Skipped %d malformed fragment token(s): %s", len(skipped), "; ".join(skipped))
    return DecodeResult(state, skipped)
