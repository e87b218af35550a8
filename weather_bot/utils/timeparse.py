from __future__ import annotations

import re
from datetime import datetime
from zoneinfo import ZoneInfo

SEND_TIME_RE = re.compile(r"^(?P<hour>\d{1,2}):(?P<minute>\d{1,2})$", re.ASCII)


def parse_send_time(value: str | None) -> str | None:
    """Validate an ``HH:MM`` value and return it zero-padded, or ``None``."""

    if value is None:
        return None
    match = SEND_TIME_RE.match(value)
    if not match:
        return None
    hour = int(match.group("hour"))
    minute = int(match.group("minute"))
    if not (0 <= hour < 24 and 0 <= minute < 60):
        return None
    return f"{hour:02d}:{minute:02d}"


def local_now(tz: ZoneInfo | None = None) -> datetime:
    if tz is None:
        return datetime.now().astimezone()
    return datetime.now(tz=tz)


def to_local(moment: datetime, tz: ZoneInfo | None = None) -> datetime:
    # naive datetimes are taken as already local
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(tz) if tz is not None else moment.astimezone()


def format_slot(moment: datetime, tz: ZoneInfo | None = None) -> str:
    """Return the ``HH:MM`` delivery slot that ``moment`` falls into."""

    return to_local(moment, tz).strftime("%H:%M")
