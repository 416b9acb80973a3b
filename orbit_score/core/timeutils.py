from datetime import datetime, tzinfo
from typing import Optional, Union

from dateutil import parser as date_parser
from dateutil import tz

Instant = Union[str, datetime, None]


def parse_instant(value: Instant) -> Optional[datetime]:
    """
    Parses an ISO-8601 string (or passes through a datetime).

    Naive values are treated as UTC. Anything isoparse rejects, including
    time-only strings such as "07:45", returns None.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        try:
            parsed = date_parser.isoparse(text)
        except (ValueError, OverflowError):
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz.UTC)

    return parsed


def minutes_between(start: Instant, end: Instant) -> Optional[float]:
    """Positive minutes from start to end, otherwise None."""
    a = parse_instant(start)
    b = parse_instant(end)
    if a is None or b is None:
        return None

    minutes = (b - a).total_seconds() / 60
    return minutes if minutes > 0 else None


def time_to_minutes(value: str) -> int:
    """'HH:MM' or 'HH:MM:SS' -> minutes since midnight."""
    parts = str(value).strip().split(":")
    hours = int(parts[0])
    minutes = int(parts[1]) if len(parts) > 1 and parts[1] else 0
    return hours * 60 + minutes


def resolve_timezone(name: str) -> tzinfo:
    zone = tz.gettz(name) if name else None
    if zone is None:
        raise ValueError(f"Unknown timezone: {name!r}")
    return zone


def utc_to_local_minutes(value: Instant, zone: Union[str, tzinfo]) -> int:
    """
    Converts an absolute instant to local minutes-since-midnight in the
    facility timezone. Unparseable instants map to 0.
    """
    instant = parse_instant(value)
    if instant is None:
        return 0

    if isinstance(zone, str):
        zone = resolve_timezone(zone)

    local = instant.astimezone(zone)
    return local.hour * 60 + local.minute
