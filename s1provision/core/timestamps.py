"""Timestamp and duration parsing shared by the API codecs and validators."""
from __future__ import annotations
import re
from datetime import datetime, timedelta, timezone

_RFC3339_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})$"
)

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = r"(?:\d+(?:\.\d*)?|\.\d+)(?:ns|us|µs|μs|ms|s|m|h)"
_DURATION_RE = re.compile(rf"^[+-]?(?:{_DURATION_PART})+$")
_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware datetime.

    Args:
        value: Timestamp such as ``2025-01-31T12:00:00Z`` or ``2025-01-31T12:00:00.5+02:00``

    Returns:
        Timezone-aware datetime

    Raises:
        ValueError: If the value is not a valid RFC 3339 timestamp
    """
    match = _RFC3339_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"'{value}' is not an RFC 3339 timestamp")
    year, month, day, hour, minute, second, fraction, offset = match.groups()
    microsecond = int((fraction or "0")[:6].ljust(6, "0"))
    if offset in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = 1 if offset[0] == "+" else -1
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        if hours > 23 or minutes > 59:
            raise ValueError(f"'{value}' has an invalid UTC offset")
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))
    return datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), microsecond, tzinfo=tz
    )


def format_timestamp(value: datetime) -> str:
    """Format a datetime as an RFC 3339 timestamp with second precision.

    Naive datetimes are assumed to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    offset = value.utcoffset() or timedelta(0)
    base = value.strftime("%Y-%m-%dT%H:%M:%S")
    if offset == timedelta(0):
        return f"{base}Z"
    total_minutes = int(offset.total_seconds() // 60)
    sign = "+" if total_minutes >= 0 else "-"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{base}{sign}{hours:02d}:{minutes:02d}"


def parse_duration(raw: str) -> timedelta:
    """Parse a duration string such as ``720h``, ``1h30m`` or ``-1.5h``.

    Same syntax as Go's ``time.ParseDuration``: an optional sign followed by
    one or more decimal numbers with a unit suffix (ns, us, µs, ms, s, m, h).
    A bare ``0`` is also accepted.

    Raises:
        ValueError: If the string is not a duration
    """
    if not isinstance(raw, str):
        raise ValueError(f"'{raw}' is not a duration")
    value = raw.strip()
    if value in ("0", "+0", "-0"):
        return timedelta(0)
    if not _DURATION_RE.match(value):
        raise ValueError(f"'{raw}' is not a duration")

    sign = -1 if value.startswith("-") else 1
    seconds = sum(
        float(number) * _DURATION_UNITS[unit]
        for number, unit in _DURATION_PART_RE.findall(value.lstrip("+-"))
    )
    try:
        return timedelta(seconds=sign * seconds)
    except OverflowError:
        raise ValueError(f"'{raw}' is out of range") from None
