from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def coerce_session_date(value: Any) -> date:
    """Accept a date or a YYYY-MM-DD string; anything else is a ValidationError."""

    if isinstance(value, datetime):
        raise ValidationError("sessionDate must be a calendar date, not a datetime")
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if len(raw) == 10:
            try:
                return parse_iso_date(raw)
            except ValueError:
                pass
    raise ValidationError("Invalid sessionDate")


def parse_clock_time(value: Any) -> Optional[time]:
    """Parse a wall-clock time of day.

    Accepts 'HH:MM' / 'HH:MM:SS' strings, datetime.time, and the timedelta
    values MySQL returns for TIME columns. Returns None when unparsable.
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds())
        if total_seconds < 0 or total_seconds >= 86400:
            return None
        return time(hour=total_seconds // 3600, minute=(total_seconds % 3600) // 60)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2 or len(parts) > 3:
            return None
        try:
            hour = int(parts[0])
            minute = int(parts[1])
        except ValueError:
            return None
        if not 0 <= hour <= 23 or not 0 <= minute <= 59:
            return None
        return time(hour=hour, minute=minute)

    return None


def get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {name!r}") from exc


def utc_offset_at(zone: ZoneInfo, instant: datetime) -> timedelta:
    """Offset of `zone` from UTC in effect at the aware `instant`."""

    offset = instant.astimezone(zone).utcoffset()
    return offset or timedelta(0)


def local_to_utc(day: date, clock: time, zone: ZoneInfo) -> datetime:
    """Convert a wall-clock time on a local date to an aware UTC instant.

    Two passes: start from the wall-clock reading taken as UTC, look up the
    zone offset in effect at that candidate, subtract it, and repeat once
    against the corrected candidate. Converges on both sides of a DST switch;
    non-existent spring-forward times land on the pre-switch offset.
    """

    wall = datetime.combine(day, clock).replace(tzinfo=timezone.utc)
    candidate = wall
    for _ in range(2):
        candidate = wall - utc_offset_at(zone, candidate)
    return candidate


def local_date(instant: datetime, zone: ZoneInfo) -> date:
    return instant.astimezone(zone).date()


def require_aware(value: datetime, field_name: str = "now") -> datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValidationError(f"{field_name} must be timezone-aware")
    return value


def now_utc() -> datetime:
    """Current instant in UTC.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)
