from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional, Union

from ..common.datetime_utils import parse_clock_time
from ..core.enums import Programme

WeekdayValue = Union[int, str, None]

_MONDAY_FIRST = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

_WEEKDAY_ALIASES = {
    "mon": 0,
    "monday": 0,
    "tue": 1,
    "tues": 1,
    "tuesday": 1,
    "wed": 2,
    "wednesday": 2,
    "thu": 3,
    "thur": 3,
    "thurs": 3,
    "thursday": 3,
    "fri": 4,
    "friday": 4,
    "sat": 5,
    "saturday": 5,
    "sun": 6,
    "sunday": 6,
}


def normalize_weekday(value: WeekdayValue) -> Optional[int]:
    """Map a stored weekday to Python's Monday=0 .. Sunday=6.

    Integers 1-7 are read Monday-first; 0 can only be Sunday-first (Sunday).
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        if 1 <= value <= 7:
            return value - 1
        if value == 0:
            return 6
        return None
    if isinstance(value, str):
        raw = value.strip().lower()
        if raw.isdigit():
            return normalize_weekday(int(raw))
        return _WEEKDAY_ALIASES.get(raw)
    return None


def weekday_name(weekday: int) -> str:
    return _MONDAY_FIRST[weekday].capitalize()


def _fmt_age(value: float) -> str:
    return f"{value:g}"


def age_band_label(age_min: Optional[float], age_max: Optional[float]) -> str:
    if age_min is None and age_max is None:
        return "All ages"
    if age_min is not None and age_max is not None:
        return f"{_fmt_age(age_min)}-{_fmt_age(age_max)}yrs"
    if age_min is not None:
        return f"{_fmt_age(age_min)}+yrs"
    return f"Up to {_fmt_age(age_max)}yrs"


@dataclass(frozen=True)
class ClassTemplate:
    """Domain entity: a recurring weekly class definition.

    Raw weekday/time values are kept as stored; parsing happens through the
    properties so one malformed row never breaks loading the catalog.
    """

    class_id: str
    class_name: str
    weekday: WeekdayValue
    start_time: object
    end_time: object = None
    duration_minutes: Optional[int] = None
    capacity: Optional[int] = None
    age_min: Optional[float] = None
    age_max: Optional[float] = None
    programme: Programme = Programme.RECREATIONAL
    location: Optional[str] = None

    @property
    def weekday_index(self) -> Optional[int]:
        return normalize_weekday(self.weekday)

    @property
    def start(self) -> Optional[time]:
        return parse_clock_time(self.start_time)

    @property
    def end(self) -> Optional[time]:
        return parse_clock_time(self.end_time)

    @property
    def age_band(self) -> str:
        return age_band_label(self.age_min, self.age_max)
