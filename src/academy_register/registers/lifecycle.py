"""Register editing window.

A register is TOO_EARLY until `lead_minutes` before the session starts, OPEN
from then until `lock_hours` after it ends, and LOCKED afterwards. Lower
bounds are inclusive and upper bounds exclusive, so the three states cover
every instant exactly once.

The same evaluation runs when a register sheet is opened and again inside
every save; a client-held "allowed" flag is never consulted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import parse_clock_time, require_aware
from ..core.constants import DEFAULT_LEAD_MINUTES, DEFAULT_LOCK_HOURS
from ..core.enums import RegisterState
from ..core.exceptions import LockedError, TooEarlyError, ValidationError
from ..sessions.model import session_bounds


@dataclass(frozen=True)
class RegisterWindow:
    starts_at: datetime
    ends_at: datetime
    opens_at: datetime
    locks_at: datetime

    @classmethod
    def from_bounds(
        cls,
        starts_at: datetime,
        ends_at: datetime,
        *,
        lead_minutes: int = DEFAULT_LEAD_MINUTES,
        lock_hours: int = DEFAULT_LOCK_HOURS,
    ) -> "RegisterWindow":
        return cls(
            starts_at=starts_at,
            ends_at=ends_at,
            opens_at=starts_at - timedelta(minutes=int(lead_minutes)),
            locks_at=ends_at + timedelta(hours=int(lock_hours)),
        )

    @classmethod
    def for_session(
        cls,
        *,
        session_date: date,
        start_time: Any,
        end_time: Any = None,
        duration_minutes: Optional[int] = None,
        zone: ZoneInfo,
        lead_minutes: int = DEFAULT_LEAD_MINUTES,
        lock_hours: int = DEFAULT_LOCK_HOURS,
    ) -> "RegisterWindow":
        start = parse_clock_time(start_time)
        end = parse_clock_time(end_time)
        if start is None and end is None:
            raise ValidationError("Class has no usable start or end time")
        if start is None:
            start, end = end, None
        starts_at, ends_at = session_bounds(session_date, start, end, duration_minutes, zone)
        return cls.from_bounds(starts_at, ends_at, lead_minutes=lead_minutes, lock_hours=lock_hours)

    def state_at(self, now: datetime) -> RegisterState:
        now = require_aware(now)
        if now < self.opens_at:
            return RegisterState.TOO_EARLY
        if now < self.locks_at:
            return RegisterState.OPEN
        return RegisterState.LOCKED

    def ensure_open(self, now: datetime) -> None:
        state = self.state_at(now)
        if state is RegisterState.TOO_EARLY:
            raise TooEarlyError("Register is not open yet", opens_at=self.opens_at)
        if state is RegisterState.LOCKED:
            raise LockedError("Register closed", locked_at=self.locks_at)


def guard_state(
    now: datetime,
    *,
    session_date: date,
    start_time: Any,
    end_time: Any = None,
    duration_minutes: Optional[int] = None,
    zone: ZoneInfo,
    lead_minutes: int = DEFAULT_LEAD_MINUTES,
    lock_hours: int = DEFAULT_LOCK_HOURS,
) -> RegisterState:
    window = RegisterWindow.for_session(
        session_date=session_date,
        start_time=start_time,
        end_time=end_time,
        duration_minutes=duration_minutes,
        zone=zone,
        lead_minutes=lead_minutes,
        lock_hours=lock_hours,
    )
    return window.state_at(now)
