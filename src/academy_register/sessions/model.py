from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import local_to_utc
from ..core.enums import Programme


@dataclass(frozen=True)
class Session:
    """One concrete calendar occurrence of a class template (never persisted)."""

    session_id: str
    class_id: str
    class_name: str
    programme: Programme
    age_band: str
    session_date: date
    starts_at: datetime
    ends_at: datetime
    enrolled_count: int = 0
    location: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.session_id,
            "classId": self.class_id,
            "className": self.class_name,
            "programme": self.programme.value,
            "ageBand": self.age_band,
            "sessionDate": self.session_date.isoformat(),
            "startAt": self.starts_at.isoformat(),
            "endAt": self.ends_at.isoformat(),
            "bookedCount": self.enrolled_count,
            "location": self.location,
        }


@dataclass(frozen=True)
class SkippedTemplate:
    """Data-quality signal: a template the projector could not schedule."""

    class_id: str
    reason: str


@dataclass(frozen=True)
class ProjectionResult:
    sessions: list[Session] = field(default_factory=list)
    skipped: list[SkippedTemplate] = field(default_factory=list)


def session_bounds(
    session_date: date,
    start: time,
    end: Optional[time],
    duration_minutes: Optional[int],
    zone: ZoneInfo,
) -> tuple[datetime, datetime]:
    """UTC start/end instants of a session on a local date.

    An end time at or before the start crosses midnight; without an end time
    the duration applies, and without either the session has zero length.
    """

    starts_at = local_to_utc(session_date, start, zone)
    if end is not None:
        end_day = session_date + timedelta(days=1) if end <= start else session_date
        return starts_at, local_to_utc(end_day, end, zone)
    return starts_at, starts_at + timedelta(minutes=int(duration_minutes or 0))
