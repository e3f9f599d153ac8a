from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Optional

from ..classes.model import ClassTemplate
from ..core.enums import RegisterState
from ..enrollment.model import Child
from .lifecycle import RegisterWindow


@dataclass(frozen=True)
class EntryInput:
    """One submitted present/absent decision, as received from the caller."""

    child_id: Any
    is_present: Any


@dataclass(frozen=True)
class CapturedEntry:
    """A validated entry with the child's pickup policy captured at save time."""

    child_id: str
    is_present: bool
    requires_pickup: bool


@dataclass(frozen=True)
class AttendanceEntry:
    register_id: str
    child_id: str
    is_present: bool
    requires_pickup: bool

    def to_dict(self) -> dict:
        return {
            "registerId": self.register_id,
            "childId": self.child_id,
            "isPresent": self.is_present,
            "requiresPickup": self.requires_pickup,
        }


@dataclass(frozen=True)
class AttendanceRegister:
    """Domain entity: the attendance record of one session."""

    register_id: str
    class_id: str
    session_date: date
    taken_by_account_id: str
    taken_at: datetime
    present_count: int
    absent_count: int
    session_starts_at: Optional[datetime] = None
    session_ends_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "registerId": self.register_id,
            "classId": self.class_id,
            "sessionDate": self.session_date.isoformat(),
            "takenByAccountId": self.taken_by_account_id,
            "takenAt": self.taken_at.isoformat(),
            "presentCount": self.present_count,
            "absentCount": self.absent_count,
        }


@dataclass(frozen=True)
class SaveResult:
    register_id: str
    present_count: int
    absent_count: int

    def to_dict(self) -> dict:
        return {
            "registerId": self.register_id,
            "presentCount": self.present_count,
            "absentCount": self.absent_count,
        }


@dataclass(frozen=True)
class RegisterHistoryRow:
    """Read-model for browsing registers by date (joined with template metadata)."""

    register: AttendanceRegister
    class_name: str
    programme: str
    age_band: str
    start_time: Optional[time]
    end_time: Optional[time]

    def to_dict(self) -> dict:
        data = self.register.to_dict()
        data.update(
            {
                "className": self.class_name,
                "programme": self.programme,
                "ageBand": self.age_band,
                "startTime": self.start_time.strftime("%H:%M") if self.start_time else None,
                "endTime": self.end_time.strftime("%H:%M") if self.end_time else None,
            }
        )
        return data


@dataclass(frozen=True)
class RegisterSheet:
    """Everything needed to open a register for viewing or editing."""

    template: ClassTemplate
    session_date: date
    window: RegisterWindow
    state: RegisterState
    roster: list[Child] = field(default_factory=list)
    register: Optional[AttendanceRegister] = None
    entries: list[AttendanceEntry] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "classId": self.template.class_id,
            "className": self.template.class_name,
            "programme": self.template.programme.value,
            "ageBand": self.template.age_band,
            "sessionDate": self.session_date.isoformat(),
            "state": self.state.value,
            "canSave": self.state.writable,
            "opensAt": self.window.opens_at.isoformat(),
            "locksAt": self.window.locks_at.isoformat(),
            "students": [
                {"id": c.child_id, "fullName": c.full_name, "requiresPickup": c.requires_pickup}
                for c in self.roster
            ],
            "register": self.register.to_dict() if self.register else None,
            "entries": [e.to_dict() for e in self.entries],
        }
