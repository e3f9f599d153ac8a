from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceEntry, AttendanceRegister, CapturedEntry, SaveResult


class RegisterRepository(Protocol):
    def find_register(self, class_id: str, session_date: date) -> Optional[AttendanceRegister]:
        raise NotImplementedError

    def find_entries(self, register_id: str) -> Sequence[AttendanceEntry]:
        raise NotImplementedError

    def find_by_date(self, session_date: date) -> Sequence[AttendanceRegister]:
        raise NotImplementedError

    def save_atomic(
        self,
        *,
        class_id: str,
        session_date: date,
        taken_by_account_id: str,
        taken_at: datetime,
        session_starts_at: datetime,
        session_ends_at: datetime,
        entries: Sequence[CapturedEntry],
    ) -> SaveResult:
        """Upsert the header, replace the entry set, recompute the counts.

        All in one transaction keyed by (class_id, session_date): persisted
        entries equal `entries` afterwards, or nothing changed at all.
        Session timing is only recorded when the register is first created.
        Raises ConflictError when a concurrent save forces a rollback.
        """

        raise NotImplementedError
