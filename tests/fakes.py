from __future__ import annotations

import threading
import uuid
from collections import defaultdict
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from academy_register.classes.model import ClassTemplate
from academy_register.core.enums import Programme
from academy_register.core.exceptions import ConflictError
from academy_register.enrollment.model import Booking, Child
from academy_register.registers.model import AttendanceEntry, AttendanceRegister, CapturedEntry, SaveResult


def uid(n: int) -> str:
    return f"00000000-0000-4000-8000-{n:012d}"


CLASS_ID = uid(1)
ACCOUNT_ID = uid(900)


def tuesday_class(**overrides) -> ClassTemplate:
    data = dict(
        class_id=CLASS_ID,
        class_name="Tumble Tots",
        weekday="Tuesday",
        start_time="16:00",
        end_time="17:00",
        duration_minutes=60,
        capacity=12,
        age_min=4,
        age_max=6,
        programme=Programme.RECREATIONAL,
    )
    data.update(overrides)
    return ClassTemplate(**data)


class InMemoryClasses:
    def __init__(self, templates: Sequence[ClassTemplate] = ()):
        self.templates = {t.class_id: t for t in templates}

    def get_by_id(self, class_id: str) -> Optional[ClassTemplate]:
        return self.templates.get(class_id)

    def list_all(self):
        return sorted(self.templates.values(), key=lambda t: t.class_name)

    def get_many(self, class_ids):
        return {cid: self.templates[cid] for cid in class_ids if cid in self.templates}


class InMemoryBookings:
    def __init__(self, bookings: Sequence[Booking] = ()):
        self.bookings = list(bookings)
        self.calls = 0

    def list_for_class(self, class_id: str):
        self.calls += 1
        return [b for b in self.bookings if b.class_id == class_id]

    def list_for_classes(self, class_ids):
        self.calls += 1
        wanted = set(class_ids)
        return [b for b in self.bookings if b.class_id in wanted]


class InMemoryChildren:
    def __init__(self, children: Sequence[Child] = ()):
        self.children = {c.child_id: c for c in children}

    def get_many(self, child_ids):
        return {cid: self.children[cid] for cid in child_ids if cid in self.children}


class InMemoryRegisters:
    """Register store with the same all-or-nothing, per-key serialised save.

    Work is staged on copies and published in one step at the end, under a
    lock per (class_id, session_date).
    """

    def __init__(self):
        self.headers: dict[tuple[str, date], AttendanceRegister] = {}
        self.entries: dict[str, dict[str, AttendanceEntry]] = {}
        self.conflicts_to_raise = 0
        self.fail_mid_save = False
        self.on_stage: Optional[Callable[[], None]] = None
        self.save_calls = 0
        self._guard = threading.Lock()
        self._key_locks: dict[tuple[str, date], threading.Lock] = defaultdict(threading.Lock)

    def find_register(self, class_id: str, session_date: date) -> Optional[AttendanceRegister]:
        return self.headers.get((class_id, session_date))

    def find_entries(self, register_id: str):
        return sorted(self.entries.get(register_id, {}).values(), key=lambda e: e.child_id)

    def find_by_date(self, session_date: date):
        rows = [h for (_, d), h in self.headers.items() if d == session_date]
        return sorted(rows, key=lambda h: h.taken_at, reverse=True)

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
        key = (class_id, session_date)
        with self._guard:
            self.save_calls += 1
            if self.conflicts_to_raise:
                self.conflicts_to_raise -= 1
                raise ConflictError("deadlock")
            key_lock = self._key_locks[key]

        with key_lock:
            header = self.headers.get(key)
            register_id = header.register_id if header else str(uuid.uuid4())
            staged = dict(self.entries.get(register_id, {}))

            submitted = {e.child_id for e in entries}
            for child_id in list(staged):
                if child_id not in submitted:
                    del staged[child_id]

            if self.on_stage:
                self.on_stage()

            for e in entries:
                staged[e.child_id] = AttendanceEntry(
                    register_id=register_id,
                    child_id=e.child_id,
                    is_present=e.is_present,
                    requires_pickup=e.requires_pickup,
                )

            if self.fail_mid_save:
                raise RuntimeError("connection lost mid-transaction")

            present = sum(1 for e in staged.values() if e.is_present)
            absent = len(staged) - present
            if header:
                new_header = replace(
                    header,
                    taken_by_account_id=taken_by_account_id,
                    taken_at=taken_at,
                    present_count=present,
                    absent_count=absent,
                )
            else:
                new_header = AttendanceRegister(
                    register_id=register_id,
                    class_id=class_id,
                    session_date=session_date,
                    taken_by_account_id=taken_by_account_id,
                    taken_at=taken_at,
                    present_count=present,
                    absent_count=absent,
                    session_starts_at=session_starts_at,
                    session_ends_at=session_ends_at,
                )

            self.headers[key] = new_header
            self.entries[register_id] = staged

        return SaveResult(register_id=register_id, present_count=present, absent_count=absent)
