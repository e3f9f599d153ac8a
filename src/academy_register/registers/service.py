from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional, Sequence
from zoneinfo import ZoneInfo

from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from ..classes.model import ClassTemplate, weekday_name
from ..classes.repository import ClassRepository
from ..common.datetime_utils import coerce_session_date, local_to_utc, now_utc, require_aware
from ..common.logging import get_logger
from ..common.validators import require_bool, require_uuid
from ..core.constants import DEFAULT_LEAD_MINUTES, DEFAULT_LOCK_HOURS, DEFAULT_SAVE_ATTEMPTS
from ..core.exceptions import ConflictError, NotFoundError, RegisterWindowError, ValidationError
from ..enrollment.repository import ChildRepository
from ..enrollment.service import EnrollmentSnapshotter
from .lifecycle import RegisterWindow
from .model import (
    AttendanceEntry,
    AttendanceRegister,
    CapturedEntry,
    EntryInput,
    RegisterHistoryRow,
    RegisterSheet,
    SaveResult,
)
from .repository import RegisterRepository

logger = get_logger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _has_captured_timing(register: Optional[AttendanceRegister]) -> bool:
    return bool(register and register.session_starts_at and register.session_ends_at)


class RegisterService:
    def __init__(
        self,
        registers: RegisterRepository,
        classes: ClassRepository,
        children: ChildRepository,
        enrollment: EnrollmentSnapshotter,
        *,
        zone: ZoneInfo,
        lead_minutes: int = DEFAULT_LEAD_MINUTES,
        lock_hours: int = DEFAULT_LOCK_HOURS,
        save_attempts: int = DEFAULT_SAVE_ATTEMPTS,
        retry_wait_seconds: float = 0.05,
    ):
        self._registers = registers
        self._classes = classes
        self._children = children
        self._enrollment = enrollment
        self._zone = zone
        self._lead_minutes = int(lead_minutes)
        self._lock_hours = int(lock_hours)
        self._save_attempts = max(int(save_attempts), 1)
        self._retry_wait_seconds = float(retry_wait_seconds)

    # ----- write side -------------------------------------------------------

    def save_register(
        self,
        class_id: Any,
        session_date: Any,
        taken_by_account_id: Any,
        entries: Sequence[EntryInput],
        *,
        now: datetime | None = None,
    ) -> SaveResult:
        """Persist the complete roster decision for one session.

        The lifecycle window is re-evaluated on every attempt; a ConflictError
        from the store replays the whole save, then propagates.
        """

        class_id = require_uuid(class_id, "classId")
        session_date = coerce_session_date(session_date)
        taken_by = require_uuid(taken_by_account_id, "takenByAccountId")
        submitted = self._parse_entries(entries)

        retrying = Retrying(
            retry=retry_if_exception_type(ConflictError),
            stop=stop_after_attempt(self._save_attempts),
            wait=wait_fixed(self._retry_wait_seconds),
            before_sleep=self._log_conflict,
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                return self._save_once(class_id, session_date, taken_by, submitted, now=now)

    def _save_once(
        self,
        class_id: str,
        session_date: date,
        taken_by: str,
        submitted: list[tuple[str, bool]],
        *,
        now: datetime | None,
    ) -> SaveResult:
        now = require_aware(now) if now is not None else now_utc()

        template = self._get_template(class_id)
        existing = self._registers.find_register(class_id, session_date)
        if not _has_captured_timing(existing):
            self._require_weekday(template, session_date)

        child_ids = [cid for cid, _ in submitted]
        children = self._children.get_many(child_ids)
        missing = [cid for cid in child_ids if cid not in children]
        if missing:
            raise NotFoundError(f"Unknown childId(s): {', '.join(missing)}")

        snapshot = self._enrollment.roster(class_id, child_ids)
        not_enrolled = [cid for cid in child_ids if cid not in snapshot]
        if not_enrolled:
            raise ValidationError(f"Child(ren) not enrolled in this class: {', '.join(not_enrolled)}")

        window = self._window_for(template, session_date, existing)
        try:
            window.ensure_open(now)
        except RegisterWindowError as exc:
            logger.info(
                "register_save_rejected",
                class_id=class_id,
                session_date=session_date.isoformat(),
                reason=exc.code,
            )
            raise

        captured = [
            CapturedEntry(child_id=cid, is_present=present, requires_pickup=children[cid].requires_pickup)
            for cid, present in submitted
        ]
        result = self._registers.save_atomic(
            class_id=class_id,
            session_date=session_date,
            taken_by_account_id=taken_by,
            taken_at=now,
            session_starts_at=window.starts_at,
            session_ends_at=window.ends_at,
            entries=captured,
        )
        logger.info(
            "register_saved",
            register_id=result.register_id,
            class_id=class_id,
            session_date=session_date.isoformat(),
            present=result.present_count,
            absent=result.absent_count,
        )
        return result

    @staticmethod
    def _parse_entries(entries: Sequence[EntryInput]) -> list[tuple[str, bool]]:
        if not entries:
            raise ValidationError("entries must be non-empty")

        parsed: list[tuple[str, bool]] = []
        seen: set[str] = set()
        for entry in entries:
            child_id = require_uuid(getattr(entry, "child_id", None), "childId in entries")
            is_present = require_bool(getattr(entry, "is_present", None), "isPresent in entries")
            if child_id in seen:
                raise ValidationError("Duplicate childId in entries")
            seen.add(child_id)
            parsed.append((child_id, is_present))
        return parsed

    @staticmethod
    def _log_conflict(retry_state: RetryCallState) -> None:
        logger.warning("register_save_conflict", attempt=retry_state.attempt_number)

    # ----- read side --------------------------------------------------------

    def find_register(self, class_id: Any, session_date: Any) -> Optional[AttendanceRegister]:
        return self._registers.find_register(require_uuid(class_id, "classId"), coerce_session_date(session_date))

    def find_entries(self, register_id: Any) -> list[AttendanceEntry]:
        return list(self._registers.find_entries(require_uuid(register_id, "registerId")))

    def find_registers_by_date(self, session_date: Any) -> list[RegisterHistoryRow]:
        session_date = coerce_session_date(session_date)
        registers = list(self._registers.find_by_date(session_date))
        templates = self._classes.get_many([r.class_id for r in registers])

        def sort_key(register: AttendanceRegister):
            template = templates.get(register.class_id)
            starts_at = self._session_start(register, template)
            return (
                starts_at is None,
                starts_at or _EPOCH,
                template.class_name if template else "",
                register.class_id,
            )

        rows = []
        for register in sorted(registers, key=sort_key):
            template = templates.get(register.class_id)
            rows.append(
                RegisterHistoryRow(
                    register=register,
                    class_name=template.class_name if template else "Unknown class",
                    programme=template.programme.value if template else "",
                    age_band=template.age_band if template else "",
                    start_time=template.start if template else None,
                    end_time=template.end if template else None,
                )
            )
        return rows

    def open_register(self, class_id: Any, session_date: Any, *, now: datetime | None = None) -> RegisterSheet:
        """Read-time view of a register: state, current roster and saved entries."""

        class_id = require_uuid(class_id, "classId")
        session_date = coerce_session_date(session_date)
        now = require_aware(now) if now is not None else now_utc()

        template = self._get_template(class_id)
        existing = self._registers.find_register(class_id, session_date)
        window = self._window_for(template, session_date, existing)
        entries = list(self._registers.find_entries(existing.register_id)) if existing else []

        return RegisterSheet(
            template=template,
            session_date=session_date,
            window=window,
            state=window.state_at(now),
            roster=self._enrollment.roster_children(class_id),
            register=existing,
            entries=entries,
        )

    # ----- helpers ----------------------------------------------------------

    def _get_template(self, class_id: str) -> ClassTemplate:
        template = self._classes.get_by_id(class_id)
        if not template:
            raise NotFoundError("Class not found")
        return template

    def _session_start(
        self, register: AttendanceRegister, template: Optional[ClassTemplate]
    ) -> Optional[datetime]:
        if register.session_starts_at:
            return register.session_starts_at
        start = template.start if template else None
        if start is None:
            return None
        return local_to_utc(register.session_date, start, self._zone)

    @staticmethod
    def _require_weekday(template: ClassTemplate, session_date: date) -> None:
        weekday = template.weekday_index
        if weekday is None:
            raise ValidationError("Class has no usable weekday")
        if session_date.weekday() != weekday:
            raise ValidationError(f"Class runs on {weekday_name(weekday)}, not on {session_date.isoformat()}")

    def _window_for(
        self,
        template: ClassTemplate,
        session_date: date,
        existing: Optional[AttendanceRegister],
    ) -> RegisterWindow:
        # Timing captured on an existing register wins over later template edits.
        if _has_captured_timing(existing):
            return RegisterWindow.from_bounds(
                existing.session_starts_at,
                existing.session_ends_at,
                lead_minutes=self._lead_minutes,
                lock_hours=self._lock_hours,
            )
        return RegisterWindow.for_session(
            session_date=session_date,
            start_time=template.start_time,
            end_time=template.end_time,
            duration_minutes=template.duration_minutes,
            zone=self._zone,
            lead_minutes=self._lead_minutes,
            lock_hours=self._lock_hours,
        )
