from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, db_transaction, fetchall, fetchone, placeholders
from .model import AttendanceEntry, AttendanceRegister, CapturedEntry, SaveResult
from .repository import RegisterRepository

_HEADER_COLUMNS = """
    register_id, class_id, session_date, taken_by_account_id, taken_at,
    present_count, absent_count, session_starts_at, session_ends_at
"""


def _to_db(value: Optional[datetime]) -> Optional[datetime]:
    # DATETIME columns hold naive UTC.
    if value is None:
        return None
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _from_db(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc)


def _row_to_register(r: dict) -> AttendanceRegister:
    return AttendanceRegister(
        register_id=str(r["register_id"]),
        class_id=str(r["class_id"]),
        session_date=r["session_date"],
        taken_by_account_id=str(r["taken_by_account_id"]),
        taken_at=_from_db(r["taken_at"]),
        present_count=int(r.get("present_count") or 0),
        absent_count=int(r.get("absent_count") or 0),
        session_starts_at=_from_db(r.get("session_starts_at")),
        session_ends_at=_from_db(r.get("session_ends_at")),
    )


class MySQLRegisterRepository(RegisterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_register(self, class_id: str, session_date: date) -> Optional[AttendanceRegister]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_HEADER_COLUMNS} FROM class_registers WHERE class_id=%s AND session_date=%s",
                (class_id, session_date),
            )
            r = fetchone(cur)
            return _row_to_register(r) if r else None

    def find_entries(self, register_id: str) -> Sequence[AttendanceEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT register_id, child_id, is_present, requires_pickup
                FROM register_entries
                WHERE register_id=%s
                ORDER BY child_id ASC
                """,
                (register_id,),
            )
            return [
                AttendanceEntry(
                    register_id=str(r["register_id"]),
                    child_id=str(r["child_id"]),
                    is_present=bool(r["is_present"]),
                    requires_pickup=bool(r["requires_pickup"]),
                )
                for r in fetchall(cur)
            ]

    def find_by_date(self, session_date: date) -> Sequence[AttendanceRegister]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_HEADER_COLUMNS}
                FROM class_registers
                WHERE session_date=%s
                ORDER BY taken_at DESC
                """,
                (session_date,),
            )
            return [_row_to_register(r) for r in fetchall(cur)]

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
        child_ids = [e.child_id for e in entries]

        with db_transaction(self._conn_factory, isolation_level="SERIALIZABLE") as (_, cur):
            # The upsert takes the unique-key row lock; a second writer for the
            # same (class_id, session_date) waits here until we commit.
            cur.execute(
                """
                INSERT INTO class_registers(
                    register_id, class_id, session_date, taken_by_account_id, taken_at,
                    present_count, absent_count, session_starts_at, session_ends_at
                )
                VALUES(%s,%s,%s,%s,%s,0,0,%s,%s)
                ON DUPLICATE KEY UPDATE
                    taken_by_account_id=VALUES(taken_by_account_id),
                    taken_at=VALUES(taken_at)
                """,
                (
                    str(uuid.uuid4()),
                    class_id,
                    session_date,
                    taken_by_account_id,
                    _to_db(taken_at),
                    _to_db(session_starts_at),
                    _to_db(session_ends_at),
                ),
            )

            cur.execute(
                "SELECT register_id FROM class_registers WHERE class_id=%s AND session_date=%s FOR UPDATE",
                (class_id, session_date),
            )
            header = fetchone(cur)
            if not header:
                raise RuntimeError("Register header missing after upsert")
            register_id = str(header["register_id"])

            cur.execute(
                f"DELETE FROM register_entries WHERE register_id=%s AND child_id NOT IN ({placeholders(child_ids)})",
                (register_id, *child_ids),
            )
            cur.executemany(
                """
                INSERT INTO register_entries(register_id, child_id, is_present, requires_pickup)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    is_present=VALUES(is_present),
                    requires_pickup=VALUES(requires_pickup)
                """,
                [(register_id, e.child_id, int(e.is_present), int(e.requires_pickup)) for e in entries],
            )

            # Counts come from what is actually persisted, never from the caller.
            cur.execute(
                """
                SELECT COUNT(*) AS total, COALESCE(SUM(is_present), 0) AS present
                FROM register_entries
                WHERE register_id=%s
                """,
                (register_id,),
            )
            totals = fetchone(cur) or {}
            present = int(totals.get("present") or 0)
            absent = int(totals.get("total") or 0) - present

            cur.execute(
                "UPDATE class_registers SET present_count=%s, absent_count=%s WHERE register_id=%s",
                (present, absent, register_id),
            )

        return SaveResult(register_id=register_id, present_count=present, absent_count=absent)
