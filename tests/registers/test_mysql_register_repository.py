from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
from mysql.connector import errors as mysql_errors

from academy_register.core.exceptions import ConflictError
from academy_register.registers.model import CapturedEntry
from academy_register.registers.mysql_register_repository import MySQLRegisterRepository
from tests.fakes import ACCOUNT_ID, CLASS_ID, uid

REGISTER_ID = uid(500)


class ScriptedCursor:
    """Records statements; answers SELECTs from a queue of rows."""

    def __init__(self, rows, fail_on=None, error=None):
        self.rows = list(rows)
        self.statements = []
        self.fail_on = fail_on
        self.error = error
        self.closed = False

    def _run(self, sql, params):
        self.statements.append((" ".join(sql.split()), params))
        if self.fail_on and self.fail_on in sql:
            raise self.error

    def execute(self, sql, params=None):
        self._run(sql, params)

    def executemany(self, sql, seq):
        self._run(sql, list(seq))

    def fetchone(self):
        return self.rows.pop(0) if self.rows else None

    def fetchall(self):
        rows, self.rows = self.rows, []
        return rows

    def close(self):
        self.closed = True


class ScriptedConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.isolation_level = None
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def start_transaction(self, isolation_level=None):
        self.isolation_level = isolation_level

    def cursor(self, dictionary=False):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class ScriptedFactory:
    def __init__(self, conn):
        self.conn = conn

    def connect(self):
        return self.conn


def save(repo):
    return repo.save_atomic(
        class_id=CLASS_ID,
        session_date=date(2025, 6, 10),
        taken_by_account_id=ACCOUNT_ID,
        taken_at=datetime(2025, 6, 10, 15, 30, tzinfo=timezone.utc),
        session_starts_at=datetime(2025, 6, 10, 15, 0, tzinfo=timezone.utc),
        session_ends_at=datetime(2025, 6, 10, 16, 0, tzinfo=timezone.utc),
        entries=[
            CapturedEntry(child_id=uid(101), is_present=True, requires_pickup=False),
            CapturedEntry(child_id=uid(102), is_present=False, requires_pickup=True),
        ],
    )


def test_save_runs_in_one_serializable_transaction():
    cur = ScriptedCursor([{"register_id": REGISTER_ID}, {"total": 2, "present": 1}])
    conn = ScriptedConnection(cur)

    result = save(MySQLRegisterRepository(ScriptedFactory(conn)))

    assert (result.register_id, result.present_count, result.absent_count) == (REGISTER_ID, 1, 1)
    assert conn.isolation_level == "SERIALIZABLE"
    assert conn.committed and not conn.rolled_back and conn.closed

    kinds = [sql.split()[0] for sql, _ in cur.statements]
    assert kinds == ["INSERT", "SELECT", "DELETE", "INSERT", "SELECT", "UPDATE"]

    upsert_params = cur.statements[0][1]
    # naive UTC in DATETIME columns
    assert upsert_params[4] == datetime(2025, 6, 10, 15, 30)
    assert upsert_params[5] == datetime(2025, 6, 10, 15, 0)

    delete_sql, delete_params = cur.statements[2]
    assert "NOT IN (%s,%s)" in delete_sql
    assert delete_params == (REGISTER_ID, uid(101), uid(102))

    assert cur.statements[3][1] == [(REGISTER_ID, uid(101), 1, 0), (REGISTER_ID, uid(102), 0, 1)]
    assert cur.statements[5][1] == (1, 1, REGISTER_ID)


@pytest.mark.parametrize("errno", [1213, 1205, 1062])
def test_retryable_database_errors_become_conflicts(errno):
    error = mysql_errors.DatabaseError(msg="lock trouble", errno=errno)
    cur = ScriptedCursor([{"register_id": REGISTER_ID}], fail_on="DELETE", error=error)
    conn = ScriptedConnection(cur)

    with pytest.raises(ConflictError):
        save(MySQLRegisterRepository(ScriptedFactory(conn)))

    assert conn.rolled_back and not conn.committed and conn.closed


def test_other_database_errors_propagate_unchanged():
    error = mysql_errors.DatabaseError(msg="table missing", errno=1146)
    cur = ScriptedCursor([], fail_on="INSERT INTO class_registers", error=error)
    conn = ScriptedConnection(cur)

    with pytest.raises(mysql_errors.DatabaseError):
        save(MySQLRegisterRepository(ScriptedFactory(conn)))

    assert conn.rolled_back and not conn.committed


def test_find_register_reads_utc_datetimes():
    row = {
        "register_id": REGISTER_ID,
        "class_id": CLASS_ID,
        "session_date": date(2025, 6, 10),
        "taken_by_account_id": ACCOUNT_ID,
        "taken_at": datetime(2025, 6, 10, 15, 30),
        "present_count": 6,
        "absent_count": 4,
        "session_starts_at": datetime(2025, 6, 10, 15, 0),
        "session_ends_at": None,
    }
    conn = ScriptedConnection(ScriptedCursor([row]))

    register = MySQLRegisterRepository(ScriptedFactory(conn)).find_register(CLASS_ID, date(2025, 6, 10))

    assert register.taken_at == datetime(2025, 6, 10, 15, 30, tzinfo=timezone.utc)
    assert register.session_ends_at is None
    assert (register.present_count, register.absent_count) == (6, 4)
