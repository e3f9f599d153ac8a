from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import Programme
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time, placeholders
from .model import ClassTemplate
from .repository import ClassRepository

_COLUMNS = """
    class_id, class_name, weekday, start_time, end_time, duration_minutes,
    capacity, age_min, age_max, is_competition_class, location
"""


def _to_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _safe_time(value: Any):
    # Bad TIME values stay raw so the projector can flag the template.
    try:
        return normalize_mysql_time(value)
    except (TypeError, ValueError):
        return value


def _row_to_template(r: dict) -> ClassTemplate:
    return ClassTemplate(
        class_id=str(r["class_id"]),
        class_name=(r.get("class_name") or "").strip() or "Unnamed class",
        weekday=r.get("weekday"),
        start_time=_safe_time(r.get("start_time")),
        end_time=_safe_time(r.get("end_time")),
        duration_minutes=int(r["duration_minutes"]) if r.get("duration_minutes") is not None else None,
        capacity=int(r["capacity"]) if r.get("capacity") is not None else None,
        age_min=_to_float(r.get("age_min")),
        age_max=_to_float(r.get("age_max")),
        programme=Programme.COMPETITION if r.get("is_competition_class") else Programme.RECREATIONAL,
        location=r.get("location"),
    )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: str) -> Optional[ClassTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM classes WHERE class_id=%s", (class_id,))
            r = fetchone(cur)
            return _row_to_template(r) if r else None

    def list_all(self) -> Sequence[ClassTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM classes ORDER BY class_name ASC")
            return [_row_to_template(r) for r in fetchall(cur)]

    def get_many(self, class_ids: Sequence[str]) -> dict[str, ClassTemplate]:
        ids = list(dict.fromkeys(class_ids))
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM classes WHERE class_id IN ({placeholders(ids)})",
                tuple(ids),
            )
            templates = [_row_to_template(r) for r in fetchall(cur)]
            return {t.class_id: t for t in templates}
