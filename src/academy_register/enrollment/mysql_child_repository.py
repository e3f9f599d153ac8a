from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, placeholders
from .model import Child
from .repository import ChildRepository


class MySQLChildRepository(ChildRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_many(self, child_ids: Sequence[str]) -> dict[str, Child]:
        ids = list(dict.fromkeys(child_ids))
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT child_id, first_name, last_name, picked_up
                FROM children
                WHERE child_id IN ({placeholders(ids)})
                """,
                tuple(ids),
            )
            return {
                str(r["child_id"]): Child(
                    child_id=str(r["child_id"]),
                    first_name=r.get("first_name"),
                    last_name=r.get("last_name"),
                    pickup_policy=r.get("picked_up"),
                )
                for r in fetchall(cur)
            }
