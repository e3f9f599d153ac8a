from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, placeholders
from .model import Booking
from .repository import BookingRepository


class MySQLBookingRepository(BookingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_class(self, class_id: str) -> Sequence[Booking]:
        return self.list_for_classes([class_id])

    def list_for_classes(self, class_ids: Sequence[str]) -> Sequence[Booking]:
        ids = list(dict.fromkeys(class_ids))
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT child_id, class_id, status FROM bookings WHERE class_id IN ({placeholders(ids)})",
                tuple(ids),
            )
            return [
                Booking(child_id=str(r["child_id"]), class_id=str(r["class_id"]), status=r.get("status"))
                for r in fetchall(cur)
            ]
