from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.constants import DEFAULT_ACTIVE_BOOKING_STATUSES
from .model import Booking, Child, EnrollmentSnapshot
from .repository import BookingRepository, ChildRepository


class EnrollmentSnapshotter:
    """Current roster per class, read fresh from bookings on every call."""

    def __init__(
        self,
        bookings: BookingRepository,
        children: ChildRepository,
        *,
        active_statuses: Iterable[str] = DEFAULT_ACTIVE_BOOKING_STATUSES,
    ):
        self._bookings = bookings
        self._children = children
        self._active = frozenset(s.strip().lower() for s in active_statuses)

    def is_active(self, booking: Booking) -> bool:
        return (booking.status or "").strip().lower() in self._active

    def roster(self, class_id: str, child_ids: Optional[Sequence[str]] = None) -> EnrollmentSnapshot:
        enrolled = dict.fromkeys(
            b.child_id for b in self._bookings.list_for_class(class_id) if b.class_id == class_id and self.is_active(b)
        )
        if child_ids is not None:
            wanted = set(child_ids)
            enrolled = {cid: None for cid in enrolled if cid in wanted}
        return EnrollmentSnapshot(class_id=class_id, child_ids=tuple(sorted(enrolled)))

    def counts_by_class(self, class_ids: Sequence[str]) -> dict[str, int]:
        seen: dict[str, set[str]] = {cid: set() for cid in class_ids}
        for b in self._bookings.list_for_classes(list(class_ids)):
            if b.class_id in seen and self.is_active(b):
                seen[b.class_id].add(b.child_id)
        return {cid: len(children) for cid, children in seen.items()}

    def roster_children(self, class_id: str) -> list[Child]:
        snapshot = self.roster(class_id)
        found = self._children.get_many(list(snapshot.child_ids))
        children = [found.get(cid) or Child(child_id=cid) for cid in snapshot.child_ids]
        children.sort(key=lambda c: (c.full_name.lower(), c.child_id))
        return children
