from __future__ import annotations

from typing import Protocol, Sequence

from .model import Booking, Child


class BookingRepository(Protocol):
    def list_for_class(self, class_id: str) -> Sequence[Booking]:
        raise NotImplementedError

    def list_for_classes(self, class_ids: Sequence[str]) -> Sequence[Booking]:
        raise NotImplementedError


class ChildRepository(Protocol):
    def get_many(self, child_ids: Sequence[str]) -> dict[str, Child]:
        """Children keyed by id; unknown ids are simply absent."""

        raise NotImplementedError
