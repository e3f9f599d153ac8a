from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Booking:
    """A child's booking onto a class template."""

    child_id: str
    class_id: str
    status: Optional[str]


@dataclass(frozen=True)
class Child:
    child_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    pickup_policy: Optional[str] = None

    @property
    def full_name(self) -> str:
        name = f"{(self.first_name or '').strip()} {(self.last_name or '').strip()}".strip()
        return name or "Unknown student"

    @property
    def requires_pickup(self) -> bool:
        # Only an explicit "yes" (may leave unaccompanied) waives pickup.
        return (self.pickup_policy or "").strip().lower() != "yes"


@dataclass(frozen=True)
class EnrollmentSnapshot:
    class_id: str
    child_ids: tuple[str, ...]

    @property
    def count(self) -> int:
        return len(self.child_ids)

    def __contains__(self, child_id: object) -> bool:
        return child_id in self.child_ids
