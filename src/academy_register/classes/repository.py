from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ClassTemplate


class ClassRepository(Protocol):
    """Read-only access to the class template catalog."""

    def get_by_id(self, class_id: str) -> Optional[ClassTemplate]:
        raise NotImplementedError

    def list_all(self) -> Sequence[ClassTemplate]:
        raise NotImplementedError

    def get_many(self, class_ids: Sequence[str]) -> dict[str, ClassTemplate]:
        raise NotImplementedError
