from __future__ import annotations

from enum import Enum


class Programme(str, Enum):
    """Programme a class template belongs to."""

    RECREATIONAL = "recreational"
    COMPETITION = "competition"


class RegisterState(str, Enum):
    """Editing lifecycle of a session's register."""

    TOO_EARLY = "TOO_EARLY"
    OPEN = "OPEN"
    LOCKED = "LOCKED"

    @property
    def writable(self) -> bool:
        return self is RegisterState.OPEN
