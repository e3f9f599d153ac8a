from __future__ import annotations

from datetime import datetime


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "domain_error"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class NotFoundError(DomainError):
    """Raised when a referenced class, child or register does not exist."""

    code = "not_found"


class RegisterWindowError(DomainError):
    """Raised when a register is outside its editable window."""


class TooEarlyError(RegisterWindowError):
    """The register opens later; the save can be retried once it is open."""

    code = "too_early"

    def __init__(self, message: str, *, opens_at: datetime):
        super().__init__(message)
        self.opens_at = opens_at


class LockedError(RegisterWindowError):
    """The register is closed for good."""

    code = "locked"

    def __init__(self, message: str, *, locked_at: datetime):
        super().__init__(message)
        self.locked_at = locked_at


class ConflictError(DomainError):
    """A concurrent transaction won; the whole save is safe to retry."""

    code = "conflict"
