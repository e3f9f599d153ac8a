from __future__ import annotations

import re
from typing import Any

from ..core.exceptions import ValidationError

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(_UUID_RE.match(value.strip()))


def require_uuid(value: Any, field_name: str) -> str:
    if not is_uuid(value):
        raise ValidationError(f"Invalid {field_name}")
    return value.strip().lower()


def require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"Invalid {field_name}")
    return value
