from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    return value.strip()


def require_int_range(value: int, field_name: str, *, low: int, high: Optional[int] = None) -> int:
    """Check ``low <= value`` and, when given, ``value < high``."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name} must be an integer")
    if value < low or (high is not None and value >= high):
        bound = f"[{low}, {high})" if high is not None else f">= {low}"
        raise ValidationError(f"{field_name} must be in {bound}")
    return value


def as_text(value: Any) -> str:
    """Stripped string form of a request value; None becomes ""."""
    return "" if value is None else str(value).strip()
