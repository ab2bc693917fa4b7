from __future__ import annotations

from typing import Iterable

from ..core.exceptions import ValidationError


def require_positive_int(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if number <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return number


def unique_in_order(values: Iterable[int]) -> list[int]:
    """Drop repeated ids, keeping first occurrence order."""
    seen: set[int] = set()
    out: list[int] = []
    for v in values:
        if v in seen:
            continue
        seen.add(v)
        out.append(v)
    return out
