from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StudentContact:
    """Read-model: what the alert engine needs to know about a student."""

    student_id: int
    display_name: str
    student_code: str
    father_phone: Optional[str] = None
    mother_phone: Optional[str] = None

    @property
    def parent_phone(self) -> Optional[str]:
        """Father's phone, falling back to mother's."""
        return self.father_phone or self.mother_phone or None


def full_name(first: str, middle: Optional[str], last: str) -> str:
    parts = [first]
    if middle:
        parts.append(middle)
    parts.append(last)
    return " ".join(p.strip() for p in parts if p and p.strip())
