from __future__ import annotations

from typing import Optional, Protocol

from .model import StudentContact


class StudentDirectory(Protocol):
    def get_contact(self, student_id: int) -> Optional[StudentContact]:
        raise NotImplementedError
