from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class AdminContact:
    """Read-model of an admin user that can receive alerts."""

    user_id: int
    username: str
    role: Role
    phone_number: Optional[str] = None
