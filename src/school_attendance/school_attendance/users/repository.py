from __future__ import annotations

from typing import Protocol, Sequence

from .model import AdminContact


class UserDirectory(Protocol):
    """Lookup of admin users who receive attendance alerts.

    The alert engine depends on this protocol, not on a concrete database.
    """

    def find_admins(self) -> Sequence[AdminContact]:
        raise NotImplementedError
